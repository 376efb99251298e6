"""Admin management of backend user profiles."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Tuple

from django.core.exceptions import ValidationError
from django.utils import timezone

from crm.exceptions import BackendError
from crm.forms.base import errors_as_text
from crm.forms.user_forms import LEAVE_CREDIT_FIELDS, UserEditForm

from .supabase_client import (
    BACKEND_ERRORS,
    NO_ROWS_CODE,
    error_code,
    error_message,
    require_client,
)

logger = logging.getLogger(__name__)

RESET_PASSWORD_FUNCTION = "reset-user-password"


def list_profiles() -> List[Dict[str, Any]]:
    try:
        return require_client().table("profiles").select("*").order("full_name").execute().data or []
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to fetch profiles")
        raise BackendError(f"Failed to fetch users: {error_message(exc)}") from exc


def _audit(client, user_id: str, admin_id: str, change_type: str) -> None:
    try:
        client.table("user_audit_log").insert(
            {"user_id": user_id, "changed_by_admin_id": admin_id, "change_type": change_type}
        ).execute()
    except BACKEND_ERRORS:
        logger.warning("Failed to write %s audit entry for %s", change_type, user_id, exc_info=True)


def build_profile_update(cleaned: Mapping[str, Any]) -> Dict[str, Any]:
    spp_code = (cleaned.get("spp_code") or "").strip()
    update = {
        "full_name": cleaned["full_name"],
        "role": cleaned["role"],
        "spp_code": spp_code or None,
        "updated_at": timezone.now().isoformat(),
    }
    for name in LEAVE_CREDIT_FIELDS:
        value = cleaned.get(name)
        update[name] = float(value) if value is not None else None
    return update


def update_user(user_id: str, form_data: Mapping[str, Any], admin_id: str) -> Tuple[bool, str]:
    """Update a profile and optionally reset the user's password.

    Returns ``(ok, message)``. Audit log failures are only logged.
    """

    if not admin_id:
        return False, "Authentication required to update user"
    form = UserEditForm(data=form_data)
    if not form.is_valid():
        raise ValidationError(errors_as_text(form))

    client = require_client()
    update = build_profile_update(form.cleaned_data)
    try:
        client.table("profiles").update(update).eq("id", user_id).execute()
    except BACKEND_ERRORS as exc:
        if error_code(exc) == NO_ROWS_CODE:
            logger.error("Row level security refused update of %s by %s", user_id, admin_id)
            return False, "Permission denied: You do not have rights to update this user"
        logger.exception("Profile update failed for %s", user_id)
        return False, f"Update failed: {error_message(exc)}"

    reset = bool(form.cleaned_data.get("generate_password") and form.cleaned_data.get("password"))
    if reset:
        try:
            client.functions.invoke(
                RESET_PASSWORD_FUNCTION,
                invoke_options={
                    "body": {
                        "userId": user_id,
                        "newPassword": form.cleaned_data["password"],
                        "adminId": admin_id,
                    }
                },
            )
        except BACKEND_ERRORS as exc:
            logger.exception("Password reset failed for %s", user_id)
            return False, f"Password reset failed: {error_message(exc)}"
        _audit(client, user_id, admin_id, "password_reset")

    _audit(client, user_id, admin_id, "profile_updated")
    logger.info("Profile %s updated by %s", user_id, admin_id)
    if reset:
        return True, "User updated successfully with new password"
    return True, "User updated successfully"
