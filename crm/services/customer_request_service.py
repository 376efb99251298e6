"""Customer maintenance requests: new customers awaiting admin approval."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from django.core.exceptions import ValidationError
from django.utils import timezone

from crm.exceptions import BackendError, RecordNotFound
from crm.forms.base import errors_as_text
from crm.forms.customer_request_forms import CustomerRequestForm

from . import notification_service
from .scope import Requester
from .supabase_client import BACKEND_ERRORS, error_message, require_client

logger = logging.getLogger(__name__)

TABLE = "customer_requests"
STATUSES = ("draft", "pending", "approved", "rejected")
EMAIL_FUNCTION = "send-customer-request-email"


def list_requests(requester: Requester, search: str = "") -> List[Dict[str, Any]]:
    """Return requests newest first; non-admins only see their own code's.

    ``search`` matches ``customer_name`` or ``search_name`` case-insensitively.
    """

    query = require_client().table(TABLE).select("*").order("created_at", desc=True)
    if not requester.is_admin:
        if not requester.spp_code:
            return []
        query = query.eq("salesperson_code", requester.spp_code)
    try:
        rows = query.execute().data or []
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to fetch customer requests")
        raise BackendError(f"Failed to fetch customer requests: {error_message(exc)}") from exc

    needle = (search or "").strip().lower()
    if not needle:
        return rows
    return [
        row
        for row in rows
        if needle in (row.get("customer_name") or "").lower()
        or needle in (row.get("search_name") or "").lower()
    ]


def is_visible(requester: Requester, row: Mapping[str, Any]) -> bool:
    """Admins see every request; others only those filed under their code."""

    if requester.is_admin:
        return True
    return bool(requester.spp_code) and row.get("salesperson_code") == requester.spp_code


def get_request(requester: Requester, request_id: str) -> Optional[Dict[str, Any]]:
    """Return the request, or ``None`` when it is missing or not visible."""

    try:
        rows = require_client().table(TABLE).select("*").eq("id", request_id).limit(1).execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to fetch customer request %s", request_id)
        raise BackendError(f"Failed to fetch customer request: {error_message(exc)}") from exc
    if not rows:
        return None
    if not is_visible(requester, rows[0]):
        logger.warning("Customer request %s is outside the scope of user %s", request_id, requester.user_id)
        return None
    return rows[0]


def _require_request(requester: Requester, request_id: str) -> Dict[str, Any]:
    row = get_request(requester, request_id)
    if row is None:
        raise RecordNotFound(f"Customer request {request_id} not found")
    return row


def _validated(data: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    form = CustomerRequestForm(data=data, partial=partial)
    if not form.is_valid():
        raise ValidationError(errors_as_text(form))
    return form.payload()


def create_request(
    requester: Requester, data: Mapping[str, Any], is_draft: bool = False
) -> Dict[str, Any]:
    """Store a new request as ``draft`` or ``pending``.

    Submitted (non-draft) requests notify every admin; a failed notification
    is logged but does not undo the request.
    """

    payload = _validated(data)
    if not requester.is_admin and requester.spp_code:
        payload["salesperson_code"] = requester.spp_code
    payload["status"] = "draft" if is_draft else "pending"
    try:
        rows = require_client().table(TABLE).insert(payload).execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to create customer request")
        raise BackendError(f"Failed to submit customer request: {error_message(exc)}") from exc
    created = rows[0] if rows else payload

    if not is_draft:
        ok, message = notification_service.create_admin_notification(
            "customer_request",
            str(created.get("id", "")),
            "New Customer Request",
            f"A new customer request for {payload['customer_name']} is awaiting approval.",
            sender_id=requester.user_id,
        )
        if not ok:
            logger.warning("Admin notification for customer request failed: %s", message)
    return created


def update_request(requester: Requester, request_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Change the request's details.

    The status is not touched here; approval goes through :func:`update_status`.
    Non-admins cannot move a request to another salesperson.
    """

    _require_request(requester, request_id)
    payload = _validated(data, partial=True)
    if not requester.is_admin:
        payload.pop("salesperson_code", None)
    if not payload:
        raise ValidationError("No fields to update")
    return _update(request_id, payload)


def _checked_status(status: str) -> str:
    if status not in STATUSES:
        raise ValidationError(f"Invalid status: {status}")
    return status


def _update(request_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    payload["updated_at"] = timezone.now().isoformat()
    try:
        rows = require_client().table(TABLE).update(payload).eq("id", request_id).execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to update customer request %s", request_id)
        raise BackendError(f"Failed to update customer request: {error_message(exc)}") from exc
    if not rows:
        raise BackendError(f"Customer request {request_id} was not updated")
    return rows[0]


def update_status(request_id: str, status: str) -> Dict[str, Any]:
    return _update(request_id, {"status": _checked_status(status)})


def delete_request(requester: Requester, request_id: str) -> None:
    _require_request(requester, request_id)
    try:
        require_client().table(TABLE).delete().eq("id", request_id).execute()
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to delete customer request %s", request_id)
        raise BackendError(f"Failed to delete customer request: {error_message(exc)}") from exc
    logger.info("Customer request %s deleted", request_id)


def send_request_email(requester: Requester, request_id: str, email: str) -> Any:
    """Ask the mail edge function to send the request to ``email``."""

    if not email:
        raise ValidationError("An email address is required")
    _require_request(requester, request_id)
    try:
        return require_client().functions.invoke(
            EMAIL_FUNCTION, invoke_options={"body": {"requestId": request_id, "email": email}}
        )
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to send email for customer request %s", request_id)
        raise BackendError(f"Failed to send email notification: {error_message(exc)}") from exc


def get_salesperson_name(salesperson_code: Optional[str]) -> Optional[str]:
    if not salesperson_code:
        return None
    try:
        rows = (
            require_client()
            .table("profiles")
            .select("full_name")
            .eq("spp_code", salesperson_code)
            .limit(1)
            .execute()
            .data
        )
    except BACKEND_ERRORS:
        logger.warning("Could not look up salesperson %s", salesperson_code, exc_info=True)
        return None
    return rows[0].get("full_name") if rows else None
