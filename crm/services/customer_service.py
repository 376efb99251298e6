"""Customer lookup, maintenance and contact search."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from django.core.exceptions import ValidationError

from crm.exceptions import BackendError
from crm.forms.customer_forms import CustomerForm
from crm.forms.base import errors_as_text

from .supabase_client import BACKEND_ERRORS, error_message, require_client

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2

# tables whose rows keep a customer from being deleted, with the reason shown
DEPENDENT_TABLES = (
    ("sample_requests", "sample requests"),
    ("activities", "activities"),
)


def _escape_like(term: str) -> str:
    """Strip characters that would break a PostgREST ``or`` filter."""

    return "".join(ch for ch in term if ch not in ",()").strip()


def search_customers(term: str, limit: int = 10) -> List[Dict[str, Any]]:
    """Return customers whose name or search name contains ``term``."""

    term = _escape_like(term or "")
    if len(term) < MIN_SEARCH_LENGTH:
        return []
    try:
        return (
            require_client()
            .table("customers")
            .select("customer_code, customer_name, search_name")
            .or_(f"customer_name.ilike.%{term}%,search_name.ilike.%{term}%")
            .order("customer_name")
            .limit(limit)
            .execute()
            .data
        ) or []
    except BACKEND_ERRORS as exc:
        logger.exception("Customer search failed")
        raise BackendError(f"Failed to search customers: {error_message(exc)}") from exc


def search_contacts(customer_code: Optional[str], term: str, limit: int = 10) -> List[Dict[str, Any]]:
    """Return contacts of ``customer_code`` whose first name contains ``term``."""

    term = (term or "").strip()
    if not customer_code or len(term) < MIN_SEARCH_LENGTH:
        return []
    try:
        return (
            require_client()
            .table("contacts")
            .select("id, first_name, last_name, position, email, telephone")
            .eq("customer_code", customer_code)
            .ilike("first_name", f"%{term}%")
            .order("first_name")
            .limit(limit)
            .execute()
            .data
        ) or []
    except BACKEND_ERRORS as exc:
        logger.exception("Contact search failed for customer %s", customer_code)
        raise BackendError(f"Failed to search contacts: {error_message(exc)}") from exc


def get_customer(customer_code: str) -> Optional[Dict[str, Any]]:
    try:
        rows = (
            require_client()
            .table("customers")
            .select("*")
            .eq("customer_code", customer_code)
            .limit(1)
            .execute()
            .data
        )
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to load customer %s", customer_code)
        raise BackendError(f"Failed to load customer: {error_message(exc)}") from exc
    return rows[0] if rows else None


def _validated(data: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    form = CustomerForm(data=data, partial=partial)
    if not form.is_valid():
        raise ValidationError(errors_as_text(form))
    return form.payload()


def create_customer(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Insert a customer after validation and return the stored row."""

    payload = _validated(data)
    try:
        rows = require_client().table("customers").insert(payload).execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to create customer %s", payload.get("customer_code"))
        raise BackendError(f"Failed to create customer: {error_message(exc)}") from exc
    logger.info("Customer %s created", payload["customer_code"])
    return rows[0] if rows else payload


def update_customer(customer_code: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    payload = _validated(data, partial=True)
    payload.pop("customer_code", None)
    if not payload:
        raise ValidationError("No fields to update")
    try:
        rows = (
            require_client()
            .table("customers")
            .update(payload)
            .eq("customer_code", customer_code)
            .execute()
            .data
        )
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to update customer %s", customer_code)
        raise BackendError(f"Failed to update customer: {error_message(exc)}") from exc
    if not rows:
        raise BackendError(f"Customer {customer_code} was not updated")
    return rows[0]


def delete_customer(customer_code: str) -> Tuple[bool, str]:
    """Delete a customer that has no sample requests or activities."""

    client = require_client()
    for table, label in DEPENDENT_TABLES:
        try:
            rows = (
                client.table(table)
                .select("id")
                .eq("customer_code", customer_code)
                .limit(1)
                .execute()
                .data
            )
        except BACKEND_ERRORS:
            logger.exception("Error checking %s for customer %s", table, customer_code)
            return False, "Failed to verify customer data before deletion"
        if rows:
            return False, f"This customer has existing {label} and cannot be deleted."

    try:
        client.table("customers").delete().eq("customer_code", customer_code).execute()
    except BACKEND_ERRORS as exc:
        logger.exception("Error deleting customer %s", customer_code)
        return False, error_message(exc) or "Failed to delete customer"
    logger.info("Customer %s deleted", customer_code)
    return True, "Customer deleted successfully"
