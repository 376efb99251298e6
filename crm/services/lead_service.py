"""Lead search, the lead center list and its pipeline statistics."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

from django.core.exceptions import ValidationError
from django.utils import timezone

from crm.exceptions import BackendError
from crm.forms.lead_forms import LeadEditForm
from crm.forms.base import errors_as_text

from .list_utils import page_range
from .supabase_client import BACKEND_ERRORS, error_message, require_client

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
LEAD_CENTER_SELECT = (
    "*, contact:contacts (id, first_name, last_name, email),"
    " customer:customers (customer_code, customer_name)"
)
CLOSED_WON = "closed_won"
CLOSED_LOST = "closed_lost"
OPEN_STATUSES = ("contacted",)
IN_PROGRESS_STATUSES = ("meeting_scheduled", "samples_sent", "samples_followed_up", "negotiating")
HIGH_VALUE_THRESHOLD = 50000
TREND_MONTHS = 6
STATS_COLUMNS = (
    "status, estimated_value, close_probability, lead_source, priority, next_step_due, created_at, updated_at"
)


def search_leads(term: str, limit: int = 10) -> List[Dict[str, Any]]:
    term = (term or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        return []
    try:
        return (
            require_client()
            .table("leads")
            .select("id, customer_name, contact_name")
            .ilike("customer_name", f"%{term}%")
            .order("customer_name")
            .limit(limit)
            .execute()
            .data
        ) or []
    except BACKEND_ERRORS as exc:
        logger.exception("Lead search failed")
        raise BackendError(f"Failed to search leads: {error_message(exc)}") from exc


def _as_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [v for v in value.split(",") if v]
    return list(value)


def _shape_lead(row: Dict[str, Any]) -> Dict[str, Any]:
    lead = dict(row)
    contact = row.get("contact")
    if contact:
        name = f"{contact.get('first_name') or ''} {contact.get('last_name') or ''}".strip()
        lead["contact"] = {
            "id": contact.get("id"),
            "contact_name": name,
            "email": contact.get("email"),
            "first_name": contact.get("first_name"),
            "last_name": contact.get("last_name"),
        }
    else:
        lead["contact"] = None
    customer = row.get("customer")
    lead["customer"] = (
        {"customer_code": customer.get("customer_code"), "customer_name": customer.get("customer_name")}
        if customer
        else None
    )
    return lead


def list_lead_center(
    filters: Optional[Mapping[str, Any]] = None, page: int = 1, limit: int = 50
) -> Dict[str, Any]:
    """Return one page of ``lead_center`` rows and the total match count.

    ``filters`` keys: ``status``, ``priority`` and ``assigned_to`` (any of the
    given values), ``lead_source`` (substring), ``next_step_due_from`` and
    ``next_step_due_to`` (inclusive window) and ``search`` (title,
    description or next step).
    """

    filters = filters or {}
    start, end = page_range(page, limit)
    query = (
        require_client()
        .table("lead_center")
        .select(LEAD_CENTER_SELECT, count="exact")
        .order("updated_at", desc=True)
        .range(start, end)
    )
    for column in ("status", "priority", "assigned_to"):
        values = _as_list(filters.get(column))
        if values:
            query = query.in_(column, values)
    if filters.get("lead_source"):
        query = query.ilike("lead_source", f"%{filters['lead_source']}%")
    if filters.get("next_step_due_from"):
        query = query.gte("next_step_due", str(filters["next_step_due_from"]))
    if filters.get("next_step_due_to"):
        query = query.lte("next_step_due", str(filters["next_step_due_to"]))
    search = "".join(ch for ch in str(filters.get("search") or "") if ch not in ",()").strip()
    if search:
        query = query.or_(
            f"lead_title.ilike.%{search}%,lead_description.ilike.%{search}%,next_step.ilike.%{search}%"
        )

    try:
        response = query.execute()
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to fetch leads")
        raise BackendError(f"Failed to fetch leads: {error_message(exc)}") from exc

    return {
        "results": [_shape_lead(row) for row in response.data or []],
        "count": response.count or 0,
        "page": max(int(page), 1),
        "limit": limit,
    }


def _parse_dt(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, timezone.get_default_timezone())
    return parsed


def _month_shift(day: date, months: int) -> date:
    index = day.year * 12 + day.month - 1 + months
    return date(index // 12, index % 12 + 1, 1)


def _monthly_trend(rows: List[Mapping[str, Any]], now: datetime) -> List[Dict[str, Any]]:
    this_month = date(now.year, now.month, 1)
    created = []
    for row in rows:
        when = _parse_dt(row.get("created_at"))
        if when is not None:
            when = when.astimezone(now.tzinfo)
            created.append((row, (when.year, when.month)))
    trend = []
    for offset in range(TREND_MONTHS - 1, -1, -1):
        month = _month_shift(this_month, -offset)
        in_month = [row for row, key in created if key == (month.year, month.month)]
        trend.append(
            {
                "month": month.strftime("%b %Y"),
                "leads": len(in_month),
                "conversions": sum(1 for row in in_month if row.get("status") == CLOSED_WON),
                "value": sum(_value(row) for row in in_month),
            }
        )
    return trend


def _value(row: Mapping[str, Any]) -> float:
    return float(row.get("estimated_value") or 0)


def _is_before(value, moment: datetime, missing: bool = False) -> bool:
    parsed = _parse_dt(value)
    if parsed is None:
        return missing
    return parsed < moment


def _days_to_close(row: Mapping[str, Any]) -> Optional[int]:
    created, closed = _parse_dt(row.get("created_at")), _parse_dt(row.get("updated_at"))
    if created is None or closed is None:
        return None
    return math.ceil((closed - created).total_seconds() / 86400)


def lead_center_stats(rows: Iterable[Mapping[str, Any]], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Summarise the pipeline for the lead center header.

    Status counts, value and average probability only consider rows that
    carry a status. A follow-up is overdue whenever ``next_step_due`` lies
    before ``now``, whatever the lead's status. ``monthly_trend`` covers the
    last six calendar months, oldest first.
    """

    now = now or timezone.now()
    rows = list(rows)
    valid = [row for row in rows if row.get("status")]
    week_ago = now - timedelta(days=7)

    won_rows = [row for row in rows if row.get("status") == CLOSED_WON]
    close_days = [days for days in (_days_to_close(row) for row in won_rows) if days is not None]
    avg_days = sum(close_days) / len(close_days) if close_days else 0

    lead_sources: Dict[str, int] = {}
    priorities: Dict[str, int] = {}
    for row in rows:
        source = row.get("lead_source") or "Unknown"
        lead_sources[source] = lead_sources.get(source, 0) + 1
        priority = row.get("priority") or "Unknown"
        priorities[priority] = priorities.get(priority, 0) + 1

    def with_status(statuses):
        return sum(1 for row in valid if row["status"] in statuses)

    return {
        "total": len(valid),
        "open": with_status(OPEN_STATUSES),
        "in_progress": with_status(IN_PROGRESS_STATUSES),
        "won": with_status((CLOSED_WON,)),
        "lost": with_status((CLOSED_LOST,)),
        "total_value": sum(_value(row) for row in valid),
        "avg_probability": (
            sum(float(row.get("close_probability") or 0) for row in valid) / len(valid) if valid else 0.0
        ),
        "overdue_followups": sum(1 for row in rows if _is_before(row.get("next_step_due"), now)),
        "this_week_conversions": sum(
            1 for row in won_rows if not _is_before(row.get("updated_at"), week_ago, missing=True)
        ),
        "avg_days_to_close": math.floor(avg_days + 0.5),
        "high_value_leads": sum(1 for row in rows if _value(row) > HIGH_VALUE_THRESHOLD),
        "active_leads": sum(1 for row in rows if row.get("status") not in (CLOSED_WON, CLOSED_LOST)),
        "conversion_rate": len(won_rows) / len(rows) * 100 if rows else 0.0,
        "lead_sources": lead_sources,
        "priority_distribution": priorities,
        "monthly_trend": _monthly_trend(rows, now),
    }


def fetch_lead_center_stats(now: Optional[datetime] = None) -> Dict[str, Any]:
    try:
        rows = (
            require_client()
            .table("lead_center")
            .select(STATS_COLUMNS)
            .execute()
            .data
        )
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to fetch lead statistics")
        raise BackendError(f"Failed to fetch lead statistics: {error_message(exc)}") from exc
    return lead_center_stats(rows or [], now=now)


def update_lead(lead_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate ``data`` with :class:`LeadEditForm` and update the lead."""

    form = LeadEditForm(data=data, partial=True)
    if not form.is_valid():
        raise ValidationError(errors_as_text(form))
    payload = form.payload()
    if not payload:
        raise ValidationError("No fields to update")
    payload["updated_at"] = timezone.now().isoformat()
    try:
        rows = require_client().table("lead_center").update(payload).eq("id", lead_id).execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to update lead %s", lead_id)
        raise BackendError(f"Failed to update lead: {error_message(exc)}") from exc
    if not rows:
        raise BackendError(f"Lead {lead_id} was not updated")
    return rows[0]
