"""Group request rows into calendar months for list views."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence


def _parse(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def month_key(value: Any) -> Optional[str]:
    """Return ``YYYY-MM`` for a date, datetime or ISO string."""

    parsed = _parse(value)
    return parsed.strftime("%Y-%m") if parsed else None


def month_display_name(key: str) -> str:
    year, month = key.split("-")
    return date(int(year), int(month), 1).strftime("%B %Y")


def group_summary(rows: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    statuses = Counter(row.get("status") for row in rows if row.get("status"))
    priorities = Counter(row.get("priority") for row in rows if row.get("priority"))
    return {
        "total_requests": len(rows),
        "status_breakdown": dict(statuses),
        "priority_breakdown": dict(priorities),
    }


def group_requests_by_month(
    rows: Iterable[Mapping[str, Any]],
    expanded_months: Iterable[str] = (),
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Group ``rows`` by the month of ``created_at``, newest month first.

    Rows inside a group are newest first. The current month and any month in
    ``expanded_months`` are flagged ``is_expanded``. Rows without a parsable
    ``created_at`` are left out.
    """

    today = today or date.today()
    current = today.strftime("%Y-%m")
    expanded = set(expanded_months)
    groups: Dict[str, List[Mapping[str, Any]]] = {}
    for row in rows:
        key = month_key(row.get("created_at"))
        if key is not None:
            groups.setdefault(key, []).append(row)

    result = []
    for key in sorted(groups, reverse=True):
        members = sorted(groups[key], key=lambda r: str(r.get("created_at")), reverse=True)
        summary = group_summary(members)
        result.append(
            {
                "month_key": key,
                "display_name": month_display_name(key),
                "requests": members,
                "is_expanded": key == current or key in expanded,
                "summary": summary,
                "summary_text": summary_text(summary),
            }
        )
    return result


def summary_text(summary: Mapping[str, Any]) -> str:
    """Return e.g. ``"3 Pending, 1 Approved"`` ordered by count."""

    breakdown = summary.get("status_breakdown") or {}
    ordered = sorted(breakdown.items(), key=lambda item: item[1], reverse=True)
    return ", ".join(f"{count} {status.capitalize()}" for status, count in ordered if count)
