"""Month-to-date sales report.

Daily sales, running totals and year-over-year variance come pre-computed
from the ``get_daily_sales_mtd`` database function. This module resolves
who the report is for, normalises the rows and derives the summary figures
(working days, daily averages and target achievement).
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Set

from django.utils import timezone

from crm.exceptions import BackendError

from .scope import Requester, resolve_salesperson
from .supabase_cache import get_cached_by_key
from .supabase_client import BACKEND_ERRORS, NO_ROWS_CODE, error_code, error_message, require_client

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = (
    "current_year_sales",
    "previous_year_sales",
    "running_total_current_year",
    "running_total_previous_year",
    "variance_percent",
)


@dataclass
class MTDSummary:
    current_year_total: float = 0.0
    previous_year_total: float = 0.0
    total_variance_percent: float = 0.0
    current_year_avg_daily: float = 0.0
    previous_year_avg_daily: float = 0.0
    working_days_passed: int = 0
    total_working_days: int = 0
    target_amount: float = 0.0
    target_achievement_percent: float = 0.0


@dataclass
class MTDReport:
    year: int
    month: int
    salesperson_code: Optional[str]
    target_type: str
    data: List[Dict[str, Any]] = field(default_factory=list)
    summary: MTDSummary = field(default_factory=MTDSummary)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _load_holidays(year: int) -> Set[date]:
    rows = (
        require_client()
        .table("public_holidays")
        .select("holiday_date")
        .gte("holiday_date", f"{year}-01-01")
        .lte("holiday_date", f"{year}-12-31")
        .execute()
        .data
    )
    return {date.fromisoformat(str(row["holiday_date"])[:10]) for row in rows or []}


get_holidays = get_cached_by_key(_load_holidays)


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def normalise_row(row: Dict[str, Any]) -> Dict[str, Any]:
    day = {
        "day_of_month": int(row.get("day_of_month") or 0),
        "weekday_name": (row.get("weekday_name") or "").strip(),
        "is_weekend": bool(row.get("is_weekend")),
        "is_holiday": bool(row.get("is_holiday")),
    }
    for name in NUMERIC_FIELDS:
        day[name] = _to_float(row.get(name))
    return day


def is_working_day(day: date, holidays: Set[date]) -> bool:
    return day.weekday() < 5 and day not in holidays


def working_days(year: int, month: int, holidays: Set[date], today: date) -> Dict[str, int]:
    """Count working days in the month and those already passed.

    For the current month only days up to and including ``today`` count as
    passed; for any other month every working day does.
    """

    days_in_month = calendar.monthrange(year, month)[1]
    is_current_month = (today.year, today.month) == (year, month)
    total = passed = 0
    for number in range(1, days_in_month + 1):
        if not is_working_day(date(year, month, number), holidays):
            continue
        total += 1
        if not is_current_month or number <= today.day:
            passed += 1
    return {"total_working_days": total, "working_days_passed": passed}


def get_target_amount(year: int, month: int, salesperson_code: Optional[str]) -> float:
    """Return the individual or aggregated sales target, 0 when unavailable."""

    client = require_client()
    if salesperson_code:
        rpc, params = "get_sales_target_amount", {
            "p_year": year,
            "p_month": month,
            "p_salesperson_code": salesperson_code,
        }
    else:
        rpc, params = "get_aggregated_sales_target_amount", {"p_year": year, "p_month": month}
    try:
        data = client.rpc(rpc, params).execute().data
    except BACKEND_ERRORS as exc:
        if error_code(exc) != NO_ROWS_CODE:
            logger.error("Error fetching sales target via %s: %s", rpc, error_message(exc))
        return 0.0
    return _to_float(data)


def build_summary(
    rows: List[Dict[str, Any]], target: float, days: Dict[str, int]
) -> MTDSummary:
    final = rows[-1] if rows else {}
    passed = days["working_days_passed"]
    summary = MTDSummary(
        current_year_total=final.get("running_total_current_year", 0.0),
        previous_year_total=final.get("running_total_previous_year", 0.0),
        total_variance_percent=final.get("variance_percent", 0.0),
        working_days_passed=passed,
        total_working_days=days["total_working_days"],
        target_amount=target,
    )
    if passed > 0:
        summary.current_year_avg_daily = summary.current_year_total / passed
        summary.previous_year_avg_daily = summary.previous_year_total / passed
    if target > 0:
        summary.target_achievement_percent = summary.current_year_total / target * 100
    return summary


def get_mtd_report(
    requester: Requester,
    year: int,
    month: int,
    selected_salesperson: Optional[str] = None,
    include_delivery_fees: bool = False,
    include_credit_memos: bool = True,
    today: Optional[date] = None,
) -> MTDReport:
    """Return the MTD report for ``year``/``month`` as seen by ``requester``.

    Raises :class:`BackendError` when the daily sales function fails.
    """

    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    today = today or timezone.localdate()
    salesperson_code = resolve_salesperson(requester, selected_salesperson)
    report = MTDReport(
        year=year,
        month=month,
        salesperson_code=salesperson_code,
        target_type="individual" if salesperson_code else "aggregated",
    )

    if not requester.is_admin and not salesperson_code:
        logger.info("User %s has no salesperson code; MTD report is empty", requester.user_id)
        return report

    try:
        holidays = get_holidays(year)
    except BACKEND_ERRORS:
        logger.exception("Failed to load public holidays for %s", year)
        holidays = set()

    target = get_target_amount(year, month, salesperson_code)

    params = {
        "p_year": year,
        "p_month": month,
        "p_salesperson_code": salesperson_code,
        "p_is_admin": requester.is_admin,
        "p_include_delivery_fees": include_delivery_fees,
        "p_include_credit_memos": include_credit_memos,
    }
    logger.debug("Calling get_daily_sales_mtd with %s", params)
    try:
        raw = require_client().rpc("get_daily_sales_mtd", params).execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("get_daily_sales_mtd failed")
        raise BackendError(f"Failed to fetch MTD data: {error_message(exc)}") from exc

    report.data = [normalise_row(row) for row in raw or []]
    report.summary = build_summary(report.data, target, working_days(year, month, holidays, today))
    return report
