"""Turnover figures for the sales dashboard.

Monthly turnover, cost and margin are aggregated by the
``get_accurate_monthly_turnover`` database function. Dates are always sent
as plain ``YYYY-MM-DD`` strings so no timezone shift can move a boundary
into the neighbouring month.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from crm.exceptions import BackendError

from .scope import Requester
from .supabase_client import BACKEND_ERRORS, require_client

logger = logging.getLogger(__name__)

TURNOVER_RPC = "get_accurate_monthly_turnover"
POSTING_DATE_TABLES = ("salesdata", "credit_memos", "consolidated_sales")
NUMERIC_FIELDS = ("total_turnover", "total_cost", "total_margin", "margin_percent")


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0


def _parse_month(value: Any) -> Optional[date]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(f"{value[:7]}-01")
    except ValueError:
        return None


def _call_turnover(params: Dict[str, Any], failure: str) -> List[Dict[str, Any]]:
    logger.debug("Calling %s with %s", TURNOVER_RPC, params)
    try:
        data = require_client().rpc(TURNOVER_RPC, params).execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Error calling %s", TURNOVER_RPC)
        raise BackendError(failure) from exc
    if not isinstance(data, list):
        logger.error("Unexpected data format from %s: %r", TURNOVER_RPC, data)
        return []
    return data


def get_monthly_turnover(
    requester: Requester,
    from_date: date,
    to_date: date,
    salesperson_code: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Return one row per month between ``from_date`` and ``to_date``.

    Admins see the whole company unless ``salesperson_code`` is given;
    everyone else sees their own figures.
    """

    from_date, to_date = _as_date(from_date), _as_date(to_date)
    start, end = _month_start(from_date), _month_end(to_date)
    filter_by_salesperson = bool(salesperson_code) if requester.is_admin else True
    effective_code = (
        salesperson_code if requester.is_admin and salesperson_code else requester.spp_code or ""
    )
    params = {
        "from_date": start.isoformat(),
        "to_date": end.isoformat(),
        "is_admin": requester.is_admin and not salesperson_code,
        "user_spp_code": effective_code if filter_by_salesperson else "",
    }
    rows = _call_turnover(params, "Failed to fetch monthly turnover")

    result = []
    for row in rows:
        month = _parse_month(row.get("month"))
        if month is None:
            logger.warning("Skipping turnover row with invalid month: %r", row)
            continue
        if not start <= month <= end:
            continue
        item = {"month": row["month"]}
        for name in NUMERIC_FIELDS:
            item[name] = _number(row.get(name))
        item["display_month"] = month.strftime("%B %Y")
        result.append(item)
    return result


def get_total_turnover(
    requester: Requester,
    from_date: date,
    to_date: date,
    salesperson_code: Optional[str] = None,
) -> float:
    rows = get_monthly_turnover(requester, from_date, to_date, salesperson_code)
    return sum(row["total_turnover"] for row in rows)


def get_company_turnover(from_date: date, to_date: date) -> float:
    params = {
        "from_date": _as_date(from_date).isoformat(),
        "to_date": _as_date(to_date).isoformat(),
        "is_admin": True,
        "user_spp_code": "",
    }
    rows = _call_turnover(params, "Failed to fetch company turnover")
    return sum(_number(row.get("total_turnover")) for row in rows)


def get_last_posting_date(
    requester: Requester, table: str, salesperson_code: Optional[str] = None
) -> Optional[date]:
    """Return the latest ``posting_date`` in ``table`` visible to ``requester``."""

    if table not in POSTING_DATE_TABLES:
        raise ValueError(f"Unsupported table: {table}")

    query = (
        require_client()
        .table(table)
        .select("posting_date")
        .order("posting_date", desc=True)
        .limit(1)
    )
    if requester.is_admin and salesperson_code:
        query = query.eq("salesperson_code", salesperson_code)
    elif not requester.is_admin and requester.spp_code:
        query = query.eq("salesperson_code", requester.spp_code)

    try:
        rows = query.execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Error fetching last posting date from %s", table)
        raise BackendError(f"Failed to fetch last posting date from {table}") from exc

    if not rows or not rows[0].get("posting_date"):
        return None
    try:
        return date.fromisoformat(str(rows[0]["posting_date"])[:10])
    except ValueError:
        logger.warning("Invalid posting_date in %s: %r", table, rows[0]["posting_date"])
        return None


def get_turnover_overview(
    requester: Requester,
    from_date: date,
    to_date: date,
    salesperson_code: Optional[str] = None,
) -> Dict[str, Any]:
    """Bundle every dashboard turnover figure in one dictionary."""

    monthly = get_monthly_turnover(requester, from_date, to_date, salesperson_code)
    return {
        "monthly_turnover": monthly,
        "total_turnover": sum(row["total_turnover"] for row in monthly),
        "total_company_turnover": get_company_turnover(from_date, to_date),
        "last_sales_date": get_last_posting_date(requester, "salesdata", salesperson_code),
        "last_credit_memo_date": get_last_posting_date(requester, "credit_memos", salesperson_code),
        "last_transaction_date": get_last_posting_date(
            requester, "consolidated_sales", salesperson_code
        ),
    }
