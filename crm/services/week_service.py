"""Business weeks as defined by the backend ``weeks`` table."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from .supabase_client import BACKEND_ERRORS, require_client

logger = logging.getLogger(__name__)

WEEK_COLUMNS = "year, week_number, start_date, end_date"
DEFAULT_MAX_WEEK = 52


def _weeks():
    return require_client().table("weeks")


def get_week(year: int, week: int) -> Optional[Dict[str, Any]]:
    try:
        rows = _weeks().select(WEEK_COLUMNS).eq("year", year).eq("week_number", week).limit(1).execute().data
    except BACKEND_ERRORS:
        logger.exception("Error fetching week %s/%s", year, week)
        return None
    return rows[0] if rows else None


def get_weeks_for_year(year: int) -> List[Dict[str, Any]]:
    try:
        return _weeks().select(WEEK_COLUMNS).eq("year", year).order("week_number").execute().data or []
    except BACKEND_ERRORS:
        logger.exception("Error fetching weeks for %s", year)
        return []


def get_current_week_number(day: Optional[date] = None) -> int:
    """Return the business week containing ``day``; 1 when none matches."""

    day = day or date.today()
    day_str = day.isoformat()
    try:
        rows = (
            _weeks()
            .select("week_number, start_date, end_date")
            .eq("year", day.year)
            .lte("start_date", day_str)
            .gte("end_date", day_str)
            .limit(1)
            .execute()
            .data
        )
    except BACKEND_ERRORS:
        logger.warning("Could not determine week for %s", day_str, exc_info=True)
        return 1
    if not rows:
        logger.warning("No week contains %s, defaulting to week 1", day_str)
        return 1
    return int(rows[0]["week_number"])


def get_max_week_number(year: int) -> int:
    try:
        rows = (
            _weeks()
            .select("week_number")
            .eq("year", year)
            .order("week_number", desc=True)
            .limit(1)
            .execute()
            .data
        )
    except BACKEND_ERRORS:
        logger.exception("Error fetching max week number for %s", year)
        return DEFAULT_MAX_WEEK
    return int(rows[0]["week_number"]) if rows else DEFAULT_MAX_WEEK


def is_valid_week(year: int, week: int) -> bool:
    return 1 <= week <= get_max_week_number(year)


def format_week_period(year: int, week: int) -> str:
    """Return ``"DD/MM to DD/MM"`` or ``"Week N, YYYY"`` when unknown."""

    data = get_week(year, week)
    if not data:
        return f"Week {week}, {year}"
    start = date.fromisoformat(str(data["start_date"])[:10])
    end = date.fromisoformat(str(data["end_date"])[:10])
    return f"{start:%d/%m} to {end:%d/%m}"


def ensure_weeks_populated(year: int) -> bool:
    """Fill the ``weeks`` table for ``year`` when it is empty.

    Returns ``True`` when weeks exist afterwards.
    """

    try:
        existing = _weeks().select("week_number").eq("year", year).execute().data
        if existing:
            return True
        require_client().rpc("populate_weeks_table", {"start_year": year, "end_year": year}).execute()
    except BACKEND_ERRORS:
        logger.exception("Error populating weeks for %s", year)
        return False
    logger.info("Populated weeks for %s", year)
    return True
