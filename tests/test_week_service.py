from datetime import date

import pytest

from crm.services import week_service

from conftest import api_error


@pytest.fixture
def weeks(fake_supabase):
    fake_supabase.tables["weeks"] = [
        {"year": 2026, "week_number": 1, "start_date": "2025-12-29", "end_date": "2026-01-04"},
        {"year": 2026, "week_number": 2, "start_date": "2026-01-05", "end_date": "2026-01-11"},
        {"year": 2026, "week_number": 42, "start_date": "2026-10-12", "end_date": "2026-10-18"},
    ]
    return fake_supabase


def test_get_week_and_year(weeks):
    assert week_service.get_week(2026, 2)["start_date"] == "2026-01-05"
    assert week_service.get_week(2026, 3) is None
    assert [w["week_number"] for w in week_service.get_weeks_for_year(2026)] == [1, 2, 42]


def test_current_week_number(weeks):
    assert week_service.get_current_week_number(date(2026, 10, 14)) == 42
    assert week_service.get_current_week_number(date(2026, 6, 1)) == 1


def test_max_week_number(weeks):
    assert week_service.get_max_week_number(2026) == 42
    assert week_service.get_max_week_number(2030) == 52
    assert week_service.is_valid_week(2026, 42)
    assert not week_service.is_valid_week(2026, 43)
    assert not week_service.is_valid_week(2026, 0)


def test_format_week_period(weeks):
    assert week_service.format_week_period(2026, 42) == "12/10 to 18/10"
    assert week_service.format_week_period(2026, 7) == "Week 7, 2026"


def test_ensure_weeks_populated(weeks):
    assert week_service.ensure_weeks_populated(2026) is True
    assert weeks.rpc_calls == []
    assert week_service.ensure_weeks_populated(2027) is True
    assert weeks.rpc_calls == [("populate_weeks_table", {"start_year": 2027, "end_year": 2027})]


def test_backend_errors_use_fallbacks(weeks):
    weeks.failures["weeks"] = api_error("down")
    assert week_service.get_week(2026, 1) is None
    assert week_service.get_weeks_for_year(2026) == []
    assert week_service.get_current_week_number(date(2026, 10, 14)) == 1
    assert week_service.get_max_week_number(2026) == 52
    assert week_service.ensure_weeks_populated(2026) is False
