from datetime import date

import pytest

from crm.exceptions import BackendError
from crm.services import mtd_service
from crm.services.scope import Requester

from conftest import api_error

ADMIN = Requester(is_admin=True)
SALES = Requester(is_admin=False, spp_code="SPP01", user_id="7")


def _daily_rows():
    return [
        {
            "day_of_month": 1,
            "weekday_name": "Thursday ",
            "current_year_sales": "100",
            "previous_year_sales": 80,
            "running_total_current_year": 100,
            "running_total_previous_year": 80,
            "variance_percent": 25,
            "is_weekend": False,
            "is_holiday": False,
        },
        {
            "day_of_month": 2,
            "weekday_name": "Friday",
            "current_year_sales": None,
            "previous_year_sales": 20,
            "running_total_current_year": 100,
            "running_total_previous_year": 100,
            "variance_percent": 0,
            "is_weekend": False,
            "is_holiday": True,
        },
    ]


@pytest.fixture
def backend(fake_supabase):
    fake_supabase.tables["public_holidays"] = [{"holiday_date": "2026-10-13"}, {"holiday_date": "2025-12-31"}]
    fake_supabase.rpc_results["get_daily_sales_mtd"] = _daily_rows()
    fake_supabase.rpc_results["get_aggregated_sales_target_amount"] = 1000
    fake_supabase.rpc_results["get_sales_target_amount"] = "400"
    return fake_supabase


def test_normalise_row_fills_defaults():
    row = mtd_service.normalise_row({"day_of_month": "3", "current_year_sales": "abc"})
    assert row["day_of_month"] == 3
    assert row["current_year_sales"] == 0.0
    assert row["weekday_name"] == ""
    assert row["is_weekend"] is False


def test_working_days_current_month_counts_up_to_today():
    holidays = {date(2026, 10, 13)}
    days = mtd_service.working_days(2026, 10, holidays, today=date(2026, 10, 15))
    # October 2026 has 22 weekdays, one of them a holiday
    assert days["total_working_days"] == 21
    # Oct 1,2,5,6,7,8,9,12,14,15
    assert days["working_days_passed"] == 10


def test_working_days_past_month_counts_every_day():
    days = mtd_service.working_days(2026, 9, set(), today=date(2026, 10, 15))
    assert days["working_days_passed"] == days["total_working_days"] == 22


def test_aggregated_report_for_admin(backend):
    report = mtd_service.get_mtd_report(ADMIN, 2026, 10, "all", today=date(2026, 10, 15))
    assert report.salesperson_code is None
    assert report.target_type == "aggregated"
    assert report.data[0]["weekday_name"] == "Thursday"
    assert report.data[1]["current_year_sales"] == 0.0
    summary = report.summary
    assert summary.current_year_total == 100
    assert summary.previous_year_total == 100
    assert summary.working_days_passed == 10
    assert summary.current_year_avg_daily == 10
    assert summary.target_amount == 1000
    assert summary.target_achievement_percent == 10

    name, params = backend.rpc_calls[-1]
    assert name == "get_daily_sales_mtd"
    assert params["p_salesperson_code"] is None
    assert params["p_is_admin"] is True
    assert params["p_include_credit_memos"] is True


def test_non_admin_report_is_forced_to_own_code(backend):
    report = mtd_service.get_mtd_report(SALES, 2026, 10, "SPP99", include_delivery_fees=True, today=date(2026, 10, 15))
    assert report.salesperson_code == "SPP01"
    assert report.target_type == "individual"
    assert report.summary.target_amount == 400
    calls = dict(backend.rpc_calls)
    assert calls["get_sales_target_amount"]["p_salesperson_code"] == "SPP01"
    assert calls["get_daily_sales_mtd"]["p_include_delivery_fees"] is True


def test_non_admin_without_code_gets_empty_report(backend):
    report = mtd_service.get_mtd_report(Requester(is_admin=False), 2026, 10)
    assert report.data == []
    assert report.summary.current_year_total == 0
    assert backend.rpc_calls == []


def test_missing_target_reads_as_zero(backend):
    backend.failures[("rpc", "get_aggregated_sales_target_amount")] = api_error("no rows", code="PGRST116")
    report = mtd_service.get_mtd_report(ADMIN, 2026, 10, today=date(2026, 10, 15))
    assert report.summary.target_amount == 0
    assert report.summary.target_achievement_percent == 0


def test_holiday_failure_falls_back_to_weekdays(backend):
    backend.failures["public_holidays"] = api_error("down")
    report = mtd_service.get_mtd_report(ADMIN, 2026, 10, today=date(2026, 10, 31))
    assert report.summary.total_working_days == 22


def test_holidays_are_cached_per_year(backend):
    mtd_service.get_holidays(2026)
    mtd_service.get_holidays(2026)
    reads = [q for q in backend.queries if q.name == "public_holidays"]
    assert len(reads) == 1
    assert mtd_service.get_holidays(2026) == {date(2026, 10, 13)}


def test_daily_sales_failure_raises(backend):
    backend.failures[("rpc", "get_daily_sales_mtd")] = api_error("timeout")
    with pytest.raises(BackendError, match="Failed to fetch MTD data: timeout"):
        mtd_service.get_mtd_report(ADMIN, 2026, 10)


def test_invalid_month():
    with pytest.raises(ValueError):
        mtd_service.get_mtd_report(ADMIN, 2026, 13)
