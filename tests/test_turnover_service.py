from datetime import date, datetime

import pytest

from crm.exceptions import BackendError
from crm.services import turnover_service
from crm.services.scope import Requester

from conftest import api_error

ADMIN = Requester(is_admin=True)
SALES = Requester(is_admin=False, spp_code="SPP01")

TURNOVER_ROWS = [
    {"month": "2026-07-01", "total_turnover": "1000", "total_cost": 600, "total_margin": 400, "margin_percent": 40},
    {"month": "2026-08-01", "total_turnover": 500, "total_cost": None, "total_margin": 100, "margin_percent": "NaN"},
    {"month": "2026-09-01", "total_turnover": 250},
    {"month": "bogus", "total_turnover": 1},
]


@pytest.fixture
def backend(fake_supabase):
    fake_supabase.rpc_results[turnover_service.TURNOVER_RPC] = TURNOVER_ROWS
    return fake_supabase


def test_monthly_turnover_rows_are_clipped_and_normalised(backend):
    rows = turnover_service.get_monthly_turnover(ADMIN, date(2026, 8, 15), date(2026, 9, 3))
    assert [r["month"] for r in rows] == ["2026-08-01", "2026-09-01"]
    assert rows[0]["total_cost"] == 0.0
    assert rows[0]["margin_percent"] == 0.0
    assert rows[0]["display_month"] == "August 2026"
    params = backend.rpc_calls[0][1]
    assert params == {"from_date": "2026-08-01", "to_date": "2026-09-30", "is_admin": True, "user_spp_code": ""}


def test_admin_can_filter_one_salesperson(backend):
    turnover_service.get_monthly_turnover(ADMIN, date(2026, 7, 1), date(2026, 9, 30), "SPP05")
    params = backend.rpc_calls[0][1]
    assert params["is_admin"] is False
    assert params["user_spp_code"] == "SPP05"


def test_non_admin_always_uses_own_code(backend):
    turnover_service.get_monthly_turnover(SALES, datetime(2026, 7, 1, 23, 30), date(2026, 9, 30), "SPP05")
    params = backend.rpc_calls[0][1]
    assert params["from_date"] == "2026-07-01"
    assert params["is_admin"] is False
    assert params["user_spp_code"] == "SPP01"


def test_total_and_company_turnover(backend):
    assert turnover_service.get_total_turnover(ADMIN, date(2026, 7, 1), date(2026, 9, 30)) == 1750
    assert turnover_service.get_company_turnover(date(2026, 7, 1), date(2026, 9, 30)) == 1751


def test_turnover_failure_raises(backend):
    backend.failures[("rpc", turnover_service.TURNOVER_RPC)] = api_error("boom")
    with pytest.raises(BackendError, match="Failed to fetch monthly turnover"):
        turnover_service.get_monthly_turnover(ADMIN, date(2026, 7, 1), date(2026, 9, 30))
    with pytest.raises(BackendError, match="Failed to fetch company turnover"):
        turnover_service.get_company_turnover(date(2026, 7, 1), date(2026, 9, 30))


def test_last_posting_date_scoped_to_salesperson(fake_supabase):
    fake_supabase.tables["salesdata"] = [
        {"posting_date": "2026-10-10", "salesperson_code": "SPP01"},
        {"posting_date": "2026-10-12T00:00:00", "salesperson_code": "SPP02"},
    ]
    assert turnover_service.get_last_posting_date(ADMIN, "salesdata") == date(2026, 10, 12)
    assert turnover_service.get_last_posting_date(SALES, "salesdata") == date(2026, 10, 10)
    assert turnover_service.get_last_posting_date(ADMIN, "credit_memos") is None


def test_last_posting_date_rejects_other_tables(fake_supabase):
    with pytest.raises(ValueError):
        turnover_service.get_last_posting_date(ADMIN, "profiles")


def test_turnover_overview(backend):
    backend.tables["consolidated_sales"] = [{"posting_date": "2026-09-29", "salesperson_code": "SPP01"}]
    overview = turnover_service.get_turnover_overview(SALES, date(2026, 7, 1), date(2026, 9, 30))
    assert overview["total_turnover"] == 1750
    assert overview["total_company_turnover"] == 1751
    assert overview["last_sales_date"] is None
    assert overview["last_transaction_date"] == date(2026, 9, 29)
