import pytest
from django.core.exceptions import ValidationError

from crm.exceptions import BackendError
from crm.services import customer_service

from conftest import api_error


@pytest.fixture
def customers(fake_supabase):
    fake_supabase.tables["customers"] = [
        {"customer_code": "C001", "customer_name": "Bangkok Bistro", "search_name": "BKK BISTRO"},
        {"customer_code": "C002", "customer_name": "Siam Hotel", "search_name": "SIAM"},
        {"customer_code": "C003", "customer_name": "Phuket Resort", "search_name": "BISTRO PHUKET"},
    ]
    fake_supabase.tables["contacts"] = [
        {"id": 1, "customer_code": "C001", "first_name": "Somchai", "last_name": "K"},
        {"id": 2, "customer_code": "C001", "first_name": "Anna", "last_name": "L"},
        {"id": 3, "customer_code": "C002", "first_name": "Somsak", "last_name": "P"},
    ]
    return fake_supabase


def test_search_customers_matches_name_or_search_name(customers):
    result = customer_service.search_customers("bistro")
    assert [r["customer_code"] for r in result] == ["C001", "C003"]


def test_search_customers_needs_two_characters(customers):
    assert customer_service.search_customers("b") == []
    assert customer_service.search_customers(" (,) ") == []
    assert customers.queries == []


def test_search_contacts_is_scoped_to_customer(customers):
    result = customer_service.search_contacts("C001", "som")
    assert [r["id"] for r in result] == [1]
    assert customer_service.search_contacts(None, "som") == []


def test_create_customer_validates(customers):
    with pytest.raises(ValidationError) as excinfo:
        customer_service.create_customer({"customer_code": " ", "customer_name": ""})
    assert "Customer name is required" in str(excinfo.value)

    created = customer_service.create_customer(
        {"customer_code": " C004 ", "customer_name": "New Place", "search_name": ""}
    )
    assert created["customer_code"] == "C004"
    assert created["search_name"] is None


def test_update_customer_is_partial(customers):
    updated = customer_service.update_customer("C002", {"customer_name": "Siam Grand", "customer_code": "X"})
    assert updated["customer_name"] == "Siam Grand"
    assert updated["customer_code"] == "C002"
    assert updated["search_name"] == "SIAM"


def test_update_customer_missing_row(customers):
    with pytest.raises(BackendError):
        customer_service.update_customer("NOPE", {"customer_name": "x"})
    with pytest.raises(ValidationError):
        customer_service.update_customer("C001", {})


def test_delete_customer_blocked_by_dependents(customers):
    customers.tables["activities"] = [{"id": 9, "customer_code": "C001"}]
    ok, message = customer_service.delete_customer("C001")
    assert not ok
    assert message == "This customer has existing activities and cannot be deleted."


def test_delete_customer(customers):
    assert customer_service.delete_customer("C003") == (True, "Customer deleted successfully")
    assert [r["customer_code"] for r in customers.rows("customers")] == ["C001", "C002"]


def test_delete_customer_check_failure(customers):
    customers.failures["sample_requests"] = api_error("down")
    assert customer_service.delete_customer("C003") == (
        False,
        "Failed to verify customer data before deletion",
    )
    assert len(customers.rows("customers")) == 3


def test_search_failure_raises(customers):
    customers.failures["customers"] = api_error("down")
    with pytest.raises(BackendError, match="Failed to search customers: down"):
        customer_service.search_customers("bistro")
