from datetime import datetime, timezone

import pytest
from django.urls import reverse

from conftest import api_error

pytestmark = pytest.mark.django_db


@pytest.fixture
def items(fake_supabase):
    fake_supabase.tables["items"] = [
        {"item_code": "A1", "description": "Apple", "brand": "X", "unit_price": 10, "pricelist": True},
        {"item_code": "B2", "description": "Banana", "brand": "Y", "unit_price": 2, "pricelist": False},
    ]
    return fake_supabase


def test_batch_update_requires_admin(sales_client, items):
    resp = sales_client.post(reverse("items_batch_update"), {"item_codes": ["A1"]}, format="json")
    assert resp.status_code == 403


def test_batch_update_view(admin_client, items):
    payload = {"item_codes": ["A1", "B2"], "unit_price": "12.5", "update_unit_price": True, "brand": "ignored"}
    resp = admin_client.post(reverse("items_batch_update"), payload, format="json")
    assert resp.status_code == 200
    assert resp.json()["updated_count"] == 2
    assert [r["unit_price"] for r in items.rows("items")] == [12.5, 12.5]
    assert [r["brand"] for r in items.rows("items")] == ["X", "Y"]


def test_batch_update_without_fields(admin_client, items):
    resp = admin_client.post(reverse("items_batch_update"), {"item_codes": ["A1"]}, format="json")
    assert resp.status_code == 400
    assert resp.json()["message"] == "No fields selected for update"


def test_batch_update_nothing_selected(admin_client, items):
    resp = admin_client.post(reverse("items_batch_update"), {"item_codes": [], "update_brand": True}, format="json")
    assert resp.status_code == 400
    assert resp.json()["message"] == "No items selected for update"


def test_batch_update_invalid_codes(admin_client, items):
    resp = admin_client.post(reverse("items_batch_update"), {"item_codes": "A1", "update_brand": True}, format="json")
    assert resp.status_code == 400


def test_batch_update_backend_failure(admin_client, items):
    items.failures[("items", "update")] = api_error("permission denied")
    resp = admin_client.post(
        reverse("items_batch_update"), {"item_codes": ["A1"], "brand": "Z", "update_brand": True}, format="json"
    )
    assert resp.status_code == 502
    assert resp.json()["errors"] == ["Chunk update failed: permission denied"]


def test_batch_delete_view(admin_client, items):
    resp = admin_client.post(reverse("items_batch_delete"), {"item_codes": ["B2"]}, format="json")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Successfully deleted all 1 items"
    assert [r["item_code"] for r in items.rows("items")] == ["A1"]


def test_items_export_view(sales_client, items):
    resp = sales_client.get(reverse("items_export") + "?item_codes=B2&item_codes=A1")
    assert resp.status_code == 200
    assert resp["Content-Disposition"] == 'attachment; filename="items_export.csv"'
    lines = resp.content.decode().splitlines()
    assert lines[0].startswith("Item Code,Description")
    assert lines[1].startswith('"A1","Apple"')


def test_items_export_nothing_selected(sales_client, items):
    resp = sales_client.get(reverse("items_export"))
    assert resp.status_code == 400
    assert resp.json()["message"] == "No items selected for export"


def test_stock_sync_status(admin_client, fake_supabase):
    resp = admin_client.get(reverse("items_stock_sync"), {"days": "3"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_running"] is False
    assert body["last_sync"] is None
    assert body["statistics"]["total_syncs"] == 0


def test_stock_sync_run(admin_client, fake_supabase):
    fake_supabase.rpc_results["manual_sync_all_items_to_stock"] = {"success": True, "total_items": 2, "updated_records": 2}
    resp = admin_client.post(reverse("items_stock_sync"), {"refresh_view": True}, format="json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["result"]["success"] is True
    assert body["refresh"]["success"] is True
    assert [name for name, _ in fake_supabase.rpc_calls] == ["manual_sync_all_items_to_stock", "refresh_stock_summary"]


def test_stock_sync_conflict_when_running(admin_client, fake_supabase):
    fake_supabase.tables["sync_logs"] = [
        {"sync_type": "manual_items_stock_sync", "status": "running", "created_at": datetime.now(timezone.utc).isoformat()}
    ]
    resp = admin_client.post(reverse("items_stock_sync"), {}, format="json")
    assert resp.status_code == 409
    assert fake_supabase.rpc_calls == []


def test_sync_validation_view(admin_client, fake_supabase):
    resp = admin_client.get(reverse("items_stock_sync_validate"))
    assert resp.status_code == 200
    assert resp.json()["is_valid"] is True
