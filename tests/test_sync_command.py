from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from conftest import api_error


def test_sync_command_runs_and_refreshes(fake_supabase):
    fake_supabase.rpc_results["manual_sync_all_items_to_stock"] = {
        "success": True,
        "total_items": 3,
        "updated_records": 2,
        "inserted_records": 1,
        "duration_seconds": 0.5,
    }
    out = StringIO()
    call_command("sync_items_stock", "--refresh-view", stdout=out)
    output = out.getvalue()
    assert "Synced 3 items: 2 updated, 1 inserted in 0.50s." in output
    assert "Stock summary view refreshed successfully" in output


def test_sync_command_failure(fake_supabase):
    fake_supabase.failures[("rpc", "manual_sync_all_items_to_stock")] = api_error("boom")
    with pytest.raises(CommandError, match="Database sync function failed: boom"):
        call_command("sync_items_stock", stdout=StringIO())


def test_sync_command_statistics(fake_supabase):
    out = StringIO()
    call_command("sync_items_stock", "--stats", "7", stdout=out)
    assert "total_syncs: 0" in out.getvalue()
    assert fake_supabase.rpc_calls == []
