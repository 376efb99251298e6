import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from supabase import PostgrestAPIError

from crm.exceptions import BackendUnavailable
from crm.services import supabase_cache, supabase_client

from conftest import DummyClient, api_error


def test_client_missing_configuration_returns_none():
    assert supabase_client.get_supabase_client() is None
    with pytest.raises(BackendUnavailable):
        supabase_client.require_client()


def test_client_created_once(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "url")
    monkeypatch.setenv("SUPABASE_KEY", "key")
    calls = []

    def fake_create(url, key):
        calls.append((url, key))
        return DummyClient()

    monkeypatch.setattr(supabase_client, "create_client", fake_create)
    first = supabase_client.get_supabase_client()
    second = supabase_client.require_client()
    assert first is second
    assert calls == [("url", "key")]

    supabase_client.reset_client()
    supabase_client.get_supabase_client()
    assert len(calls) == 2


def test_error_message_and_code():
    exc = api_error("no rows", code="PGRST116")
    assert supabase_client.error_message(exc) == "no rows"
    assert supabase_client.error_code(exc) == supabase_client.NO_ROWS_CODE
    assert supabase_client.error_message(ValueError("bad")) == "bad"
    assert supabase_client.error_message(ValueError()) == "Unknown error"


def test_get_cached_respects_ttl_and_force():
    calls = []

    def fetch():
        calls.append(1)
        return len(calls)

    cached = supabase_cache.get_cached(fetch, ttl=60)
    assert cached() == 1
    assert cached() == 1
    assert cached(force=True) == 2


def test_get_cached_serves_stale_value_on_failure():
    results = iter([{"a": 1}])

    def fetch():
        try:
            return next(results)
        except StopIteration:
            raise api_error("down")

    cached = supabase_cache.get_cached(fetch, ttl=0)
    assert cached() == {"a": 1}
    assert cached() == {"a": 1}


def test_get_cached_raises_without_previous_value():
    def fetch():
        raise api_error("down")

    cached = supabase_cache.get_cached(fetch)
    with pytest.raises(PostgrestAPIError):
        cached()


def test_get_cached_thread_safe():
    calls = []

    def slow_load():
        calls.append(1)
        time.sleep(0.01)
        return {"kg": ["g"]}

    cached = supabase_cache.get_cached(slow_load, ttl=60)
    with ThreadPoolExecutor(max_workers=5) as ex:
        list(ex.map(lambda _: cached(), range(5)))

    assert cached._state.value == {"kg": ["g"]}
    assert len(calls) == 1


def test_get_cached_by_key_keeps_one_entry_per_key():
    calls = []

    def fetch(year):
        calls.append(year)
        return {year}

    lookup = supabase_cache.get_cached_by_key(fetch, ttl=60)
    assert lookup(2025) == {2025}
    assert lookup(2026) == {2026}
    assert lookup(2025) == {2025}
    assert calls == [2025, 2026]

    lookup.clear()
    lookup(2025)
    assert calls == [2025, 2026, 2025]
