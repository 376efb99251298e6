"""TTL caching for slow-changing Supabase lookups.

Reference tables such as ``public_holidays`` change a few times a year but
are read on every report request. ``get_cached`` wraps a zero-argument
fetcher; ``get_cached_by_key`` keeps one such wrapper per key (for example
one per calendar year).
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, TypeVar

from django.conf import settings

logger = logging.getLogger(__name__)


T = TypeVar("T")


def default_ttl() -> int:
    return int(getattr(settings, "SALESDESK_LOOKUP_CACHE_TTL", 300))


@dataclass
class _CacheState(Generic[T]):
    value: T | None = None
    time: float | None = None


def get_cached(fetch_func: Callable[[], T], ttl: int | None = None) -> Callable[..., T]:
    """Return a callable that caches ``fetch_func`` results for ``ttl`` seconds.

    ``force=True`` bypasses the cache. When a refresh raises and an earlier
    value exists, the stale value is returned and the failure is logged.
    Cache state and the lock are exposed as ``_state`` and ``_lock`` so tests
    can reset them.
    """

    lock = threading.Lock()
    state: _CacheState[T] = _CacheState()

    def wrapper(force: bool = False) -> T:
        lifetime = default_ttl() if ttl is None else ttl
        with lock:
            now = time.time()
            if (
                not force
                and state.value is not None
                and state.time is not None
                and now - state.time < lifetime
            ):
                return state.value

            try:
                state.value = fetch_func()
            except Exception:
                if state.value is not None:
                    logger.exception("Failed to refresh cached value, serving stale copy")
                    return state.value
                raise
            state.time = now
            return state.value

    wrapper._state = state  # type: ignore[attr-defined]
    wrapper._lock = lock  # type: ignore[attr-defined]
    return wrapper


def get_cached_by_key(
    fetch_func: Callable[[Hashable], T], ttl: int | None = None
) -> Callable[..., T]:
    """Like :func:`get_cached` but keyed on the single argument of ``fetch_func``."""

    wrappers: Dict[Hashable, Callable[..., T]] = {}
    lock = threading.Lock()

    def lookup(key: Hashable, force: bool = False) -> T:
        with lock:
            cached = wrappers.get(key)
            if cached is None:
                cached = get_cached(lambda: fetch_func(key), ttl)
                wrappers[key] = cached
        return cached(force=force)

    def clear() -> None:
        with lock:
            wrappers.clear()

    lookup.clear = clear  # type: ignore[attr-defined]
    return lookup


__all__ = ["get_cached", "get_cached_by_key", "default_ttl"]
