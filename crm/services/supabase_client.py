import logging
import os
from typing import Optional

import httpx
from supabase import (
    Client,
    FunctionsError,
    PostgrestAPIError,
    StorageException,
    SupabaseException,
    create_client,
)

from crm.exceptions import BackendUnavailable

logger = logging.getLogger(__name__)

# Errors the client library raises for a failed table, RPC, storage or edge
# function call, plus the transport errors it lets through unwrapped. Service
# code catches these and nothing broader.
BACKEND_ERRORS = (PostgrestAPIError, StorageException, FunctionsError, httpx.HTTPError)

# PostgREST code for "no rows" on single-row reads; also returned when a row
# level security policy hides the target row.
NO_ROWS_CODE = "PGRST116"

_client: Client | None = None


def get_supabase_client() -> Optional[Client]:
    """Return a cached Supabase client if available.

    The client is initialised using the ``SUPABASE_URL`` and ``SUPABASE_KEY``
    environment variables. If configuration is missing or the connection
    fails, ``None`` is returned and the error is logged. The initialisation
    is performed once and the resulting client is cached for subsequent
    calls.
    """

    global _client
    if _client is not None:
        return _client

    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_KEY")
    if not url or not key:
        logger.warning("Supabase is not configured")
        return None
    try:  # pragma: no cover - network interaction
        _client = create_client(url, key)
    except SupabaseException:  # pragma: no cover - network interaction
        logger.exception("Failed to initialise Supabase client")
        return None
    return _client


def require_client() -> Client:
    """Return the Supabase client or raise :class:`BackendUnavailable`."""
    client = get_supabase_client()
    if client is None:
        raise BackendUnavailable("Supabase is not configured")
    return client


def error_message(exc: Exception) -> str:
    """Return the human readable message carried by a backend error."""
    return getattr(exc, "message", None) or str(exc) or "Unknown error"


def error_code(exc: Exception) -> Optional[str]:
    return getattr(exc, "code", None)


def reset_client() -> None:
    """Forget the cached client so the next call re-reads the environment."""
    global _client
    _client = None
