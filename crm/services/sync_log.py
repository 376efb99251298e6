import logging
from typing import Iterable, Optional

from .supabase_client import BACKEND_ERRORS, get_supabase_client

logger = logging.getLogger(__name__)

SYNC_STATUSES = ("running", "success", "partial", "failed")


def log_sync_operation(
    sync_type: str,
    status: str,
    records_processed: int = 0,
    records_inserted: int = 0,
    records_updated: int = 0,
    errors: Optional[Iterable[str]] = None,
    sync_duration_ms: int = 0,
) -> bool:
    """Record a sync or batch run in the ``sync_logs`` table.

    Returns ``True`` when the row was written. Failures are logged and
    reported as ``False``; they never interrupt the operation being logged.
    """
    if status not in SYNC_STATUSES:
        raise ValueError(f"Unknown sync status: {status}")

    client = get_supabase_client()
    if client is None:
        logger.warning("Sync log for %s not written: Supabase is not configured", sync_type)
        return False

    errors = list(errors or [])
    payload = {
        "sync_type": sync_type,
        "status": status,
        "records_processed": records_processed,
        "records_inserted": records_inserted,
        "records_updated": records_updated,
        "errors": errors or None,
        "sync_duration_ms": int(sync_duration_ms),
    }
    try:
        client.table("sync_logs").insert(payload).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to write sync log for %s", sync_type)
        return False
    logger.info(
        "%s finished with status %s (%s processed, %s updated, %s ms)",
        sync_type,
        status,
        records_processed,
        records_updated,
        payload["sync_duration_ms"],
    )
    return True
