"""Items -> stock on hand synchronisation.

The sync itself is the ``manual_sync_all_items_to_stock`` database function;
this module triggers it, records the outcome in ``sync_logs`` and reads the
log back for status and statistics.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from crm.exceptions import BackendUnavailable

from .supabase_client import BACKEND_ERRORS, error_message, require_client
from .sync_log import log_sync_operation

logger = logging.getLogger(__name__)

SYNC_RPC = "manual_sync_all_items_to_stock"
REFRESH_RPC = "refresh_stock_summary"

MANUAL_SYNC_TYPES = ["manual_items_stock_sync", "manual_items_stock_sync_frontend"]
ALL_SYNC_TYPES = MANUAL_SYNC_TYPES + ["items_stock_sync_trigger"]
RUNNING_WINDOW = timedelta(minutes=5)


@dataclass
class SyncResult:
    success: bool
    total_items: int = 0
    updated_records: int = 0
    inserted_records: int = 0
    error_count: int = 0
    errors: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    started_at: str = ""
    completed_at: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SyncResult":
        return cls(
            success=bool(payload.get("success")),
            total_items=int(payload.get("total_items") or 0),
            updated_records=int(payload.get("updated_records") or 0),
            inserted_records=int(payload.get("inserted_records") or 0),
            error_count=int(payload.get("error_count") or 0),
            errors=list(payload.get("errors") or []),
            duration_seconds=float(payload.get("duration_seconds") or 0),
            started_at=payload.get("started_at") or "",
            completed_at=payload.get("completed_at") or "",
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _sync_status(result: SyncResult) -> str:
    if result.success:
        return "success"
    return "partial" if result.error_count > 0 else "failed"


def manual_sync_all_items() -> SyncResult:
    """Run the database sync and log its outcome.

    Failures never raise: a failed :class:`SyncResult` carrying the error
    message is returned instead.
    """

    started_at = _now()
    started = time.monotonic()
    try:
        client = require_client()
        data = client.rpc(SYNC_RPC, {}).execute().data
        payload = json.loads(data) if isinstance(data, str) else data
        if not isinstance(payload, dict):
            raise ValueError("unexpected result from sync function")
    except (*BACKEND_ERRORS, BackendUnavailable, ValueError) as exc:
        message = f"Database sync function failed: {error_message(exc)}"
        logger.error(message)
        duration_ms = int((time.monotonic() - started) * 1000)
        log_sync_operation(
            "manual_items_stock_sync_frontend",
            "failed",
            errors=[message],
            sync_duration_ms=duration_ms,
        )
        return SyncResult(
            success=False,
            error_count=1,
            errors=[message],
            duration_seconds=duration_ms / 1000,
            started_at=started_at.isoformat(),
            completed_at=_now().isoformat(),
        )

    result = SyncResult.from_payload(payload)
    log_sync_operation(
        "manual_items_stock_sync_frontend",
        _sync_status(result),
        records_processed=result.total_items,
        records_inserted=result.inserted_records,
        records_updated=result.updated_records,
        errors=result.errors,
        sync_duration_ms=int((time.monotonic() - started) * 1000),
    )
    return result


def is_sync_running() -> bool:
    """Return ``True`` when the latest manual sync log of the last five
    minutes is still marked ``running``."""

    since = (_now() - RUNNING_WINDOW).isoformat()
    try:
        rows = (
            require_client()
            .table("sync_logs")
            .select("status, created_at")
            .eq("sync_type", "manual_items_stock_sync")
            .gte("created_at", since)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
            .data
        )
    except (*BACKEND_ERRORS, BackendUnavailable) as exc:
        logger.warning("Could not check sync status: %s", error_message(exc))
        return False
    return bool(rows) and rows[0].get("status") == "running"


def get_last_sync_info() -> Optional[Dict[str, Any]]:
    try:
        rows = (
            require_client()
            .table("sync_logs")
            .select("*")
            .in_("sync_type", MANUAL_SYNC_TYPES)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
            .data
        )
    except (*BACKEND_ERRORS, BackendUnavailable) as exc:
        logger.warning("Error fetching last sync info: %s", error_message(exc))
        return None
    if not rows:
        return None
    last = rows[0]
    return {
        "last_sync_at": last.get("created_at"),
        "status": last.get("status"),
        "records_processed": last.get("records_processed"),
        "records_updated": last.get("records_updated"),
        "records_inserted": last.get("records_inserted"),
        "errors": last.get("errors"),
    }


def refresh_stock_summary_view() -> Dict[str, Any]:
    try:
        require_client().rpc(REFRESH_RPC, {}).execute()
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to refresh stock summary view")
        return {
            "success": False,
            "message": f"Failed to refresh stock summary view: {error_message(exc)}",
        }
    return {"success": True, "message": "Stock summary view refreshed successfully"}


def validate_sync_system() -> Dict[str, Any]:
    """Check the tables and functions the sync depends on.

    Note that probing the sync function runs it.
    """

    issues: List[str] = []
    recommendations: List[str] = []
    client = require_client()

    try:
        client.table("stock_onhands").select("brand, attribut_1, pricelist, synced_at").limit(1).execute()
    except BACKEND_ERRORS:
        issues.append("Cannot access stock_onhands table or required columns are missing")

    try:
        client.rpc(SYNC_RPC, {}).execute()
    except BACKEND_ERRORS as exc:
        message = error_message(exc)
        if "permission denied" not in message:
            if "does not exist" in message:
                issues.append(f"Manual sync function ({SYNC_RPC}) does not exist")
            else:
                recommendations.append("Manual sync function exists but may have configuration issues")

    try:
        client.table("sync_logs").select("id").limit(1).execute()
    except BACKEND_ERRORS:
        recommendations.append("Sync logs table is not accessible - sync history will not be available")

    if get_last_sync_info() is None:
        recommendations.append(
            "No recent sync activity found - consider running a manual sync to test the system"
        )

    return {"is_valid": not issues, "issues": issues, "recommendations": recommendations}


def _empty_statistics() -> Dict[str, float]:
    return {
        "total_syncs": 0,
        "successful_syncs": 0,
        "failed_syncs": 0,
        "average_duration": 0,
        "total_records_processed": 0,
        "total_records_updated": 0,
    }


def get_sync_statistics(days: int = 7) -> Dict[str, float]:
    since = (_now() - timedelta(days=days)).isoformat()
    try:
        rows = (
            require_client()
            .table("sync_logs")
            .select("status, sync_duration_ms, records_processed, records_updated")
            .in_("sync_type", ALL_SYNC_TYPES)
            .gte("created_at", since)
            .execute()
            .data
        )
    except (*BACKEND_ERRORS, BackendUnavailable) as exc:
        logger.warning("Error fetching sync statistics: %s", error_message(exc))
        return _empty_statistics()

    stats = _empty_statistics()
    total_duration = 0
    for row in rows or []:
        stats["total_syncs"] += 1
        if row.get("status") == "success":
            stats["successful_syncs"] += 1
        elif row.get("status") == "failed":
            stats["failed_syncs"] += 1
        total_duration += row.get("sync_duration_ms") or 0
        stats["total_records_processed"] += row.get("records_processed") or 0
        stats["total_records_updated"] += row.get("records_updated") or 0
    if stats["total_syncs"]:
        stats["average_duration"] = total_duration / stats["total_syncs"]
    return stats
