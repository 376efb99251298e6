"""Bulk edit, delete and export helpers for the ``items`` table.

Item codes are sent to the backend in fixed-size chunks. A chunk that fails
is recorded and the remaining chunks are still processed, so callers get a
success/partial/failure summary rather than an exception.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

from django.conf import settings

from .list_utils import chunked, rows_to_csv
from .supabase_client import BACKEND_ERRORS, error_message, require_client
from .sync_log import log_sync_operation

logger = logging.getLogger(__name__)

ITEMS_TABLE = "items"

# option flag -> column written when the flag is set
UPDATE_OPTIONS = {
    "update_description": "description",
    "update_posting_group": "posting_group",
    "update_base_unit_code": "base_unit_code",
    "update_unit_price": "unit_price",
    "update_vendor_code": "vendor_code",
    "update_brand": "brand",
    "update_attribut_1": "attribut_1",
    "update_pricelist": "pricelist",
}

EXPORT_HEADERS = [
    "Item Code",
    "Description",
    "Posting Group",
    "Base Unit Code",
    "Unit Price",
    "Vendor Code",
    "Brand",
    "Attribute 1",
    "Pricelist",
]


def _chunk_size() -> int:
    return int(getattr(settings, "SALESDESK_BATCH_CHUNK_SIZE", 50))


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def build_update_object(
    update_data: Mapping[str, Any], options: Mapping[str, bool]
) -> Dict[str, Any]:
    """Return the column values selected by the ``update_*`` flags."""

    return {
        column: update_data.get(column)
        for flag, column in UPDATE_OPTIONS.items()
        if options.get(flag)
    }


def _run_chunks(item_codes: Sequence[str], action, verb: str):
    """Apply ``action`` to each chunk and return ``(affected, errors)``."""

    affected = 0
    errors: List[str] = []
    for chunk in chunked(list(item_codes), _chunk_size()):
        try:
            rows = action(chunk)
        except BACKEND_ERRORS as exc:
            logger.warning("Item %s failed for %d codes: %s", verb, len(chunk), exc)
            errors.append(f"Chunk {verb} failed: {error_message(exc)}")
            continue
        affected += len(rows or [])
    return affected, errors


def _summary(affected: int, requested: int, past: str) -> str:
    if affected == requested:
        return f"Successfully {past} all {affected} items"
    return f"{past.capitalize()} {affected} of {requested} items ({requested - affected} failed)"


def batch_update_items(
    item_codes: Sequence[str],
    update_data: Mapping[str, Any],
    options: Mapping[str, bool],
) -> Dict[str, Any]:
    """Write the selected fields of ``update_data`` to every item in ``item_codes``.

    Returns a dict with ``success``, ``message``, ``updated_count`` and
    ``errors`` (``None`` when there were none).
    """

    started = time.monotonic()
    if not item_codes:
        return {"success": False, "message": "No items selected for update", "updated_count": 0, "errors": None}

    update_object = build_update_object(update_data, options)
    if not update_object:
        return {"success": False, "message": "No fields selected for update", "updated_count": 0, "errors": None}

    client = require_client()

    def update_chunk(chunk):
        return client.table(ITEMS_TABLE).update(update_object).in_("item_code", chunk).execute().data

    updated, errors = _run_chunks(item_codes, update_chunk, "update")
    status = "partial" if errors else "success"
    log_sync_operation(
        "batch_item_update",
        status,
        records_processed=len(item_codes),
        records_updated=updated,
        errors=errors,
        sync_duration_ms=_elapsed_ms(started),
    )

    if updated == 0:
        return {"success": False, "message": "Failed to update any items", "updated_count": 0, "errors": errors}
    return {
        "success": True,
        "message": _summary(updated, len(item_codes), "updated"),
        "updated_count": updated,
        "errors": errors or None,
    }


def batch_delete_items(item_codes: Sequence[str]) -> Dict[str, Any]:
    """Delete every item in ``item_codes``; same result shape as updates."""

    started = time.monotonic()
    if not item_codes:
        return {"success": False, "message": "No items selected for deletion", "deleted_count": 0, "errors": None}

    client = require_client()

    def delete_chunk(chunk):
        return client.table(ITEMS_TABLE).delete().in_("item_code", chunk).execute().data

    deleted, errors = _run_chunks(item_codes, delete_chunk, "deletion")
    status = "partial" if errors else "success"
    log_sync_operation(
        "batch_item_delete",
        status,
        records_processed=len(item_codes),
        errors=errors,
        sync_duration_ms=_elapsed_ms(started),
    )

    if deleted == 0:
        return {"success": False, "message": "Failed to delete any items", "deleted_count": 0, "errors": errors}
    return {
        "success": True,
        "message": _summary(deleted, len(item_codes), "deleted"),
        "deleted_count": deleted,
        "errors": errors or None,
    }


def _export_row(item: Mapping[str, Any]) -> List[str]:
    unit_price = item.get("unit_price")
    return [
        item.get("item_code") or "",
        item.get("description") or "",
        item.get("posting_group") or "",
        item.get("base_unit_code") or "",
        "0" if unit_price is None else str(unit_price),
        item.get("vendor_code") or "",
        item.get("brand") or "",
        item.get("attribut_1") or "",
        "Yes" if item.get("pricelist") else "No",
    ]


def export_items_csv(item_codes: Sequence[str]) -> Dict[str, Optional[str]]:
    """Return the selected items as CSV text under ``csv_data``."""

    if not item_codes:
        return {"success": False, "message": "No items selected for export", "csv_data": None}

    client = require_client()
    try:
        items = (
            client.table(ITEMS_TABLE)
            .select("*")
            .in_("item_code", list(item_codes))
            .order("item_code")
            .execute()
            .data
        )
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to fetch items for export")
        return {"success": False, "message": f"Export failed: {error_message(exc)}", "csv_data": None}

    if not items:
        return {"success": False, "message": "No items found for export", "csv_data": None}

    csv_data = rows_to_csv(items, EXPORT_HEADERS, _export_row, quote_all=True)
    return {
        "success": True,
        "message": f"Successfully exported {len(items)} items",
        "csv_data": csv_data,
    }
