"""Marketing documents kept in the ``documents`` storage bucket.

Each stored object has a metadata row in the ``documents`` table. Uploads
write the object first and the row second; deletes remove the objects first
and the rows second.
"""

from __future__ import annotations

import logging
import mimetypes
import time
from typing import Any, Dict, List, Optional, Sequence

from django.conf import settings

from crm.exceptions import BackendError

from .supabase_client import BACKEND_ERRORS, error_message, require_client

logger = logging.getLogger(__name__)

TABLE = "documents"
IMAGE_TYPES = {"jpg", "jpeg", "png", "gif", "webp"}


def bucket_name() -> str:
    return getattr(settings, "SALESDESK_DOCUMENTS_BUCKET", "documents")


def _bucket():
    return require_client().storage.from_(bucket_name())


def file_extension(file_name: str) -> str:
    return file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""


def is_image_file(file_type: Optional[str]) -> bool:
    return (file_type or "").lower() in IMAGE_TYPES


def is_pdf_file(file_type: Optional[str]) -> bool:
    return (file_type or "").lower() == "pdf"


def upload_document(
    folder: str,
    file_name: str,
    content: bytes,
    uploaded_by: Optional[str] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Store ``content`` under ``<folder>/<epoch-ms>-<file_name>`` and record it."""

    folder = folder.strip("/")
    if not folder or not file_name:
        raise ValueError("folder and file_name are required")
    path = f"{folder}/{int(time.time() * 1000)}-{file_name}"
    content_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"

    try:
        _bucket().upload(path, content, {"content-type": content_type})
    except BACKEND_ERRORS as exc:
        logger.exception("Storage upload of %s failed", path)
        raise BackendError(f"Failed to upload document: {error_message(exc)}") from exc

    row = {
        "file_name": file_name,
        "file_path": path,
        "file_type": file_extension(file_name),
        "description": description or f"{folder.capitalize()} document",
        "uploaded_by": uploaded_by,
    }
    try:
        rows = require_client().table(TABLE).insert(row).execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Saving metadata for %s failed", path)
        raise BackendError(f"Failed to save document details: {error_message(exc)}") from exc
    logger.info("Uploaded document %s", path)
    return rows[0] if rows else row


def list_documents(folder: Optional[str] = None) -> List[Dict[str, Any]]:
    query = require_client().table(TABLE).select("*").order("created_at", desc=True)
    if folder:
        query = query.like("file_path", f"{folder.strip('/')}/%")
    try:
        return query.execute().data or []
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to list documents")
        raise BackendError(f"Failed to list documents: {error_message(exc)}") from exc


def list_folder(folder: str, limit: int = 100) -> List[Dict[str, Any]]:
    """Return the raw storage listing of ``folder``."""

    try:
        return _bucket().list(folder, {"limit": limit}) or []
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to list storage folder %s", folder)
        raise BackendError(f"Failed to list folder {folder}: {error_message(exc)}") from exc


def get_public_url(path: str) -> str:
    return _bucket().get_public_url(path)


def download_document(path: str) -> bytes:
    try:
        return _bucket().download(path)
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to download %s", path)
        raise BackendError(f"Failed to download document: {error_message(exc)}") from exc


def delete_documents(document_ids: Sequence[str]) -> int:
    """Delete the given documents and return how many were removed."""

    ids = [str(i) for i in document_ids if i]
    if not ids:
        return 0
    client = require_client()
    try:
        rows = client.table(TABLE).select("id, file_path").in_("id", ids).execute().data or []
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to look up documents for deletion")
        raise BackendError(f"Failed to delete documents: {error_message(exc)}") from exc

    if not rows:
        return 0
    paths = [row["file_path"] for row in rows if row.get("file_path")]
    try:
        if paths:
            _bucket().remove(paths)
        client.table(TABLE).delete().in_("id", [row["id"] for row in rows]).execute()
    except BACKEND_ERRORS as exc:
        logger.exception("Failed to delete documents %s", ids)
        raise BackendError(f"Failed to delete documents: {error_message(exc)}") from exc
    logger.info("Deleted %d document(s)", len(rows))
    return len(rows)
