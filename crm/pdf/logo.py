import logging
from typing import Optional

from crm.exceptions import ServiceError
from crm.services import document_service

logger = logging.getLogger(__name__)

LOGO_FOLDER = "logos"
LOGO_EXTENSIONS = (".png", ".jpg", ".jpeg")


def load_logo() -> Optional[bytes]:
    """Return the first PNG/JPEG in the documents ``logos`` folder, if any."""

    try:
        files = document_service.list_folder(LOGO_FOLDER, limit=10)
    except ServiceError:
        logger.warning("Could not list logo folder", exc_info=True)
        return None
    logo = next(
        (f for f in files if str(f.get("name", "")).lower().endswith(LOGO_EXTENSIONS)),
        None,
    )
    if logo is None:
        logger.warning("No logo file found in %s", LOGO_FOLDER)
        return None
    try:
        return document_service.download_document(f"{LOGO_FOLDER}/{logo['name']}")
    except ServiceError:
        logger.warning("Could not download logo %s", logo["name"], exc_info=True)
        return None
