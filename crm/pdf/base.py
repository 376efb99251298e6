from __future__ import annotations

import io
import logging
from typing import Optional

from fpdf import FPDF
from fpdf.errors import FPDFException

logger = logging.getLogger(__name__)

LEFT = 20
LOGO_MAX_W = 50
LOGO_MAX_H = 25


def pdf_text(value) -> str:
    """Return ``value`` as text the built-in Helvetica font can encode."""

    if value is None:
        return ""
    return str(value).encode("latin-1", "replace").decode("latin-1")


def new_document() -> FPDF:
    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_margins(LEFT, 20, LEFT)
    pdf.add_page()
    return pdf


def add_logo(pdf: FPDF, logo: Optional[bytes], x: float = LEFT, y: float = 10) -> bool:
    """Place ``logo`` inside a 50x25 mm box keeping its proportions."""

    if not logo:
        return False
    try:
        pdf.image(io.BytesIO(logo), x=x, y=y, w=LOGO_MAX_W, h=LOGO_MAX_H, keep_aspect_ratio=True)
    except (FPDFException, OSError, ValueError):
        logger.warning("Logo could not be embedded in PDF", exc_info=True)
        return False
    return True
