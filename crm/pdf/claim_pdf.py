from __future__ import annotations

import random
import re
from datetime import date
from typing import Any, Mapping, Optional

from django.conf import settings
from fpdf.enums import XPos, YPos

from .base import add_logo, new_document, pdf_text

SUBJECTS = {
    "damaged": "Damaged Goods",
    "incorrect_quantity": "Quantity Discrepancy",
    "not_ordered": "Unordered Items",
    "quality_issue": "Quality Issues",
    "late_delivery": "Late Delivery Compensation",
}

BODY_OPENING = (
    "We are writing to formally notify you of an issue with recent deliveries from your company. "
)

BODIES = {
    "damaged": (
        "We have received goods in damaged condition, which renders them unsuitable for use or "
        "resale. The damage appears to have occurred during transit or packaging, and we require "
        "immediate replacement or credit for the affected items listed below."
    ),
    "incorrect_quantity": (
        "There is a discrepancy between the quantities specified in our purchase order/invoice "
        "and the actual quantities delivered. This variance affects our inventory planning and "
        "customer commitments. Please investigate and arrange for the missing quantities to be "
        "delivered or provide appropriate credit."
    ),
    "not_ordered": (
        "We have received items that were not part of our original order. These additional items "
        "are taking up valuable warehouse space and may result in unnecessary costs. Please "
        "arrange for collection of these items at your earliest convenience."
    ),
    "quality_issue": (
        "The delivered items do not meet the agreed quality standards or specifications. This "
        "quality variance impacts our ability to serve our customers effectively. We require "
        "replacement items that meet the specified quality criteria or appropriate compensation."
    ),
    "late_delivery": (
        "The delivery was significantly delayed beyond the agreed delivery date, causing "
        "disruption to our operations and potential loss of business. We are seeking "
        "compensation for the inconvenience and additional costs incurred due to this delay."
    ),
}
DEFAULT_BODY = (
    "We have identified issues with the delivered items that require your immediate attention "
    "and resolution. Please review the details below and advise on the appropriate course of "
    "action."
)

ACTIONS = {
    "damaged": (
        "Please arrange for immediate replacement of the damaged items or provide a credit note "
        "for the full value. We also request that you review your packaging procedures to "
        "prevent future occurrences."
    ),
    "incorrect_quantity": (
        "Please deliver the missing quantities as soon as possible or issue a credit note for the "
        "undelivered items. We also request confirmation of your inventory management procedures."
    ),
    "not_ordered": (
        "Please arrange for collection of the unordered items within 7 business days. If "
        "collection is not possible, please provide instructions for disposal and compensate for "
        "any storage costs incurred."
    ),
    "quality_issue": (
        "Please provide replacement items that meet the agreed specifications or issue a full "
        "credit note. We also request a quality improvement plan to prevent similar issues in "
        "the future."
    ),
    "late_delivery": (
        "Please provide compensation for the delays and confirm measures to ensure future "
        "deliveries meet agreed timelines. We may also require preferential treatment for future "
        "orders."
    ),
}
DEFAULT_ACTION = (
    "Please investigate the reported issues and provide a resolution plan within 5 business "
    "days. We expect either replacement items, credit notes, or other appropriate compensation."
)

TABLE_COLUMNS = (("Item Code", 30), ("Description", 62), ("Quantity", 22), ("Unit Price", 26), ("Total Value", 30))

_TAG_RE = re.compile(r"</?[^>]+(>|$)")


def reason_subject(reason: str) -> str:
    return SUBJECTS.get(reason, "Product Issues")


def letter_body(reason: str) -> str:
    return BODY_OPENING + BODIES.get(reason, DEFAULT_BODY)


def expected_action(reason: str) -> str:
    return ACTIONS.get(reason, DEFAULT_ACTION)


def format_currency(value, currency: str) -> str:
    if not value:
        return f"0 {currency}"
    return f"{float(value):,.2f} {currency}"


def strip_html(text: str) -> str:
    return _TAG_RE.sub("", text or "")


def claim_reference(claim: Mapping[str, Any]) -> str:
    return claim.get("claim_number") or f"CLM-{random.randint(100000, 999999)}"


def _item_row(item: Mapping[str, Any], currency: str):
    quantity = item.get("quantity")
    unit_price = item.get("unit_price")
    total = (
        f"{float(unit_price) * float(quantity):.2f} {currency}" if unit_price and quantity else "-"
    )
    return [
        item.get("item_code") or "",
        item.get("description") or "",
        str(quantity) if quantity else "-",
        str(unit_price) if unit_price else "-",
        total,
    ]


def generate_claim_pdf(
    claim: Mapping[str, Any], logo: Optional[bytes] = None, today: Optional[date] = None
) -> bytes:
    """Render a vendor claim letter.

    ``claim`` carries ``vendor`` (``vendor_name``/``vendor_code``), ``items``,
    ``reason``, ``note``, ``value``, ``currency`` and optionally
    ``claim_number``; without one a random ``CLM-`` reference is used.
    """

    today = today or date.today()
    vendor = claim.get("vendor") or {}
    currency = claim.get("currency") or ""
    reason = claim.get("reason") or ""

    pdf = new_document()
    pdf.set_left_margin(14)
    add_logo(pdf, logo, x=14)
    pdf.set_y(30)

    pdf.set_font("Helvetica", size=10)
    pdf.set_text_color(80, 80, 80)
    for line in (
        settings.SALESDESK_COMPANY_NAME.upper(),
        settings.SALESDESK_COMPANY_ADDRESS,
        settings.SALESDESK_COMPANY_CONTACT,
    ):
        pdf.cell(0, 5, pdf_text(line), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(0, 0, 0)
    pdf.ln(6)
    pdf.cell(0, 5, f"Date: {today:%d %B %Y}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(0, 5, pdf_text(f"Claim Reference: {claim_reference(claim)}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(8)

    pdf.set_font("Helvetica", "B", 11)
    pdf.cell(0, 7, "To:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", size=11)
    pdf.cell(0, 5, pdf_text(vendor.get("vendor_name") or "Vendor Name"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(0, 5, pdf_text(f"Vendor Code: {vendor.get('vendor_code') or 'N/A'}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(8)

    pdf.set_font("Helvetica", "B", 11)
    pdf.cell(38, 6, "Subject: Claim for")
    pdf.set_font("Helvetica", size=11)
    pdf.cell(0, 6, reason_subject(reason), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(6)
    pdf.cell(0, 6, "Dear Sir/Madam,", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)

    pdf.set_font("Helvetica", size=10)
    pdf.multi_cell(0, 5, letter_body(reason), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(6)

    pdf.set_font("Helvetica", "B", 11)
    pdf.cell(0, 8, "Affected Items:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "B", 9)
    pdf.set_fill_color(240, 240, 240)
    for index, (title, width) in enumerate(TABLE_COLUMNS):
        last = index == len(TABLE_COLUMNS) - 1
        pdf.cell(
            width,
            8,
            title,
            border=1,
            fill=True,
            new_x=XPos.LMARGIN if last else XPos.RIGHT,
            new_y=YPos.NEXT if last else YPos.TOP,
        )
    pdf.set_font("Helvetica", size=9)
    for item in claim.get("items") or []:
        values = _item_row(item, currency)
        for index, ((_, width), value) in enumerate(zip(TABLE_COLUMNS, values)):
            last = index == len(TABLE_COLUMNS) - 1
            pdf.cell(
                width,
                8,
                pdf_text(value)[:40],
                border=1,
                new_x=XPos.LMARGIN if last else XPos.RIGHT,
                new_y=YPos.NEXT if last else YPos.TOP,
            )
    pdf.ln(8)

    pdf.set_font("Helvetica", "B", 11)
    pdf.cell(
        0,
        8,
        pdf_text(f"Total Claim Value: {format_currency(claim.get('value'), currency)}"),
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )

    note = strip_html(claim.get("note") or "").strip()
    if note:
        pdf.cell(0, 6, "Additional Details:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", size=10)
        pdf.multi_cell(0, 5, pdf_text(note), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(4)

    pdf.set_font("Helvetica", "B", 11)
    pdf.cell(0, 6, "Requested Action:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", size=10)
    pdf.multi_cell(0, 5, expected_action(reason), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(6)

    pdf.cell(
        0,
        5,
        "We appreciate your prompt attention to this matter and look forward to your response.",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.ln(3)
    pdf.cell(0, 5, "Yours faithfully,", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(12)
    pdf.set_font("Helvetica", "B", 10)
    pdf.cell(0, 5, "Claims Department", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", size=10)
    pdf.cell(0, 5, pdf_text(settings.SALESDESK_COMPANY_NAME), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    return bytes(pdf.output())


def claim_file_name(claim: Mapping[str, Any]) -> str:
    vendor_code = (claim.get("vendor") or {}).get("vendor_code") or "Vendor"
    return f"Claim_Letter_{vendor_code}_{claim_reference(claim)}.pdf"
