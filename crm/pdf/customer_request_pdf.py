from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional

from django.conf import settings
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .base import LEFT, add_logo, new_document, pdf_text

LABEL_W = 60
PAGE_BREAK_MARGIN = 80
CONTACT_BREAK_MARGIN = 50
SIGNATURE_BREAK_MARGIN = 60


def _section(pdf: FPDF, title: str) -> None:
    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(0, 8, pdf_text(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    y = pdf.get_y()
    pdf.set_line_width(0.5)
    pdf.line(LEFT, y, 190, y)
    pdf.ln(2)


def _field(pdf: FPDF, label: str, value: Any) -> None:
    pdf.set_font("Helvetica", "B", 10)
    pdf.cell(LABEL_W, 6, pdf_text(label))
    pdf.set_font("Helvetica", size=10)
    pdf.multi_cell(0, 6, pdf_text(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _yes_no(value) -> str:
    return "Yes" if value else "No"


def _break_if_near_bottom(pdf: FPDF, margin: float) -> None:
    if pdf.get_y() > pdf.h - margin:
        pdf.add_page()


def generate_customer_request_pdf(
    data: Mapping[str, Any],
    salesperson_name: Optional[str] = None,
    logo: Optional[bytes] = None,
    today: Optional[date] = None,
) -> bytes:
    """Render a customer maintenance request for approval.

    ``salesperson_name`` replaces the bare salesperson code when known.
    """

    today = today or date.today()
    pdf = new_document()
    add_logo(pdf, logo)
    pdf.set_y(45)

    pdf.set_font("Helvetica", "B", 18)
    pdf.cell(0, 10, "Customer Maintenance Request", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(5)

    _section(pdf, "Customer Information")
    _field(pdf, "Customer Name:", data.get("customer_name"))
    _field(pdf, "Search Name:", data.get("search_name"))
    _field(pdf, "Address:", data.get("address"))
    _field(pdf, "City:", data.get("city"))
    pdf.ln(5)

    _section(pdf, "Company Information")
    _field(pdf, "Company Name:", data.get("company_name"))
    _field(pdf, "Company Address:", data.get("company_address"))
    _field(pdf, "Company City:", data.get("company_city"))
    pdf.ln(5)

    _section(pdf, "Classification")
    _field(pdf, "Customer Type Code:", data.get("customer_type_code"))
    _field(pdf, "Salesperson:", salesperson_name or data.get("salesperson_code"))
    _field(pdf, "Customer Group:", data.get("customer_group"))
    _field(pdf, "Region:", data.get("region"))
    pdf.ln(5)

    _break_if_near_bottom(pdf, PAGE_BREAK_MARGIN)
    _section(pdf, "Contacts")
    contacts = data.get("contacts") or []
    if not contacts:
        _field(pdf, "No contacts added", "")
    for index, contact in enumerate(contacts, start=1):
        _break_if_near_bottom(pdf, CONTACT_BREAK_MARGIN)
        _field(pdf, f"Contact {index} Name:", contact.get("name"))
        _field(pdf, "Position:", contact.get("position"))
        _field(pdf, "Phone:", contact.get("phone"))
        _field(pdf, "Email:", contact.get("email"))
        _field(pdf, "LINE ID:", contact.get("line"))
        _field(pdf, "WhatsApp:", contact.get("whatsapp"))
        pdf.ln(3)
    pdf.ln(5)

    documents = data.get("documents") or {}
    _section(pdf, "Required Documents")
    _field(pdf, "PP20:", _yes_no(documents.get("pp20")))
    _field(pdf, "Company Registration:", _yes_no(documents.get("company_registration")))
    _field(pdf, "ID Card:", _yes_no(documents.get("id_card")))
    pdf.ln(5)

    _section(pdf, "Financial Terms")
    _field(pdf, "Credit Limit:", data.get("credit_limit") or 0)
    _field(pdf, "Credit Terms:", data.get("credit_terms"))
    _field(pdf, "Prepayment Required:", _yes_no(data.get("prepayment")))
    pdf.ln(10)

    _signature(pdf, today)
    return bytes(pdf.output())


def _signature(pdf: FPDF, today: date) -> None:
    _break_if_near_bottom(pdf, SIGNATURE_BREAK_MARGIN)
    pdf.ln(10)
    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(0, 10, "Approval", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", size=10)
    pdf.cell(40, 8, "Authorized by:")
    pdf.cell(0, 8, pdf_text(settings.SALESDESK_REQUEST_APPROVERS), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    y = pdf.get_y() + 4
    pdf.line(LEFT, y, 100, y)
    pdf.set_y(y + 1)
    pdf.cell(0, 5, "signature", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(8)
    pdf.cell(0, 8, "Date: _______________", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", size=8)
    pdf.cell(0, 5, f"Generated on: {today:%d/%m/%Y}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
