"""Two-page A4 invoice PDF: a summary page and a session ledger."""

import logging
import re
from datetime import UTC, date, datetime, tzinfo
from decimal import Decimal
from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from backend.app.core.errors import RenderFailed
from backend.app.core.time import as_utc, local_date, utc_now
from backend.app.domain.entities import Invoice

logger = logging.getLogger(__name__)

ACCENT = colors.HexColor("#0f766e")
MUTED = colors.HexColor("#64748b")
ROW_ALT = colors.HexColor("#f1f5f9")
CONTENT_WIDTH = A4[0] - 40 * mm


def group_indian(digits: str) -> str:
    """Group an integer string as 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount) -> str:
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    value = abs(value).quantize(Decimal("0.01"))
    whole, _, fraction = f"{value:f}".partition(".")
    text = group_indian(whole)
    if fraction and fraction != "00":
        text = f"{text}.{fraction}"
    return f"Rs. {sign}{text}"


def format_session_date(value: datetime, tz: tzinfo = UTC) -> str:
    return as_utc(value).astimezone(tz).strftime("%a, %d %b %Y")


def format_day(value: date) -> str:
    return value.strftime("%d %b %Y")


def invoice_filename(invoice: Invoice, ext: str = "pdf") -> str:
    safe_name = re.sub(r"[^A-Za-z0-9]", "_", invoice.patient_name or "")
    return f"Invoice_{safe_name}_{invoice.invoice_number}.{ext}"


def _styles() -> dict:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "InvoiceTitle", parent=base["Heading1"], fontSize=22, textColor=ACCENT, spaceAfter=2
        ),
        "subtitle": ParagraphStyle("InvoiceSubtitle", parent=base["Normal"], fontSize=10, textColor=MUTED),
        "therapist": ParagraphStyle("Therapist", parent=base["Heading3"], fontSize=12, spaceAfter=2),
        "small": ParagraphStyle("Small", parent=base["Normal"], fontSize=9, textColor=MUTED),
        "section": ParagraphStyle(
            "Section", parent=base["Heading4"], fontSize=11, textColor=ACCENT, spaceBefore=10, spaceAfter=4
        ),
        "body": ParagraphStyle("Body", parent=base["Normal"], fontSize=10, leading=13),
        "right": ParagraphStyle("Right", parent=base["Normal"], fontSize=10, alignment=TA_RIGHT),
        "footer": ParagraphStyle("Footer", parent=base["Normal"], fontSize=8, textColor=MUTED, alignment=TA_CENTER),
    }


def _text(value: Optional[str]) -> str:
    return escape(value or "")


def _signature_block(invoice: Invoice, styles: dict) -> Table:
    block = Table(
        [
            [""],
            [Paragraph(f"<b>{_text(invoice.therapist_name)}</b>", styles["right"])],
            [Paragraph("Authorized Signatory", styles["right"])],
        ],
        colWidths=[60 * mm],
        hAlign="RIGHT",
    )
    block.setStyle(
        TableStyle(
            [
                ("LINEBELOW", (0, 0), (0, 0), 0.75, colors.black),
                ("TOPPADDING", (0, 0), (0, 0), 24),
                ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
            ]
        )
    )
    return block


def _summary_page(invoice: Invoice, styles: dict, generated_on: datetime, tz: tzinfo = UTC) -> list:
    elements = [
        Paragraph("INVOICE", styles["title"]),
        Paragraph("Physiotherapy Services", styles["subtitle"]),
        Spacer(1, 6 * mm),
    ]

    therapist_lines = [Paragraph(_text(invoice.therapist_name), styles["therapist"])]
    if invoice.therapist_registration_number:
        therapist_lines.append(
            Paragraph(f"Reg. No: {_text(invoice.therapist_registration_number)}", styles["small"])
        )
    if invoice.therapist_address:
        therapist_lines.append(Paragraph(_text(invoice.therapist_address), styles["small"]))
    header = Table(
        [[therapist_lines, [Paragraph("Invoice No.", styles["small"]), Paragraph(f"<b>{_text(invoice.invoice_number)}</b>", styles["body"])]]],
        colWidths=[CONTENT_WIDTH * 0.65, CONTENT_WIDTH * 0.35],
    )
    header.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP"), ("ALIGN", (1, 0), (1, 0), "RIGHT")]))
    elements.append(header)
    elements.append(Spacer(1, 4 * mm))

    period = f"{invoice.date_range.start.strftime('%d %b')} - {format_day(invoice.date_range.end)}"
    metadata = Table(
        [
            ["Invoice Date", "Billing Period"],
            [format_day(local_date(invoice.created_at, tz)), period],
        ],
        colWidths=[CONTENT_WIDTH / 2, CONTENT_WIDTH / 2],
    )
    metadata.setStyle(
        TableStyle(
            [
                ("TEXTCOLOR", (0, 0), (-1, 0), MUTED),
                ("FONTSIZE", (0, 0), (-1, 0), 8),
                ("FONTNAME", (0, 1), (-1, 1), "Helvetica-Bold"),
                ("BACKGROUND", (0, 0), (-1, -1), ROW_ALT),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    elements.append(metadata)

    elements.append(Paragraph("Bill To", styles["section"]))
    bill_to = Table(
        [
            ["Name:", Paragraph(_text(invoice.patient_full_name), styles["body"])],
            ["Contact:", Paragraph(_text(invoice.patient_contact), styles["body"])],
            ["Address:", Paragraph(_text(invoice.patient_address), styles["body"])],
        ],
        colWidths=[25 * mm, CONTENT_WIDTH - 25 * mm],
    )
    bill_to.setStyle(
        TableStyle([("TEXTCOLOR", (0, 0), (0, -1), MUTED), ("VALIGN", (0, 0), (-1, -1), "TOP")])
    )
    elements.append(bill_to)

    elements.append(Paragraph("Services", styles["section"]))
    description = (
        f"Physiotherapy Sessions ({invoice.present_sessions} sessions @ "
        f"{format_currency(invoice.per_session_rate)} per session)"
    )
    services = Table(
        [
            ["No.", "Description", "Amount"],
            ["1", Paragraph(_text(description), styles["body"]), format_currency(invoice.total_amount)],
        ],
        colWidths=[15 * mm, CONTENT_WIDTH - 55 * mm, 40 * mm],
    )
    services.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), ACCENT),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTNAME", (2, 1), (2, 1), "Helvetica-Bold"),
                ("ALIGN", (2, 0), (2, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    elements.append(services)
    elements.append(Spacer(1, 4 * mm))

    summary = Table(
        [
            ["Subtotal", format_currency(invoice.total_amount)],
            ["Total", format_currency(invoice.total_amount)],
        ],
        colWidths=[35 * mm, 40 * mm],
        hAlign="RIGHT",
    )
    summary.setStyle(
        TableStyle(
            [
                ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, -1), (-1, -1), 12),
                ("LINEABOVE", (0, -1), (-1, -1), 1, ACCENT),
            ]
        )
    )
    elements.append(summary)
    elements.append(Spacer(1, 12 * mm))
    elements.append(_signature_block(invoice, styles))
    elements.append(Spacer(1, 10 * mm))
    generated_text = as_utc(generated_on).astimezone(tz).strftime("%B %d, %Y")
    elements.append(
        Paragraph(
            f"Generated on {generated_text} | This is a computer-generated invoice",
            styles["footer"],
        )
    )
    return elements


def _ledger_page(invoice: Invoice, styles: dict, tz: tzinfo = UTC) -> list:
    elements = [
        Paragraph("Session Records", styles["title"]),
        Paragraph(f"{_text(invoice.patient_full_name)} | {_text(invoice.invoice_number)}", styles["subtitle"]),
        Spacer(1, 4 * mm),
    ]
    period = Table(
        [
            [
                Paragraph(
                    f"Period: {format_day(invoice.date_range.start)} - {format_day(invoice.date_range.end)}",
                    styles["small"],
                ),
                Paragraph(f"Total Attended: {invoice.present_sessions} sessions", styles["small"]),
            ]
        ],
        colWidths=[CONTENT_WIDTH / 2, CONTENT_WIDTH / 2],
    )
    period.setStyle(TableStyle([("ALIGN", (1, 0), (1, 0), "RIGHT")]))
    elements.append(period)
    elements.append(Spacer(1, 4 * mm))

    rows = [["S. No.", "Date"]]
    for index, session in enumerate(invoice.sessions, start=1):
        rows.append([str(index), format_session_date(session.date, tz)])
    ledger = Table(rows, colWidths=[25 * mm, CONTENT_WIDTH - 25 * mm], repeatRows=1)
    ledger.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), ACCENT),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ROW_ALT]),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
            ]
        )
    )
    elements.append(ledger)
    elements.append(Spacer(1, 12 * mm))
    elements.append(_signature_block(invoice, styles))
    elements.append(Spacer(1, 10 * mm))
    elements.append(
        Paragraph(
            f"Page 2 of 2 | {_text(invoice.invoice_number)} | {_text(invoice.patient_full_name)}",
            styles["footer"],
        )
    )
    return elements


def render_invoice_pdf(
    invoice: Invoice, generated_on: Optional[datetime] = None, tz: tzinfo = UTC
) -> bytes:
    """Render a stored invoice with dates shown in ``tz``.

    Failures raise ``RenderFailed``; the invoice itself is untouched.
    """
    buffer = BytesIO()
    try:
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=18 * mm,
            bottomMargin=18 * mm,
            title=f"Invoice {invoice.invoice_number}",
            author=invoice.therapist_name,
        )
        styles = _styles()
        elements = _summary_page(invoice, styles, generated_on or utc_now(), tz)
        elements.append(PageBreak())
        elements.extend(_ledger_page(invoice, styles, tz))
        doc.build(elements)
    except Exception as exc:
        logger.exception("Rendering invoice %s failed", invoice.invoice_number)
        raise RenderFailed(
            f"Could not generate the document for invoice {invoice.invoice_number}. Please try again.",
            invoice_id=invoice.id,
        ) from exc
    return buffer.getvalue()
