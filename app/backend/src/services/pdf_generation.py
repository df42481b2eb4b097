"""Utilities for rendering invoice PDFs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO
from time import perf_counter

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.backend.src.services.i18n import date_format_for, labels_for, normalize_language
from app.backend.src.services.metrics import pdf_generation_seconds

_TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class Party:
    """Sender or recipient block on the invoice."""

    name: str
    address: str = ""
    contact: str | None = None
    tax_id: str | None = None


@dataclass(frozen=True, slots=True)
class DocumentLine:
    title: str
    start_at: datetime
    end_at: datetime
    hours: Decimal
    amount: Decimal


@dataclass(frozen=True, slots=True)
class InvoiceDocument:
    """Everything the renderer needs, detached from the ORM."""

    number: str
    issue_date: date
    due_date: date | None
    period_start: date
    period_end: date
    sender: Party | None
    recipient: Party
    lines: tuple[DocumentLine, ...]
    total_hours: Decimal
    hourly_rate: Decimal
    total_amount: Decimal
    bank_details: str | None = None
    language: str = "en"
    currency_symbol: str = "€"


def format_hours(value: Decimal) -> str:
    return f"{Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP):.2f}"


def format_money(value: Decimal, currency_symbol: str, language: str = "en") -> str:
    """Format a currency amount the way invoices in ``language`` expect."""

    amount = Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    if normalize_language(language) == "de":
        digits = f"{amount:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
        return f"{digits} {currency_symbol}"
    return f"{currency_symbol}{amount:,.2f}"


def build_filename(number: str) -> str:
    return f"invoice_{number}.pdf"


def render_invoice_pdf(document: InvoiceDocument) -> bytes:
    """Render ``document`` to PDF bytes."""

    language = normalize_language(document.language)
    labels = labels_for(language)
    date_fmt = date_format_for(language)

    def money(value: Decimal) -> str:
        return format_money(value, document.currency_symbol, language)

    start = perf_counter()
    buffer = BytesIO()
    pdf_canvas = canvas.Canvas(buffer, pagesize=A4)
    pdf_canvas.setTitle(f"{labels['invoice']} {document.number}")
    width, height = A4

    margin = 50
    header_height = 110
    primary_color = HexColor("#0F172A")
    accent_color = HexColor("#0E7490")
    muted_text = HexColor("#64748B")
    light_panel = HexColor("#F8FAFC")
    table_header_color = HexColor("#E0F2FE")
    border_color = HexColor("#E2E8F0")

    columns = [
        margin + 12,
        margin + 200,
        margin + 280,
        margin + 330,
        margin + 410,
        width - margin - 10,
    ]
    page_number = 1

    def draw_brand_header() -> float:
        pdf_canvas.setFillColor(primary_color)
        pdf_canvas.rect(0, height - header_height, width, header_height, fill=1, stroke=0)

        pdf_canvas.setFont("Helvetica-Bold", 20)
        pdf_canvas.setFillColor(HexColor("#FFFFFF"))
        pdf_canvas.drawString(margin, height - 55, labels["invoice"])
        pdf_canvas.setFont("Helvetica", 10)
        pdf_canvas.setFillColor(HexColor("#CBD5F5"))
        pdf_canvas.drawString(margin, height - 75, f"{labels['invoice_number']} {document.number}")

        pdf_canvas.setFont("Helvetica", 9)
        pdf_canvas.setFillColor(HexColor("#E2E8F0"))
        pdf_canvas.drawRightString(
            width - margin,
            height - 55,
            f"{labels['date']}: {document.issue_date.strftime(date_fmt)}",
        )
        if document.due_date is not None:
            pdf_canvas.drawRightString(
                width - margin,
                height - 69,
                f"{labels['due_date']}: {document.due_date.strftime(date_fmt)}",
            )
        pdf_canvas.drawRightString(
            width - margin,
            height - 83,
            f"{labels['period']}: {document.period_start.strftime(date_fmt)}"
            f" - {document.period_end.strftime(date_fmt)}",
        )
        pdf_canvas.drawRightString(width - margin, 30, f"{labels['page']} {page_number}")

        pdf_canvas.setFillColor(primary_color)
        return height - header_height - 30

    def draw_party(x: float, top: float, title: str, party: Party | None) -> None:
        pdf_canvas.setFillColor(primary_color)
        pdf_canvas.setFont("Helvetica-Bold", 11)
        pdf_canvas.drawString(x, top, title)
        if party is None:
            return
        pdf_canvas.setFont("Helvetica", 10)
        pdf_canvas.setFillColor(muted_text)
        y = top - 16
        lines = [party.name, *[line for line in party.address.splitlines() if line.strip()]]
        if party.contact:
            lines.append(f"{labels['contact']}: {party.contact}")
        if party.tax_id:
            lines.append(f"{labels['tax_id']}: {party.tax_id}")
        for line in lines[:6]:
            pdf_canvas.drawString(x, y, line)
            y -= 14

    def draw_parties(top: float) -> float:
        card_height = 110
        pdf_canvas.setFillColor(light_panel)
        pdf_canvas.roundRect(
            margin, top - card_height, width - 2 * margin, card_height, 12, fill=1, stroke=0
        )
        draw_party(margin + 20, top - 24, labels["from"], document.sender)
        draw_party(margin + 270, top - 24, labels["to"], document.recipient)
        return top - card_height - 28

    def draw_table_header(top: float) -> float:
        row_height = 24
        pdf_canvas.setFillColor(table_header_color)
        pdf_canvas.roundRect(
            margin, top - row_height, width - 2 * margin, row_height, 8, fill=1, stroke=0
        )
        headers = [
            labels["service"],
            labels["date"],
            labels["start"],
            labels["end"],
            labels["hours"],
            labels["amount"],
        ]
        pdf_canvas.setFillColor(primary_color)
        pdf_canvas.setFont("Helvetica-Bold", 10)
        for idx, header in enumerate(headers):
            if idx >= 4:
                pdf_canvas.drawRightString(columns[idx], top - 16, header)
            else:
                pdf_canvas.drawString(columns[idx], top - 16, header)
        pdf_canvas.setFont("Helvetica", 10)
        return top - row_height - 16

    y_position = draw_brand_header()
    y_position = draw_parties(y_position)
    y_position = draw_table_header(y_position)

    row_height = 20
    if not document.lines:
        pdf_canvas.setFillColor(muted_text)
        pdf_canvas.drawString(columns[0], y_position - 6, labels["no_sessions"])
        y_position -= row_height

    for idx, line in enumerate(document.lines):
        if y_position < 160:
            pdf_canvas.showPage()
            page_number += 1
            y_position = draw_brand_header()
            y_position = draw_table_header(y_position)

        if idx % 2 == 0:
            pdf_canvas.setFillColor(light_panel)
            pdf_canvas.roundRect(
                margin,
                y_position - row_height + 10,
                width - 2 * margin,
                row_height - 2,
                6,
                fill=1,
                stroke=0,
            )

        pdf_canvas.setFillColor(primary_color)
        pdf_canvas.setFont("Helvetica", 10)
        pdf_canvas.drawString(columns[0], y_position - 4, line.title[:34])
        pdf_canvas.drawString(columns[1], y_position - 4, line.start_at.strftime(date_fmt))
        pdf_canvas.drawString(columns[2], y_position - 4, line.start_at.strftime("%H:%M"))
        pdf_canvas.drawString(columns[3], y_position - 4, line.end_at.strftime("%H:%M"))
        pdf_canvas.drawRightString(columns[4], y_position - 4, format_hours(line.hours))
        pdf_canvas.drawRightString(columns[5], y_position - 4, money(line.amount))
        y_position -= row_height

    pdf_canvas.setStrokeColor(border_color)
    pdf_canvas.line(margin, y_position, width - margin, y_position)

    totals = [
        (labels["total_hours"], format_hours(document.total_hours)),
        (labels["hourly_rate"], money(document.hourly_rate)),
    ]
    pdf_canvas.setFont("Helvetica", 10)
    pdf_canvas.setFillColor(muted_text)
    for label, value in totals:
        y_position -= 18
        pdf_canvas.drawRightString(columns[4], y_position, label)
        pdf_canvas.drawRightString(columns[5], y_position, value)

    y_position -= 24
    pdf_canvas.setFont("Helvetica-Bold", 11)
    pdf_canvas.drawRightString(columns[4], y_position, labels["total_amount"])
    pdf_canvas.setFont("Helvetica-Bold", 14)
    pdf_canvas.setFillColor(accent_color)
    pdf_canvas.drawRightString(columns[5], y_position, money(document.total_amount))

    y_position -= 40
    pdf_canvas.setFillColor(primary_color)
    pdf_canvas.setFont("Helvetica-Bold", 11)
    pdf_canvas.drawString(margin, y_position, labels["payment_details"])
    pdf_canvas.setFont("Helvetica", 10)
    pdf_canvas.setFillColor(muted_text)
    payment_lines = (
        document.bank_details.splitlines()
        if document.bank_details
        else [labels["no_payment_details"]]
    )
    for line in payment_lines:
        y_position -= 14
        pdf_canvas.drawString(margin, y_position, line)

    pdf_canvas.save()

    pdf_bytes = buffer.getvalue()
    pdf_generation_seconds.observe(perf_counter() - start)
    return pdf_bytes


__all__ = [
    "DocumentLine",
    "InvoiceDocument",
    "Party",
    "build_filename",
    "format_hours",
    "format_money",
    "render_invoice_pdf",
]
