"""Invoice document labels in the supported languages."""

from __future__ import annotations

SUPPORTED_LANGUAGES = ("en", "de")

INVOICE_LABELS: dict[str, dict[str, str]] = {
    "en": {
        "invoice": "INVOICE",
        "invoice_number": "Invoice #",
        "date": "Date",
        "due_date": "Due Date",
        "period": "Service Period",
        "from": "FROM",
        "to": "TO",
        "contact": "Contact",
        "tax_id": "Tax ID",
        "service": "Service",
        "start": "Start",
        "end": "End",
        "hours": "Hours",
        "amount": "Amount",
        "total_hours": "Total Hours",
        "hourly_rate": "Hourly Rate",
        "total_amount": "Total Amount",
        "payment_details": "Payment Details",
        "no_payment_details": "Please contact for payment details.",
        "no_sessions": "No billable sessions in this period.",
        "page": "Page",
    },
    "de": {
        "invoice": "RECHNUNG",
        "invoice_number": "Rechnungsnr.",
        "date": "Datum",
        "due_date": "Fällig am",
        "period": "Leistungszeitraum",
        "from": "VON",
        "to": "AN",
        "contact": "Ansprechpartner",
        "tax_id": "Steuernummer",
        "service": "Leistung",
        "start": "Beginn",
        "end": "Ende",
        "hours": "Stunden",
        "amount": "Betrag",
        "total_hours": "Gesamtstunden",
        "hourly_rate": "Stundensatz",
        "total_amount": "Gesamtbetrag",
        "payment_details": "Zahlungsinformationen",
        "no_payment_details": "Bitte kontaktieren Sie uns für Zahlungsdetails.",
        "no_sessions": "Keine abrechenbaren Einheiten in diesem Zeitraum.",
        "page": "Seite",
    },
}

_DATE_FORMATS = {"en": "%Y-%m-%d", "de": "%d.%m.%Y"}


def normalize_language(language: str | None, default: str = "en") -> str:
    """Return a supported language code, falling back to ``default``."""

    candidate = (language or "").strip().lower()[:2]
    if candidate in SUPPORTED_LANGUAGES:
        return candidate
    return default


def labels_for(language: str) -> dict[str, str]:
    return INVOICE_LABELS[normalize_language(language)]


def date_format_for(language: str) -> str:
    return _DATE_FORMATS[normalize_language(language)]


__all__ = [
    "INVOICE_LABELS",
    "SUPPORTED_LANGUAGES",
    "date_format_for",
    "labels_for",
    "normalize_language",
]
