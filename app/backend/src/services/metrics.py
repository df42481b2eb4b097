"""Prometheus metric definitions for invoicing."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

invoices_generated_total = Counter(
    "invoices_generated_total",
    "Total invoice generation attempts by outcome.",
    labelnames=["outcome"],
)

invoice_generation_seconds = Histogram(
    "invoice_generation_seconds",
    "Duration of a complete invoice generation request in seconds.",
)

pdf_generation_seconds = Histogram(
    "pdf_generation_seconds",
    "Time spent rendering a single invoice PDF.",
)

invoice_status_changes_total = Counter(
    "invoice_status_changes_total",
    "Invoice status transitions by target status.",
    labelnames=["status"],
)

__all__ = [
    "invoice_generation_seconds",
    "invoice_status_changes_total",
    "invoices_generated_total",
    "pdf_generation_seconds",
]
