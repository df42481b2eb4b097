"""Revenue and invoice status summaries for the dashboard."""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Literal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.backend.src.core.errors import InvalidInputError
from app.backend.src.models import Invoice, InvoiceStatus

PeriodKind = Literal["month", "quarter", "year"]


@dataclass(frozen=True, slots=True)
class DashboardMetrics:
    period: PeriodKind
    period_start: date
    period_end: date
    revenue: Decimal
    outstanding: Decimal
    invoice_count: int
    paid_count: int
    sent_count: int


def period_range(
    period: PeriodKind, year: int, month: int | None = None
) -> tuple[date, date]:
    """Return the first and last day of the requested reporting period."""

    if period == "year":
        return date(year, 1, 1), date(year, 12, 31)

    if month is None or not 1 <= month <= 12:
        raise InvalidInputError(
            "A month between 1 and 12 is required", details={"month": month}
        )
    if period == "quarter":
        first_month = 3 * ((month - 1) // 3) + 1
        last_month = first_month + 2
    elif period == "month":
        first_month = last_month = month
    else:
        raise InvalidInputError("Unknown period", details={"period": period})

    start = date(year, first_month, 1)
    end = date(year, last_month, monthrange(year, last_month)[1])
    return start, end


def compute_metrics(
    session: Session,
    period: PeriodKind = "month",
    *,
    year: int | None = None,
    month: int | None = None,
    today: date | None = None,
) -> DashboardMetrics:
    """Summarise invoices for the dashboard.

    Only the paid revenue is limited to invoices issued within the period.
    The outstanding amount and the invoice counts cover all invoices, so an
    unpaid invoice keeps showing until it is paid.
    """

    today = today or date.today()
    year = year or today.year
    if month is None and period != "year":
        month = today.month
    start, end = period_range(period, year, month)

    revenue = session.execute(
        select(func.coalesce(func.sum(Invoice.total_amount), 0)).where(
            Invoice.status == InvoiceStatus.PAID.value,
            Invoice.issue_date >= start,
            Invoice.issue_date <= end,
        )
    ).scalar_one()

    rows = session.execute(
        select(
            Invoice.status,
            func.count(Invoice.id),
            func.coalesce(func.sum(Invoice.total_amount), 0),
        ).group_by(Invoice.status)
    ).all()

    counts: dict[str, int] = {}
    amounts: dict[str, Decimal] = {}
    for status, count, amount in rows:
        counts[status] = count
        amounts[status] = _to_money(amount)

    return DashboardMetrics(
        period=period,
        period_start=start,
        period_end=end,
        revenue=_to_money(revenue),
        outstanding=amounts.get(InvoiceStatus.SENT.value, _to_money(0)),
        invoice_count=sum(counts.values()),
        paid_count=counts.get(InvoiceStatus.PAID.value, 0),
        sent_count=counts.get(InvoiceStatus.SENT.value, 0),
    )


def _to_money(value) -> Decimal:  # type: ignore[no-untyped-def]
    return Decimal(str(value)).quantize(Decimal("0.01"))


__all__ = ["DashboardMetrics", "compute_metrics", "period_range"]
