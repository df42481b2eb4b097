"""Aggregation of logged time entries into invoice totals.

Everything here is pure: callers fetch the entries and persist the result.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from app.backend.src.core.errors import InvalidInputError, InvalidRangeError
from app.backend.src.models import InvoiceStatus, TimeEntryStatus

CENT = Decimal("0.01")
SECONDS_PER_HOUR = Decimal(3600)
_ONE_SECOND = timedelta(seconds=1)


class BillableEntry(Protocol):
    """Shape of a time entry as the aggregator sees it."""

    id: int
    title: str
    start_at: datetime
    end_at: datetime
    status: str


@dataclass(frozen=True, slots=True)
class DraftLineItem:
    """One billed entry, copied out of the time entry store."""

    time_entry_id: int
    title: str
    start_at: datetime
    end_at: datetime
    duration_seconds: int

    @property
    def duration_hours(self) -> Decimal:
        return Decimal(self.duration_seconds) / SECONDS_PER_HOUR


@dataclass(frozen=True, slots=True)
class InvoiceAggregate:
    """Totals for one client and period, before a number is assigned."""

    client_id: int
    period_start: date
    period_end: date
    hourly_rate: Decimal
    line_items: tuple[DraftLineItem, ...]
    total_seconds: int
    total_amount: Decimal

    @property
    def total_hours(self) -> Decimal:
        return Decimal(self.total_seconds) / SECONDS_PER_HOUR


@dataclass(frozen=True, slots=True)
class InvoiceDraft:
    """In-memory invoice ready to be rendered and persisted."""

    number: str
    number_scope: str
    sequence_number: int
    aggregate: InvoiceAggregate
    created_at: datetime
    issue_date: date
    due_date: date | None
    language: str
    status: InvoiceStatus = InvoiceStatus.CREATED

    @property
    def total_hours(self) -> Decimal:
        return self.aggregate.total_hours

    @property
    def total_amount(self) -> Decimal:
        return self.aggregate.total_amount


def validate_period(period_start: date, period_end: date, *, max_days: int | None = None) -> None:
    """Raise :class:`InvalidRangeError` for a reversed or overlong period."""

    if period_start > period_end:
        raise InvalidRangeError(
            "Start date must not be after end date",
            details={
                "start_date": period_start.isoformat(),
                "end_date": period_end.isoformat(),
            },
        )
    if max_days is not None and (period_end - period_start).days > max_days:
        raise InvalidRangeError(
            f"Date range cannot exceed {max_days} days",
            details={"days": (period_end - period_start).days, "max_days": max_days},
        )


def period_bounds(period_start: date, period_end: date) -> tuple[datetime, datetime]:
    """Return the half-open timestamp window covering both end days in full."""

    lower = datetime.combine(period_start, time.min)
    upper = datetime.combine(period_end + timedelta(days=1), time.min)
    return lower, upper


def entry_duration_seconds(entry: BillableEntry) -> int:
    """Return the entry duration in whole seconds."""

    duration = entry.end_at - entry.start_at
    if duration < timedelta(0):
        raise InvalidInputError(
            "Time entry ends before it starts",
            details={"time_entry_id": entry.id},
        )
    return duration // _ONE_SECOND


def select_billable_entries(
    entries: Iterable[BillableEntry], period_start: date, period_end: date
) -> list[BillableEntry]:
    """Return completed entries starting inside the period, in billing order."""

    lower, upper = period_bounds(period_start, period_end)
    billable = [
        entry
        for entry in entries
        if entry.status == TimeEntryStatus.COMPLETED.value
        and lower <= entry.start_at < upper
    ]
    billable.sort(key=lambda entry: (entry.start_at, entry.id))
    return billable


def compute_total_amount(total_seconds: int, hourly_rate: Decimal) -> Decimal:
    """Multiply billed hours by the rate and round half-up to cents, once."""

    total_hours = Decimal(total_seconds) / SECONDS_PER_HOUR
    return (total_hours * Decimal(hourly_rate)).quantize(CENT, rounding=ROUND_HALF_UP)


def aggregate_time_entries(
    client_id: int,
    hourly_rate: Decimal,
    period_start: date,
    period_end: date,
    entries: Iterable[BillableEntry],
) -> InvoiceAggregate:
    """Build the invoice totals for ``client_id`` over the given period.

    Scheduled and cancelled entries are dropped, as are entries starting
    outside the period. An empty selection is valid and yields zero totals.
    """

    validate_period(period_start, period_end)

    line_items = tuple(
        DraftLineItem(
            time_entry_id=entry.id,
            title=entry.title,
            start_at=entry.start_at,
            end_at=entry.end_at,
            duration_seconds=entry_duration_seconds(entry),
        )
        for entry in select_billable_entries(entries, period_start, period_end)
    )
    total_seconds = sum(item.duration_seconds for item in line_items)

    return InvoiceAggregate(
        client_id=client_id,
        period_start=period_start,
        period_end=period_end,
        hourly_rate=Decimal(hourly_rate),
        line_items=line_items,
        total_seconds=total_seconds,
        total_amount=compute_total_amount(total_seconds, hourly_rate),
    )


__all__ = [
    "BillableEntry",
    "CENT",
    "DraftLineItem",
    "InvoiceAggregate",
    "InvoiceDraft",
    "aggregate_time_entries",
    "compute_total_amount",
    "entry_duration_seconds",
    "period_bounds",
    "select_billable_entries",
    "validate_period",
]
