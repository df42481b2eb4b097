"""Allowed status transitions for invoices and time entries."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import TypeVar

from app.backend.src.core.errors import InvalidStatusTransitionError
from app.backend.src.models import InvoiceStatus, TimeEntryStatus

StatusT = TypeVar("StatusT", bound=Enum)

INVOICE_TRANSITIONS: Mapping[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.CREATED: frozenset({InvoiceStatus.SENT}),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID}),
    InvoiceStatus.PAID: frozenset(),
}

TIME_ENTRY_TRANSITIONS: Mapping[TimeEntryStatus, frozenset[TimeEntryStatus]] = {
    TimeEntryStatus.SCHEDULED: frozenset(
        {TimeEntryStatus.COMPLETED, TimeEntryStatus.CANCELLED}
    ),
    TimeEntryStatus.COMPLETED: frozenset(),
    TimeEntryStatus.CANCELLED: frozenset(),
}


def _ensure_transition(
    table: Mapping[StatusT, frozenset[StatusT]],
    current: StatusT,
    target: StatusT,
    *,
    subject: str,
) -> StatusT:
    allowed = table[current]
    if target not in allowed:
        raise InvalidStatusTransitionError(
            f"Cannot change {subject} status from '{current.value}' to '{target.value}'",
            details={
                "current": current.value,
                "requested": target.value,
                "allowed": sorted(status.value for status in allowed),
            },
        )
    return target


def ensure_invoice_transition(
    current: InvoiceStatus | str, target: InvoiceStatus | str
) -> InvoiceStatus:
    """Return ``target`` if an invoice may move there from ``current``."""

    return _ensure_transition(
        INVOICE_TRANSITIONS,
        InvoiceStatus(current),
        InvoiceStatus(target),
        subject="invoice",
    )


def ensure_time_entry_transition(
    current: TimeEntryStatus | str, target: TimeEntryStatus | str
) -> TimeEntryStatus:
    """Return ``target`` if a time entry may move there from ``current``."""

    return _ensure_transition(
        TIME_ENTRY_TRANSITIONS,
        TimeEntryStatus(current),
        TimeEntryStatus(target),
        subject="time entry",
    )


__all__ = [
    "INVOICE_TRANSITIONS",
    "TIME_ENTRY_TRANSITIONS",
    "ensure_invoice_transition",
    "ensure_time_entry_transition",
]
