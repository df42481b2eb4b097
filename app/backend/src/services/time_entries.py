"""Service layer functions for logged time entries."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.backend.src.core.errors import InvalidInputError, InvalidRangeError, NotFoundError
from app.backend.src.models import TimeEntry, TimeEntryStatus
from app.backend.src.services.clients import get_client
from app.backend.src.services.invoice_aggregator import period_bounds
from app.backend.src.services.status_transitions import ensure_time_entry_transition

LOGGER = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = {"client_id", "title", "start_at", "end_at", "notes"}


def _check_times(start_at: datetime, end_at: datetime) -> None:
    if end_at <= start_at:
        raise InvalidInputError(
            "End time must be after start time",
            details={"start_at": start_at.isoformat(), "end_at": end_at.isoformat()},
        )


def get_time_entry(session: Session, entry_id: int) -> TimeEntry:
    entry = session.get(TimeEntry, entry_id)
    if entry is None:
        raise NotFoundError("Time entry not found", details={"time_entry_id": entry_id})
    return entry


def list_time_entries(
    session: Session,
    *,
    client_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    status: TimeEntryStatus | str | None = None,
) -> list[TimeEntry]:
    """Return entries matching the filters, oldest first.

    Date filters are inclusive by day and compare against ``start_at``.
    """

    if start_date is not None and end_date is not None and start_date > end_date:
        raise InvalidRangeError("Start date must not be after end date")

    stmt = select(TimeEntry)
    if client_id is not None:
        stmt = stmt.where(TimeEntry.client_id == client_id)
    if start_date is not None:
        lower, _ = period_bounds(start_date, start_date)
        stmt = stmt.where(TimeEntry.start_at >= lower)
    if end_date is not None:
        _, upper = period_bounds(end_date, end_date)
        stmt = stmt.where(TimeEntry.start_at < upper)
    if status is not None:
        stmt = stmt.where(TimeEntry.status == TimeEntryStatus(status).value)

    stmt = stmt.order_by(TimeEntry.start_at.asc(), TimeEntry.id.asc())
    return list(session.scalars(stmt))


def fetch_entries_for_period(
    session: Session, client_id: int, period_start: date, period_end: date
) -> list[TimeEntry]:
    """Return every entry of ``client_id`` starting inside the period, any status."""

    lower, upper = period_bounds(period_start, period_end)
    stmt = (
        select(TimeEntry)
        .where(
            TimeEntry.client_id == client_id,
            TimeEntry.start_at >= lower,
            TimeEntry.start_at < upper,
        )
        .order_by(TimeEntry.start_at.asc(), TimeEntry.id.asc())
    )
    return list(session.scalars(stmt))


def create_time_entry(
    session: Session,
    *,
    client_id: int,
    title: str,
    start_at: datetime,
    end_at: datetime,
    status: TimeEntryStatus | str = TimeEntryStatus.SCHEDULED,
    notes: str = "",
    template_id: int | None = None,
    commit: bool = True,
) -> TimeEntry:
    """Log a new time entry for an existing client."""

    get_client(session, client_id)
    _check_times(start_at, end_at)
    cleaned_title = (title or "").strip()
    if not cleaned_title:
        raise InvalidInputError("Title must not be empty")

    entry = TimeEntry(
        client_id=client_id,
        template_id=template_id,
        title=cleaned_title,
        start_at=start_at,
        end_at=end_at,
        status=TimeEntryStatus(status).value,
        notes=notes or "",
    )
    session.add(entry)
    if commit:
        session.commit()
        session.refresh(entry)
    else:
        session.flush()
    LOGGER.info(
        "time_entry_created",
        time_entry_id=entry.id,
        client_id=client_id,
        status=entry.status,
    )
    return entry


def update_time_entry(session: Session, entry_id: int, changes: dict[str, Any]) -> TimeEntry:
    """Edit an entry's details. Status changes go through :func:`change_status`."""

    entry = get_time_entry(session, entry_id)
    if "client_id" in changes and changes["client_id"] is not None:
        get_client(session, changes["client_id"])
    if "title" in changes:
        cleaned_title = (changes["title"] or "").strip()
        if not cleaned_title:
            raise InvalidInputError("Title must not be empty")
        changes = {**changes, "title": cleaned_title}

    _check_times(
        changes.get("start_at") or entry.start_at,
        changes.get("end_at") or entry.end_at,
    )
    for field, value in changes.items():
        if field in _UPDATABLE_FIELDS and value is not None:
            setattr(entry, field, value)

    session.add(entry)
    session.commit()
    session.refresh(entry)
    LOGGER.info("time_entry_updated", time_entry_id=entry.id)
    return entry


def change_status(
    session: Session, entry_id: int, status: TimeEntryStatus | str
) -> TimeEntry:
    """Move an entry along its lifecycle."""

    entry = get_time_entry(session, entry_id)
    target = ensure_time_entry_transition(entry.status, status)
    previous = entry.status
    entry.status = target.value
    session.add(entry)
    session.commit()
    session.refresh(entry)
    LOGGER.info(
        "time_entry_status_changed",
        time_entry_id=entry.id,
        previous=previous,
        status=entry.status,
    )
    return entry


def delete_time_entry(session: Session, entry_id: int) -> None:
    """Delete an entry. Invoices that billed it keep their line item snapshot."""

    entry = get_time_entry(session, entry_id)
    session.delete(entry)
    session.commit()
    LOGGER.info("time_entry_deleted", time_entry_id=entry_id)


__all__ = [
    "change_status",
    "create_time_entry",
    "delete_time_entry",
    "fetch_entries_for_period",
    "get_time_entry",
    "list_time_entries",
    "update_time_entry",
]
