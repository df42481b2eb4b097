"""Recurring class templates and weekly auto-scheduling."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.backend.src.core.config import get_settings
from app.backend.src.core.errors import InvalidInputError, NotFoundError
from app.backend.src.models import ClassTemplate, TimeEntry
from app.backend.src.services.clients import get_client
from app.backend.src.services.time_entries import create_time_entry

LOGGER = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = {
    "client_id",
    "name",
    "title",
    "weekday",
    "start_time",
    "end_time",
    "is_active",
    "auto_schedule",
}


def _check_slot(weekday: int, start_time: time, end_time: time) -> None:
    if not 0 <= weekday <= 6:
        raise InvalidInputError(
            "Weekday must be between 0 (Monday) and 6 (Sunday)",
            details={"weekday": weekday},
        )
    if end_time <= start_time:
        raise InvalidInputError(
            "End time must be after start time",
            details={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()},
        )


def get_template(session: Session, template_id: int) -> ClassTemplate:
    template = session.get(ClassTemplate, template_id)
    if template is None:
        raise NotFoundError("Template not found", details={"template_id": template_id})
    return template


def list_templates(
    session: Session, *, client_id: int | None = None, active_only: bool = False
) -> list[ClassTemplate]:
    query = session.query(ClassTemplate)
    if client_id is not None:
        query = query.filter(ClassTemplate.client_id == client_id)
    if active_only:
        query = query.filter(ClassTemplate.is_active.is_(True))
    return query.order_by(ClassTemplate.weekday, ClassTemplate.start_time).all()


def create_template(
    session: Session,
    *,
    client_id: int,
    name: str,
    title: str,
    weekday: int,
    start_time: time,
    end_time: time,
    is_active: bool = True,
    auto_schedule: bool = False,
) -> ClassTemplate:
    """Create a weekly class template for an existing client."""

    get_client(session, client_id)
    _check_slot(weekday, start_time, end_time)
    cleaned_name = (name or "").strip()
    if not cleaned_name:
        raise InvalidInputError("Template name must not be empty")

    template = ClassTemplate(
        client_id=client_id,
        name=cleaned_name,
        title=(title or "").strip() or cleaned_name,
        weekday=weekday,
        start_time=start_time,
        end_time=end_time,
        is_active=is_active,
        auto_schedule=auto_schedule,
    )
    session.add(template)
    session.commit()
    session.refresh(template)
    LOGGER.info("template_created", template_id=template.id, client_id=client_id)
    return template


def update_template(
    session: Session, template_id: int, changes: dict[str, Any]
) -> ClassTemplate:
    template = get_template(session, template_id)
    if changes.get("client_id") is not None:
        get_client(session, changes["client_id"])

    _check_slot(
        changes["weekday"] if changes.get("weekday") is not None else template.weekday,
        changes.get("start_time") or template.start_time,
        changes.get("end_time") or template.end_time,
    )
    for field, value in changes.items():
        if field in _UPDATABLE_FIELDS and value is not None:
            setattr(template, field, value)

    session.add(template)
    session.commit()
    session.refresh(template)
    LOGGER.info("template_updated", template_id=template.id)
    return template


def delete_template(session: Session, template_id: int) -> None:
    """Delete a template. Entries created from it are kept."""

    template = get_template(session, template_id)
    session.delete(template)
    session.commit()
    LOGGER.info("template_deleted", template_id=template_id)


def _slot_bounds(template: ClassTemplate, on: date) -> tuple[datetime, datetime]:
    return (
        datetime.combine(on, template.start_time),
        datetime.combine(on, template.end_time),
    )


def _slot_taken(session: Session, client_id: int, start_at: datetime) -> bool:
    stmt = select(TimeEntry.id).where(
        TimeEntry.client_id == client_id, TimeEntry.start_at == start_at
    )
    return session.execute(stmt.limit(1)).first() is not None


def instantiate_template(session: Session, template_id: int, on: date) -> TimeEntry:
    """Create a scheduled entry from a template on the given date."""

    template = get_template(session, template_id)
    if not template.is_active:
        raise InvalidInputError(
            "Template is inactive", details={"template_id": template_id}
        )

    start_at, end_at = _slot_bounds(template, on)
    return create_time_entry(
        session,
        client_id=template.client_id,
        title=template.title,
        start_at=start_at,
        end_at=end_at,
        template_id=template.id,
    )


def schedule_week(
    session: Session, week_start: date, *, today: date | None = None
) -> list[TimeEntry]:
    """Create entries for every auto-scheduled template in the given week.

    ``week_start`` must be a Monday. Slots in the past, beyond the advance
    window, already scheduled for the template, or already occupied by an
    entry of the same client are skipped.
    """

    if week_start.weekday() != 0:
        raise InvalidInputError(
            "Week start must be a Monday",
            details={"week_start": week_start.isoformat()},
        )

    today = today or date.today()
    horizon = today + timedelta(days=get_settings().schedule_advance_days)
    templates = (
        session.query(ClassTemplate)
        .filter(ClassTemplate.is_active.is_(True), ClassTemplate.auto_schedule.is_(True))
        .order_by(ClassTemplate.weekday, ClassTemplate.start_time, ClassTemplate.id)
        .all()
    )

    created: list[TimeEntry] = []
    for template in templates:
        slot_date = week_start + timedelta(days=template.weekday)
        if slot_date < today or slot_date > horizon:
            continue
        if template.last_scheduled_date == slot_date:
            continue
        start_at, end_at = _slot_bounds(template, slot_date)
        if _slot_taken(session, template.client_id, start_at):
            LOGGER.info(
                "schedule_slot_taken",
                template_id=template.id,
                start_at=start_at.isoformat(),
            )
            continue

        entry = create_time_entry(
            session,
            client_id=template.client_id,
            title=template.title,
            start_at=start_at,
            end_at=end_at,
            template_id=template.id,
            commit=False,
        )
        template.last_scheduled_date = slot_date
        created.append(entry)

    session.commit()
    for entry in created:
        session.refresh(entry)
    LOGGER.info(
        "week_scheduled",
        week_start=week_start.isoformat(),
        templates=len(templates),
        created=len(created),
    )
    return created


__all__ = [
    "create_template",
    "delete_template",
    "get_template",
    "instantiate_template",
    "list_templates",
    "schedule_week",
    "update_template",
]
