"""Class template and weekly scheduling endpoints."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.backend.src.schemas.class_template import (
    ScheduleWeekRequest,
    TemplateCreate,
    TemplateInstantiateRequest,
    TemplateRead,
    TemplateUpdate,
)
from app.backend.src.schemas.time_entry import TimeEntryRead
from app.backend.src.services import class_templates as template_service
from ..db import get_session_dependency

LOGGER = structlog.get_logger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])

SessionDep = Annotated[Session, Depends(get_session_dependency)]


@router.get("", response_model=list[TemplateRead])
def list_templates(
    session: SessionDep,
    client_id: int | None = Query(default=None),
    active_only: bool = Query(default=False),
) -> list[TemplateRead]:
    templates = template_service.list_templates(
        session, client_id=client_id, active_only=active_only
    )
    return [TemplateRead.model_validate(template) for template in templates]


@router.post("", response_model=TemplateRead, status_code=status.HTTP_201_CREATED)
def create_template(payload: TemplateCreate, session: SessionDep) -> TemplateRead:
    template = template_service.create_template(session, **payload.model_dump())
    return TemplateRead.model_validate(template)


@router.post(
    "/schedule-week",
    response_model=list[TimeEntryRead],
    status_code=status.HTTP_201_CREATED,
)
def schedule_week(payload: ScheduleWeekRequest, session: SessionDep) -> list[TimeEntryRead]:
    """Create the week's sessions for every auto-scheduled template."""

    entries = template_service.schedule_week(session, payload.week_start)
    LOGGER.info(
        "schedule_week_request_completed",
        week_start=payload.week_start.isoformat(),
        created=len(entries),
    )
    return [TimeEntryRead.model_validate(entry) for entry in entries]


@router.put("/{template_id}", response_model=TemplateRead)
def update_template(
    template_id: int, payload: TemplateUpdate, session: SessionDep
) -> TemplateRead:
    template = template_service.update_template(
        session, template_id, payload.model_dump(exclude_unset=True)
    )
    return TemplateRead.model_validate(template)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(template_id: int, session: SessionDep) -> Response:
    template_service.delete_template(session, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{template_id}/instantiate",
    response_model=TimeEntryRead,
    status_code=status.HTTP_201_CREATED,
)
def instantiate_template(
    template_id: int, payload: TemplateInstantiateRequest, session: SessionDep
) -> TimeEntryRead:
    entry = template_service.instantiate_template(session, template_id, payload.on_date)
    return TimeEntryRead.model_validate(entry)
