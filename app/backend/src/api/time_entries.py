"""Time entry endpoints."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.backend.src.models import TimeEntryStatus
from app.backend.src.schemas.time_entry import (
    TimeEntryCreate,
    TimeEntryRead,
    TimeEntryStatusUpdate,
    TimeEntryUpdate,
)
from app.backend.src.services import time_entries as time_entry_service
from ..db import get_session_dependency

router = APIRouter(prefix="/time-entries", tags=["time entries"])

SessionDep = Annotated[Session, Depends(get_session_dependency)]


@router.get("", response_model=list[TimeEntryRead])
def list_time_entries(
    session: SessionDep,
    client_id: int | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    status_filter: TimeEntryStatus | None = Query(default=None, alias="status"),
) -> list[TimeEntryRead]:
    """Return entries filtered by client, start day range and status."""

    entries = time_entry_service.list_time_entries(
        session,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        status=status_filter,
    )
    return [TimeEntryRead.model_validate(entry) for entry in entries]


@router.post("", response_model=TimeEntryRead, status_code=status.HTTP_201_CREATED)
def create_time_entry(payload: TimeEntryCreate, session: SessionDep) -> TimeEntryRead:
    entry = time_entry_service.create_time_entry(session, **payload.model_dump())
    return TimeEntryRead.model_validate(entry)


@router.get("/{entry_id}", response_model=TimeEntryRead)
def get_time_entry(entry_id: int, session: SessionDep) -> TimeEntryRead:
    return TimeEntryRead.model_validate(time_entry_service.get_time_entry(session, entry_id))


@router.put("/{entry_id}", response_model=TimeEntryRead)
def update_time_entry(
    entry_id: int, payload: TimeEntryUpdate, session: SessionDep
) -> TimeEntryRead:
    entry = time_entry_service.update_time_entry(
        session, entry_id, payload.model_dump(exclude_unset=True)
    )
    return TimeEntryRead.model_validate(entry)


@router.post("/{entry_id}/status", response_model=TimeEntryRead)
def change_time_entry_status(
    entry_id: int, payload: TimeEntryStatusUpdate, session: SessionDep
) -> TimeEntryRead:
    """Mark a scheduled entry as completed or cancelled."""

    entry = time_entry_service.change_status(session, entry_id, payload.status)
    return TimeEntryRead.model_validate(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_time_entry(entry_id: int, session: SessionDep) -> Response:
    time_entry_service.delete_time_entry(session, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
