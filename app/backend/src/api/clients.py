"""Client management endpoints."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.backend.src.models import TimeEntryStatus
from app.backend.src.schemas.client import ClientCreate, ClientRead, ClientUpdate
from app.backend.src.schemas.time_entry import TimeEntryRead
from app.backend.src.services import clients as client_service
from app.backend.src.services import time_entries as time_entry_service
from ..db import get_session_dependency

router = APIRouter(prefix="/clients", tags=["clients"])

SessionDep = Annotated[Session, Depends(get_session_dependency)]


@router.get("", response_model=list[ClientRead])
def list_clients(
    session: SessionDep, active_only: bool = Query(default=False)
) -> list[ClientRead]:
    clients = client_service.list_clients(session, active_only=active_only)
    return [ClientRead.model_validate(client) for client in clients]


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
def create_client(payload: ClientCreate, session: SessionDep) -> ClientRead:
    client = client_service.create_client(session, **payload.model_dump())
    return ClientRead.model_validate(client)


@router.get("/{client_id}", response_model=ClientRead)
def get_client(client_id: int, session: SessionDep) -> ClientRead:
    return ClientRead.model_validate(client_service.get_client(session, client_id))


@router.put("/{client_id}", response_model=ClientRead)
def update_client(client_id: int, payload: ClientUpdate, session: SessionDep) -> ClientRead:
    client = client_service.update_client(
        session, client_id, payload.model_dump(exclude_unset=True)
    )
    return ClientRead.model_validate(client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(client_id: int, session: SessionDep) -> Response:
    """Delete a client with all of its sessions, templates and invoices."""

    client_service.delete_client(session, client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{client_id}/time-entries", response_model=list[TimeEntryRead])
def list_client_time_entries(
    client_id: int,
    session: SessionDep,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    status_filter: TimeEntryStatus | None = Query(default=None, alias="status"),
) -> list[TimeEntryRead]:
    client_service.get_client(session, client_id)
    entries = time_entry_service.list_time_entries(
        session,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        status=status_filter,
    )
    return [TimeEntryRead.model_validate(entry) for entry in entries]
