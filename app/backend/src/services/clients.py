"""Service layer functions for managing clients."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.backend.src.core.errors import InvalidInputError, NotFoundError
from app.backend.src.models import Client, Invoice
from app.backend.src.services import s3

LOGGER = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = {
    "name",
    "address",
    "contact_person",
    "contact_email",
    "hourly_rate",
    "is_active",
}
_REQUIRED_FIELDS = {"name", "address", "hourly_rate", "is_active"}


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidInputError("Client name must not be empty")
    return cleaned


def _check_rate(rate: Decimal | None) -> Decimal:
    if rate is None or Decimal(rate) < 0:
        raise InvalidInputError(
            "Hourly rate must be zero or positive",
            details={"hourly_rate": None if rate is None else str(rate)},
        )
    return Decimal(rate)


def get_client(session: Session, client_id: int) -> Client:
    client = session.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client not found", details={"client_id": client_id})
    return client


def list_clients(session: Session, *, active_only: bool = False) -> list[Client]:
    """Return clients ordered by name."""

    query = session.query(Client)
    if active_only:
        query = query.filter(Client.is_active.is_(True))
    return query.order_by(Client.name.asc(), Client.id.asc()).all()


def create_client(
    session: Session,
    *,
    name: str,
    hourly_rate: Decimal,
    address: str = "",
    contact_person: str | None = None,
    contact_email: str | None = None,
    is_active: bool = True,
) -> Client:
    """Create and persist a new client."""

    client = Client(
        name=_clean_name(name),
        address=(address or "").strip(),
        contact_person=contact_person,
        contact_email=contact_email,
        hourly_rate=_check_rate(hourly_rate),
        is_active=is_active,
    )
    session.add(client)
    session.commit()
    session.refresh(client)
    LOGGER.info("client_created", client_id=client.id, name=client.name)
    return client


def update_client(session: Session, client_id: int, changes: dict[str, Any]) -> Client:
    """Apply ``changes`` to a client. Unknown keys are ignored."""

    client = get_client(session, client_id)
    for field, value in changes.items():
        if field not in _UPDATABLE_FIELDS:
            continue
        if value is None and field in _REQUIRED_FIELDS:
            continue
        if field == "name":
            value = _clean_name(value)
        elif field == "hourly_rate":
            value = _check_rate(value)
        elif field == "address":
            value = (value or "").strip()
        setattr(client, field, value)

    session.add(client)
    session.commit()
    session.refresh(client)
    LOGGER.info("client_updated", client_id=client.id, fields=sorted(changes))
    return client


def delete_client(session: Session, client_id: int) -> None:
    """Delete a client along with its entries, templates and invoices."""

    client = get_client(session, client_id)
    pdf_keys = [
        key
        for key in session.scalars(
            select(Invoice.pdf_key).where(Invoice.client_id == client_id)
        )
        if key
    ]
    session.delete(client)
    session.commit()
    for key in pdf_keys:
        s3.discard_object(key)
    LOGGER.info("client_deleted", client_id=client_id)


__all__ = [
    "create_client",
    "delete_client",
    "get_client",
    "list_clients",
    "update_client",
]
