"""Sequential invoice numbering per year or month scope."""

from __future__ import annotations

from datetime import date
from typing import Literal, Protocol

import structlog
from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.backend.src.core.errors import NumberingConflictError
from app.backend.src.models import InvoiceSequence

LOGGER = structlog.get_logger(__name__)

ScopeGranularity = Literal["year", "month"]

_INSERT_IGNORING_CONFLICTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SequenceCounter(Protocol):
    """Durable counter handing out the next value for a numbering scope."""

    def next_value(self, scope: str) -> int:
        """Return the next value for ``scope``, starting at 1."""


class SqlSequenceCounter:
    """Counter backed by the ``invoice_sequences`` table.

    The scope row is seeded with an insert that ignores an existing row, then
    incremented with a single ``UPDATE``. Both join the caller's transaction,
    so the increment is rolled back along with a failed invoice, and the row
    lock serializes concurrent writers, including the first two of a scope.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def ensure_scope(self, scope: str) -> None:
        """Create the counter row for ``scope`` at zero unless it exists."""

        dialect = self._session.get_bind().dialect.name
        upsert = _INSERT_IGNORING_CONFLICTS.get(dialect)
        if upsert is None:
            self._insert_if_missing(scope)
            return
        self._session.execute(
            upsert(InvoiceSequence)
            .values(scope=scope, last_value=0)
            .on_conflict_do_nothing(index_elements=[InvoiceSequence.scope])
        )

    def _insert_if_missing(self, scope: str) -> None:
        if self._session.get(InvoiceSequence, scope) is not None:
            return
        self._session.add(InvoiceSequence(scope=scope, last_value=0))
        try:
            self._session.flush()
        except IntegrityError as exc:
            LOGGER.error("invoice_sequence_init_conflict", scope=scope)
            raise NumberingConflictError(
                f"Invoice sequence for scope '{scope}' was initialised concurrently",
                details={"scope": scope},
            ) from exc

    def next_value(self, scope: str) -> int:
        self.ensure_scope(scope)
        self._session.execute(
            update(InvoiceSequence)
            .where(InvoiceSequence.scope == scope)
            .values(last_value=InvoiceSequence.last_value + 1)
            .execution_options(synchronize_session=False)
        )
        return self._session.execute(
            select(InvoiceSequence.last_value).where(InvoiceSequence.scope == scope)
        ).scalar_one()


def invoice_scope_key(on: date, granularity: ScopeGranularity = "year") -> str:
    """Return the numbering scope (``YYYY`` or ``YYYY-MM``) for a date."""

    if granularity == "year":
        return f"{on.year:04d}"
    if granularity == "month":
        return f"{on.year:04d}-{on.month:02d}"
    raise ValueError(f"Unknown invoice number scope: {granularity}")


def format_invoice_number(scope: str, sequence: int, width: int = 3) -> str:
    """Return ``"{scope}-{sequence}"`` with the sequence zero-padded."""

    if sequence < 1:
        raise ValueError("Invoice sequence numbers start at 1")
    return f"{scope}-{sequence:0{width}d}"


def next_invoice_number(
    counter: SequenceCounter, scope: str, width: int = 3
) -> tuple[str, int]:
    """Draw the next number for ``scope`` and return it with its sequence."""

    sequence = counter.next_value(scope)
    number = format_invoice_number(scope, sequence, width)
    LOGGER.info("invoice_number_issued", scope=scope, sequence=sequence, number=number)
    return number, sequence


__all__ = [
    "SequenceCounter",
    "SqlSequenceCounter",
    "format_invoice_number",
    "invoice_scope_key",
    "next_invoice_number",
]
