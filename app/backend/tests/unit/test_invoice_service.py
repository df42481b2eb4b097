"""Tests for invoice generation and lifecycle management."""

from __future__ import annotations

import os
import sys
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_sessionbook.db")
os.environ.setdefault("AWS_S3_BUCKET", "local")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/sessionbook-tests")

import pytest

from app.backend.src.core.errors import (
    InvalidInputError,
    InvalidRangeError,
    InvalidStatusTransitionError,
    NotFoundError,
    NumberingConflictError,
    StorageError,
)
from app.backend.src.db import Base, get_engine, session_scope
from app.backend.src.models import (
    Client,
    Invoice,
    InvoiceLineItem,
    InvoiceSequence,
    TimeEntry,
    TimeEntryStatus,
)
from app.backend.src.services import invoices as invoice_service
from app.backend.src.services import s3
from app.backend.src.services import time_entries as time_entry_service
from app.backend.src.services.invoice_aggregator import compute_total_amount
from app.backend.src.services.user_profile import save_profile

NOW = datetime(2026, 4, 2, 10, 30, tzinfo=timezone.utc)
MARCH_START = date(2026, 3, 1)
MARCH_END = date(2026, 3, 31)


@pytest.fixture(autouse=True)
def setup_database() -> None:  # type: ignore[no-untyped-def]
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def _create_client(rate: str = "31.50") -> int:
    with session_scope() as session:
        client = Client(name="Sunrise Yoga", address="Hauptstraße 5", hourly_rate=Decimal(rate))
        session.add(client)
        session.flush()
        return client.id


def _add_entry(
    client_id: int,
    start: datetime,
    minutes: int = 75,
    status: TimeEntryStatus = TimeEntryStatus.COMPLETED,
) -> int:
    with session_scope() as session:
        entry = TimeEntry(
            client_id=client_id,
            title="Vinyasa Flow",
            start_at=start,
            end_at=start + timedelta(minutes=minutes),
            status=status.value,
        )
        session.add(entry)
        session.flush()
        return entry.id


def _stored_path(key: str) -> Path:
    return Path(os.environ["LOCAL_STORAGE_PATH"]) / key


def test_generate_bills_completed_sessions() -> None:
    client_id = _create_client()
    for week in range(4):
        _add_entry(client_id, datetime(2026, 3, 2 + 7 * week, 18, 0))

    with session_scope() as session:
        invoice = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, now=NOW
        )
        assert invoice.number == "2026-001"
        assert invoice.total_hours == Decimal("5")
        assert invoice.total_amount == Decimal("157.50")
        assert invoice.hourly_rate == Decimal("31.50")
        assert invoice.status == "created"
        assert invoice.issue_date == date(2026, 4, 2)
        assert invoice.due_date == date(2026, 5, 2)
        assert len(invoice.line_items) == 4
        assert invoice.pdf_key == "invoices/2026/invoice_2026-001.pdf"

    assert _stored_path("invoices/2026/invoice_2026-001.pdf").read_bytes().startswith(b"%PDF")


def test_generate_skips_cancelled_and_scheduled_sessions() -> None:
    client_id = _create_client()
    _add_entry(client_id, datetime(2026, 3, 2, 18, 0))
    _add_entry(client_id, datetime(2026, 3, 9, 18, 0), status=TimeEntryStatus.CANCELLED)
    _add_entry(client_id, datetime(2026, 3, 16, 18, 0))
    _add_entry(client_id, datetime(2026, 3, 23, 18, 0), status=TimeEntryStatus.SCHEDULED)

    with session_scope() as session:
        invoice = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, now=NOW
        )
        assert invoice.total_hours == Decimal("2.5")
        assert invoice.total_amount == Decimal("78.75")


def test_empty_range_still_creates_an_invoice() -> None:
    client_id = _create_client()

    with session_scope() as session:
        invoice = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, now=NOW
        )
        assert invoice.line_items == []
        assert invoice.total_hours == Decimal("0")
        assert invoice.total_amount == Decimal("0.00")


def test_numbers_increase_per_scope_and_restart_in_a_new_year() -> None:
    client_id = _create_client()

    with session_scope() as session:
        numbers = [
            invoice_service.generate_invoice(
                session, client_id, MARCH_START, MARCH_END, now=NOW
            ).number
            for _ in range(3)
        ]
        next_year = invoice_service.generate_invoice(
            session,
            client_id,
            MARCH_START,
            MARCH_END,
            now=datetime(2027, 1, 3, tzinfo=timezone.utc),
        )

    assert numbers == ["2026-001", "2026-002", "2026-003"]
    assert next_year.number == "2027-001"


def test_reversed_range_creates_nothing() -> None:
    client_id = _create_client()

    with session_scope() as session:
        with pytest.raises(InvalidRangeError):
            invoice_service.generate_invoice(
                session, client_id, MARCH_END, MARCH_START, now=NOW
            )

    with session_scope() as session:
        assert session.query(Invoice).count() == 0
        assert session.query(InvoiceSequence).count() == 0


def test_unknown_client_is_not_found() -> None:
    with session_scope() as session:
        with pytest.raises(NotFoundError):
            invoice_service.generate_invoice(session, 999, MARCH_START, MARCH_END, now=NOW)


def test_stored_line_items_reproduce_the_total() -> None:
    client_id = _create_client("47.30")
    for day, minutes in [(3, 61), (5, 47), (11, 90), (19, 33)]:
        _add_entry(client_id, datetime(2026, 3, day, 9, 0), minutes=minutes)

    with session_scope() as session:
        invoice_id = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, now=NOW
        ).id

    with session_scope() as session:
        invoice = invoice_service.get_invoice(session, invoice_id)
        line_seconds = sum(item.duration_seconds for item in invoice.line_items)
        assert line_seconds == invoice.total_seconds
        assert compute_total_amount(line_seconds, invoice.hourly_rate) == invoice.total_amount
        assert [item.position for item in invoice.line_items] == [0, 1, 2, 3]


def test_failed_storage_leaves_no_invoice_and_no_consumed_number(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    client_id = _create_client()

    def failing_upload(data: bytes, *, key: str, content_type: str = "application/pdf") -> str:
        raise StorageError("bucket unavailable")

    with monkeypatch.context() as patch:
        patch.setattr(s3, "upload_bytes", failing_upload)
        with session_scope() as session:
            with pytest.raises(StorageError):
                invoice_service.generate_invoice(
                    session, client_id, MARCH_START, MARCH_END, now=NOW
                )

    with session_scope() as session:
        assert session.query(Invoice).count() == 0
        invoice = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, now=NOW
        )
        assert invoice.number == "2026-001"


def test_reissued_number_is_a_conflict() -> None:
    client_id = _create_client()

    class StaleCounter:
        def next_value(self, scope: str) -> int:
            return 1

    with session_scope() as session:
        invoice_service.generate_invoice(session, client_id, MARCH_START, MARCH_END, now=NOW)

    with session_scope() as session:
        with pytest.raises(NumberingConflictError):
            invoice_service.generate_invoice(
                session,
                client_id,
                MARCH_START,
                MARCH_END,
                now=NOW,
                counter=StaleCounter(),
            )

    with session_scope() as session:
        assert session.query(Invoice).count() == 1


def test_status_lifecycle_requires_paid_date() -> None:
    client_id = _create_client()
    with session_scope() as session:
        invoice_id = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, now=NOW
        ).id

    with session_scope() as session:
        with pytest.raises(InvalidStatusTransitionError):
            invoice_service.update_invoice_status(
                session, invoice_id, "paid", paid_date=date(2026, 4, 10)
            )

        sent = invoice_service.update_invoice_status(session, invoice_id, "sent")
        assert sent.status == "sent"

        with pytest.raises(InvalidInputError):
            invoice_service.update_invoice_status(session, invoice_id, "paid")

        paid = invoice_service.update_invoice_status(
            session, invoice_id, "paid", paid_date=date(2026, 4, 10)
        )
        assert paid.status == "paid"
        assert paid.paid_date == date(2026, 4, 10)

        with pytest.raises(InvalidStatusTransitionError):
            invoice_service.update_invoice_status(session, invoice_id, "sent")


def test_list_invoices_filters_by_client_and_status() -> None:
    first = _create_client()
    second = _create_client()
    with session_scope() as session:
        a = invoice_service.generate_invoice(session, first, MARCH_START, MARCH_END, now=NOW)
        invoice_service.generate_invoice(session, second, MARCH_START, MARCH_END, now=NOW)
        invoice_service.update_invoice_status(session, a.id, "sent")

    with session_scope() as session:
        assert [inv.client_id for inv in invoice_service.list_invoices(session, client_id=first)] == [first]
        sent = invoice_service.list_invoices(session, status="sent")
        assert [inv.id for inv in sent] == [a.id]
        assert len(invoice_service.list_invoices(session)) == 2


def test_delete_invoice_removes_pdf() -> None:
    client_id = _create_client()
    with session_scope() as session:
        invoice = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, now=NOW
        )
        invoice_id, key = invoice.id, invoice.pdf_key

    assert _stored_path(key).exists()

    with session_scope() as session:
        invoice_service.delete_invoice(session, invoice_id)

    assert not _stored_path(key).exists()
    with session_scope() as session:
        assert session.query(InvoiceLineItem).count() == 0
        with pytest.raises(NotFoundError):
            invoice_service.get_invoice(session, invoice_id)


def test_missing_pdf_is_rendered_again_on_download() -> None:
    client_id = _create_client()
    _add_entry(client_id, datetime(2026, 3, 2, 18, 0))
    with session_scope() as session:
        invoice = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, now=NOW
        )
        invoice_id, key = invoice.id, invoice.pdf_key

    _stored_path(key).unlink()

    with session_scope() as session:
        filename, pdf_bytes = invoice_service.get_invoice_pdf(session, invoice_id)

    assert filename == "invoice_2026-001.pdf"
    assert pdf_bytes.startswith(b"%PDF")
    assert _stored_path(key).exists()


def test_profile_is_used_when_present() -> None:
    client_id = _create_client()
    with session_scope() as session:
        profile = save_profile(
            session, name="Jo Example", address="Musterweg 3", bank_details="IBAN DE00"
        )
        invoice = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, "de", now=NOW
        )
        document = invoice_service.build_invoice_document(invoice, profile)

    assert document.sender is not None
    assert document.sender.name == "Jo Example"
    assert document.bank_details == "IBAN DE00"
    assert document.language == "de"
    assert document.recipient.name == "Sunrise Yoga"


def test_deleted_entry_keeps_its_line_item() -> None:
    client_id = _create_client()
    entry_id = _add_entry(client_id, datetime(2026, 3, 2, 18, 0))
    with session_scope() as session:
        invoice_id = invoice_service.generate_invoice(
            session, client_id, MARCH_START, MARCH_END, now=NOW
        ).id

    with session_scope() as session:
        time_entry_service.delete_time_entry(session, entry_id)

    with session_scope() as session:
        invoice = invoice_service.get_invoice(session, invoice_id)
        assert len(invoice.line_items) == 1
        assert invoice.line_items[0].time_entry_id is None
        assert invoice.total_amount == Decimal("39.38")
