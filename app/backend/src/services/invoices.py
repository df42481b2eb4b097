"""Invoice generation, retrieval and lifecycle management."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.backend.src.core.config import get_settings
from app.backend.src.core.errors import (
    InvalidInputError,
    NotFoundError,
    NumberingConflictError,
    SessionbookError,
    StorageError,
)
from app.backend.src.models import Invoice, InvoiceLineItem, InvoiceStatus, UserProfile
from app.backend.src.services import s3
from app.backend.src.services.clients import get_client
from app.backend.src.services.i18n import normalize_language
from app.backend.src.services.invoice_aggregator import (
    InvoiceDraft,
    aggregate_time_entries,
    compute_total_amount,
    validate_period,
)
from app.backend.src.services.invoice_numbering import (
    SequenceCounter,
    SqlSequenceCounter,
    invoice_scope_key,
    next_invoice_number,
)
from app.backend.src.services.metrics import (
    invoice_generation_seconds,
    invoice_status_changes_total,
    invoices_generated_total,
)
from app.backend.src.services.pdf_generation import (
    DocumentLine,
    InvoiceDocument,
    Party,
    build_filename,
    render_invoice_pdf,
)
from app.backend.src.services.status_transitions import ensure_invoice_transition
from app.backend.src.services.time_entries import fetch_entries_for_period
from app.backend.src.services.user_profile import find_profile

LOGGER = structlog.get_logger(__name__)


def _invoice_query(session: Session):
    return session.query(Invoice).options(
        selectinload(Invoice.line_items), selectinload(Invoice.client)
    )


def get_invoice(session: Session, invoice_id: int) -> Invoice:
    invoice = _invoice_query(session).filter(Invoice.id == invoice_id).one_or_none()
    if invoice is None:
        raise NotFoundError("Invoice not found", details={"invoice_id": invoice_id})
    return invoice


def list_invoices(
    session: Session,
    *,
    client_id: int | None = None,
    status: InvoiceStatus | str | None = None,
) -> list[Invoice]:
    """Return invoices, newest first."""

    query = _invoice_query(session)
    if client_id is not None:
        query = query.filter(Invoice.client_id == client_id)
    if status is not None:
        query = query.filter(Invoice.status == InvoiceStatus(status).value)
    return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()


def build_invoice_document(
    invoice: Invoice, profile: UserProfile | None
) -> InvoiceDocument:
    """Collect what the PDF renderer needs from an invoice and its parties."""

    settings = get_settings()
    client = invoice.client
    sender = None
    if profile is not None:
        sender = Party(name=profile.name, address=profile.address, tax_id=profile.tax_id)

    return InvoiceDocument(
        number=invoice.number,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        period_start=invoice.period_start,
        period_end=invoice.period_end,
        sender=sender,
        recipient=Party(
            name=client.name,
            address=client.address or "",
            contact=client.contact_person or client.contact_email,
        ),
        lines=tuple(
            DocumentLine(
                title=item.title,
                start_at=item.start_at,
                end_at=item.end_at,
                hours=item.duration_hours,
                amount=compute_total_amount(item.duration_seconds, invoice.hourly_rate),
            )
            for item in invoice.line_items
        ),
        total_hours=invoice.total_hours,
        hourly_rate=invoice.hourly_rate,
        total_amount=invoice.total_amount,
        bank_details=profile.bank_details if profile is not None else None,
        language=invoice.language,
        currency_symbol=settings.currency_symbol,
    )


def _render_and_store(session: Session, invoice: Invoice) -> tuple[str, bytes]:
    profile = find_profile(session)
    if profile is None:
        LOGGER.warning("invoice_rendered_without_profile", number=invoice.number)
    pdf_bytes = render_invoice_pdf(build_invoice_document(invoice, profile))
    key = s3.upload_bytes(
        pdf_bytes, key=s3.build_invoice_key(invoice.number, invoice.issue_date)
    )
    return key, pdf_bytes


def _invoice_from_draft(draft: InvoiceDraft) -> Invoice:
    aggregate = draft.aggregate
    invoice = Invoice(
        number=draft.number,
        number_scope=draft.number_scope,
        sequence_number=draft.sequence_number,
        client_id=aggregate.client_id,
        period_start=aggregate.period_start,
        period_end=aggregate.period_end,
        hourly_rate=aggregate.hourly_rate,
        total_seconds=aggregate.total_seconds,
        total_amount=aggregate.total_amount,
        status=draft.status.value,
        language=draft.language,
        issue_date=draft.issue_date,
        due_date=draft.due_date,
        created_at=draft.created_at,
    )
    invoice.line_items = [
        InvoiceLineItem(
            position=position,
            time_entry_id=item.time_entry_id,
            title=item.title,
            start_at=item.start_at,
            end_at=item.end_at,
            duration_seconds=item.duration_seconds,
        )
        for position, item in enumerate(aggregate.line_items)
    ]
    return invoice


def _warn_on_overlap(
    session: Session, client_id: int, period_start: date, period_end: date
) -> None:
    overlapping = session.scalars(
        select(Invoice.number).where(
            Invoice.client_id == client_id,
            Invoice.period_start <= period_end,
            Invoice.period_end >= period_start,
        )
    ).all()
    if overlapping:
        LOGGER.warning(
            "invoice_period_overlap",
            client_id=client_id,
            period_start=period_start.isoformat(),
            period_end=period_end.isoformat(),
            existing=list(overlapping),
        )


def _ensure_number_unused(session: Session, number: str) -> None:
    existing = session.execute(
        select(Invoice.id).where(Invoice.number == number).limit(1)
    ).first()
    if existing is not None:
        LOGGER.error("invoice_number_collision", number=number)
        raise NumberingConflictError(
            f"Invoice number {number} has already been issued",
            details={"number": number},
        )


def generate_invoice(
    session: Session,
    client_id: int,
    period_start: date,
    period_end: date,
    language: str | None = None,
    *,
    now: datetime | None = None,
    counter: SequenceCounter | None = None,
) -> Invoice:
    """Bill a client's completed entries for the period as a new invoice.

    The number is drawn inside the same transaction that stores the invoice,
    so a failure anywhere leaves neither the invoice nor a consumed number
    behind. An already stored PDF is removed again when the commit fails.
    """

    settings = get_settings()
    with invoice_generation_seconds.time():
        try:
            invoice = _generate_invoice(
                session,
                client_id,
                period_start,
                period_end,
                normalize_language(language, settings.default_language),
                now=now or datetime.now(timezone.utc),
                counter=counter or SqlSequenceCounter(session),
            )
        except SessionbookError as exc:
            invoices_generated_total.labels(outcome=exc.code.lower()).inc()
            raise
    invoices_generated_total.labels(outcome="success").inc()
    return invoice


def _generate_invoice(
    session: Session,
    client_id: int,
    period_start: date,
    period_end: date,
    language: str,
    *,
    now: datetime,
    counter: SequenceCounter,
) -> Invoice:
    settings = get_settings()
    validate_period(period_start, period_end, max_days=settings.invoice_max_range_days)

    pdf_key: str | None = None
    try:
        client = get_client(session, client_id)
        entries = fetch_entries_for_period(session, client.id, period_start, period_end)
        aggregate = aggregate_time_entries(
            client.id, client.hourly_rate, period_start, period_end, entries
        )
        _warn_on_overlap(session, client.id, period_start, period_end)

        issue_date = now.date()
        scope = invoice_scope_key(issue_date, settings.invoice_number_scope)
        number, sequence = next_invoice_number(
            counter, scope, settings.invoice_number_width
        )
        _ensure_number_unused(session, number)

        draft = InvoiceDraft(
            number=number,
            number_scope=scope,
            sequence_number=sequence,
            aggregate=aggregate,
            created_at=now,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=settings.invoice_due_days),
            language=language,
        )
        invoice = _invoice_from_draft(draft)
        invoice.client = client

        pdf_key, _ = _render_and_store(session, invoice)
        invoice.pdf_key = pdf_key
        session.add(invoice)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        s3.discard_object(pdf_key)
        LOGGER.error("invoice_commit_conflict", client_id=client_id, error=str(exc.orig))
        raise NumberingConflictError(
            "Invoice number was issued concurrently", details={"client_id": client_id}
        ) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        s3.discard_object(pdf_key)
        LOGGER.error("invoice_persist_failed", client_id=client_id, error=str(exc))
        raise StorageError("Failed to persist invoice") from exc
    except Exception:
        session.rollback()
        s3.discard_object(pdf_key)
        raise

    LOGGER.info(
        "invoice_generated",
        invoice_id=invoice.id,
        number=invoice.number,
        client_id=client_id,
        line_items=len(invoice.line_items),
        total_seconds=invoice.total_seconds,
        total_amount=str(invoice.total_amount),
    )
    return get_invoice(session, invoice.id)


def update_invoice_status(
    session: Session,
    invoice_id: int,
    status: InvoiceStatus | str,
    *,
    paid_date: date | None = None,
) -> Invoice:
    """Move an invoice to ``status``; marking it paid requires ``paid_date``."""

    invoice = get_invoice(session, invoice_id)
    target = ensure_invoice_transition(invoice.status, status)
    if target is InvoiceStatus.PAID:
        if paid_date is None:
            raise InvalidInputError(
                "A paid date is required to mark an invoice as paid",
                details={"invoice_id": invoice_id},
            )
        invoice.paid_date = paid_date

    previous = invoice.status
    invoice.status = target.value
    session.add(invoice)
    session.commit()
    invoice_status_changes_total.labels(status=target.value).inc()
    LOGGER.info(
        "invoice_status_changed",
        invoice_id=invoice_id,
        number=invoice.number,
        previous=previous,
        status=target.value,
    )
    return get_invoice(session, invoice_id)


def delete_invoice(session: Session, invoice_id: int) -> None:
    """Delete an invoice in any status together with its stored PDF."""

    invoice = get_invoice(session, invoice_id)
    pdf_key = invoice.pdf_key
    number = invoice.number
    session.delete(invoice)
    session.commit()
    s3.discard_object(pdf_key)
    LOGGER.info("invoice_deleted", invoice_id=invoice_id, number=number)


def _ensure_stored_pdf(session: Session, invoice: Invoice) -> tuple[str, bytes | None]:
    if invoice.pdf_key and s3.object_exists(invoice.pdf_key):
        return invoice.pdf_key, None

    LOGGER.warning("invoice_pdf_missing", invoice_id=invoice.id, key=invoice.pdf_key)
    key, pdf_bytes = _render_and_store(session, invoice)
    invoice.pdf_key = key
    session.add(invoice)
    session.commit()
    return key, pdf_bytes


def get_invoice_pdf(session: Session, invoice_id: int) -> tuple[str, bytes]:
    """Return the download filename and PDF bytes, re-rendering if needed."""

    invoice = get_invoice(session, invoice_id)
    key, pdf_bytes = _ensure_stored_pdf(session, invoice)
    if pdf_bytes is None:
        pdf_bytes = s3.download_bytes(key)
    return build_filename(invoice.number), pdf_bytes


def get_invoice_download_url(
    session: Session, invoice_id: int, *, expires_in: int = 3600
) -> str:
    invoice = get_invoice(session, invoice_id)
    key, _ = _ensure_stored_pdf(session, invoice)
    return s3.generate_presigned_url(
        key, expires_in=expires_in, download_name=build_filename(invoice.number)
    )


__all__ = [
    "build_invoice_document",
    "delete_invoice",
    "generate_invoice",
    "get_invoice",
    "get_invoice_download_url",
    "get_invoice_pdf",
    "list_invoices",
    "update_invoice_status",
]
