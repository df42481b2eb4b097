"""Invoice related endpoints."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.backend.src.models import InvoiceStatus
from app.backend.src.schemas.invoice import (
    InvoiceDownloadURL,
    InvoiceGenerateRequest,
    InvoiceRead,
    InvoiceStatusUpdate,
    InvoiceSummary,
)
from app.backend.src.services import invoices as invoice_service
from app.backend.src.services.pdf_generation import build_filename
from ..db import get_session_dependency

LOGGER = structlog.get_logger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])

SessionDep = Annotated[Session, Depends(get_session_dependency)]


# --------------------------------------------------------------------------
# POST /invoices/generate
# --------------------------------------------------------------------------
@router.post("/generate", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def generate_invoice(payload: InvoiceGenerateRequest, session: SessionDep) -> InvoiceRead:
    """Bill the client's completed sessions in the range as a new invoice."""

    LOGGER.info(
        "invoice_generate_request_received",
        client_id=payload.client_id,
        start_date=payload.start_date.isoformat(),
        end_date=payload.end_date.isoformat(),
    )
    invoice = invoice_service.generate_invoice(
        session,
        payload.client_id,
        payload.start_date,
        payload.end_date,
        payload.language,
    )
    return InvoiceRead.model_validate(invoice)


@router.get("", response_model=list[InvoiceSummary])
def list_invoices(
    session: SessionDep,
    client_id: int | None = Query(default=None),
    status_filter: InvoiceStatus | None = Query(default=None, alias="status"),
) -> list[InvoiceSummary]:
    invoices = invoice_service.list_invoices(
        session, client_id=client_id, status=status_filter
    )
    return [InvoiceSummary.model_validate(invoice) for invoice in invoices]


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(invoice_id: int, session: SessionDep) -> InvoiceRead:
    return InvoiceRead.model_validate(invoice_service.get_invoice(session, invoice_id))


@router.put("/{invoice_id}/status", response_model=InvoiceRead)
def update_invoice_status(
    invoice_id: int, payload: InvoiceStatusUpdate, session: SessionDep
) -> InvoiceRead:
    """Advance an invoice from created to sent, or from sent to paid."""

    invoice = invoice_service.update_invoice_status(
        session, invoice_id, payload.status, paid_date=payload.paid_date
    )
    return InvoiceRead.model_validate(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(invoice_id: int, session: SessionDep) -> Response:
    invoice_service.delete_invoice(session, invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --------------------------------------------------------------------------
# GET /invoices/{invoice_id}/pdf
# --------------------------------------------------------------------------
@router.get("/{invoice_id}/pdf")
def download_invoice_pdf(invoice_id: int, session: SessionDep) -> Response:
    """Stream the invoice PDF, re-rendering it when the stored copy is gone."""

    filename, pdf_bytes = invoice_service.get_invoice_pdf(session, invoice_id)
    LOGGER.info("invoice_pdf_served", invoice_id=invoice_id, size=len(pdf_bytes))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{invoice_id}/download-url", response_model=InvoiceDownloadURL)
def invoice_download_url(
    invoice_id: int,
    session: SessionDep,
    expires_in: int = Query(default=3600, ge=60, le=604800),
) -> InvoiceDownloadURL:
    """Return a presigned URL for the stored invoice PDF."""

    url = invoice_service.get_invoice_download_url(
        session, invoice_id, expires_in=expires_in
    )
    invoice = invoice_service.get_invoice(session, invoice_id)
    return InvoiceDownloadURL(
        url=url, filename=build_filename(invoice.number), expires_in=expires_in
    )
