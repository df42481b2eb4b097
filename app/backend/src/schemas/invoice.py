"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from app.backend.src.models import InvoiceStatus

from .line_item import InvoiceLineItemRead


class InvoiceGenerateRequest(BaseModel):
    """Payload for billing a client's completed sessions over a date range."""

    client_id: int
    start_date: date
    end_date: date
    language: Literal["en", "de"] | None = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus
    paid_date: date | None = None


class InvoiceSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    number: str
    client_id: int
    client_name: str | None = None
    period_start: date
    period_end: date
    hourly_rate: Decimal
    total_hours: Decimal
    total_amount: Decimal
    status: InvoiceStatus
    language: str
    issue_date: date
    due_date: date | None
    paid_date: date | None
    created_at: datetime

    @field_serializer("total_hours")
    def round_hours(self, value: Decimal) -> Decimal:
        return value.quantize(Decimal("0.01"))


class InvoiceRead(InvoiceSummary):
    total_seconds: int
    pdf_key: str | None
    line_items: list[InvoiceLineItemRead] = Field(default_factory=list)


class InvoiceDownloadURL(BaseModel):
    url: str
    filename: str
    expires_in: int
