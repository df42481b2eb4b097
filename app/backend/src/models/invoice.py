"""Invoice model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base


class InvoiceStatus(str, Enum):
    """Invoice lifecycle: created, then sent, then paid."""

    CREATED = "created"
    SENT = "sent"
    PAID = "paid"


class Invoice(Base):
    """Represents an invoice generated from a client's completed time entries."""

    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint(
            "number_scope", "sequence_number", name="uq_invoices_scope_sequence"
        ),
        CheckConstraint(
            "status IN ('created','sent','paid')", name="ck_invoices_status_valid"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False, index=True
    )
    number_scope: Mapped[str] = mapped_column(String(16), nullable=False)
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvoiceStatus.CREATED.value
    )
    language: Mapped[str] = mapped_column(String(8), nullable=False, default="en")
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    pdf_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    client: Mapped["Client"] = relationship("Client", back_populates="invoices")
    line_items: Mapped[list["InvoiceLineItem"]] = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.position",
        passive_deletes=True,
    )

    @property
    def total_hours(self) -> Decimal:
        """Exact billed hours, derived from the stored second count."""

        return Decimal(self.total_seconds) / Decimal(3600)

    @property
    def client_name(self) -> str | None:
        return self.client.name if self.client is not None else None


__all__ = ["Invoice", "InvoiceStatus"]
