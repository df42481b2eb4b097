"""Client (billed owner) model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base


class Client(Base):
    """Represents a client or studio that time entries are billed to."""

    __tablename__ = "clients"
    __table_args__ = (
        CheckConstraint("hourly_rate >= 0", name="ck_clients_hourly_rate_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    contact_person: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    time_entries: Mapped[list["TimeEntry"]] = relationship(
        "TimeEntry",
        back_populates="client",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    templates: Mapped[list["ClassTemplate"]] = relationship(
        "ClassTemplate",
        back_populates="client",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    invoices: Mapped[list["Invoice"]] = relationship(
        "Invoice",
        back_populates="client",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


__all__ = ["Client"]
