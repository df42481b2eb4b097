"""Time entry (session/class) model."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base


class TimeEntryStatus(str, Enum):
    """Lifecycle of a logged session. Only ``completed`` entries are billable."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TimeEntry(Base):
    """A single unit of logged time bound to a client."""

    __tablename__ = "time_entries"
    __table_args__ = (
        CheckConstraint("end_at > start_at", name="ck_time_entries_end_after_start"),
        CheckConstraint(
            "status IN ('scheduled','completed','cancelled')",
            name="ck_time_entries_status_valid",
        ),
        Index("ix_time_entries_client_start", "client_id", "start_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    template_id: Mapped[int | None] = mapped_column(
        ForeignKey("class_templates.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    start_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TimeEntryStatus.SCHEDULED.value
    )
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    client: Mapped["Client"] = relationship("Client", back_populates="time_entries")
    template: Mapped["ClassTemplate | None"] = relationship(
        "ClassTemplate", back_populates="time_entries"
    )

    @property
    def duration_seconds(self) -> int:
        return (self.end_at - self.start_at) // timedelta(seconds=1)

    @property
    def duration_hours(self) -> Decimal:
        return Decimal(self.duration_seconds) / Decimal(3600)


__all__ = ["TimeEntry", "TimeEntryStatus"]
