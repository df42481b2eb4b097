"""Class template model."""

from __future__ import annotations

from datetime import date, time

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base


class ClassTemplate(Base):
    """A recurring weekly class that can be turned into scheduled time entries."""

    __tablename__ = "class_templates"
    __table_args__ = (
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_class_templates_weekday"),
        CheckConstraint("end_time > start_time", name="ck_class_templates_end_after_start"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )
    auto_schedule: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    last_scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    client: Mapped["Client"] = relationship("Client", back_populates="templates")
    time_entries: Mapped[list["TimeEntry"]] = relationship(
        "TimeEntry", back_populates="template", passive_deletes=True
    )


__all__ = ["ClassTemplate"]
