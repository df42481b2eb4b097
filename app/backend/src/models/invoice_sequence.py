"""Invoice number sequence model."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.backend.src.db.base import Base


class InvoiceSequence(Base):
    """Last issued invoice sequence value, one row per numbering scope."""

    __tablename__ = "invoice_sequences"

    scope: Mapped[str] = mapped_column(String(16), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


__all__ = ["InvoiceSequence"]
