"""Sender profile schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ProfileUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str = ""
    tax_id: str | None = Field(default=None, max_length=64)
    bank_details: str | None = None
    default_hourly_rate: Decimal | None = Field(
        default=None, ge=0, max_digits=10, decimal_places=2
    )


class ProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    address: str
    tax_id: str | None
    bank_details: str | None
    default_hourly_rate: Decimal | None
    updated_at: datetime
