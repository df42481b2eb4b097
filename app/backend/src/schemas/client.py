"""Client schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str = ""
    contact_person: str | None = None
    contact_email: EmailStr | None = None
    hourly_rate: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    is_active: bool = True


class ClientUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    address: str | None = None
    contact_person: str | None = None
    contact_email: EmailStr | None = None
    hourly_rate: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    is_active: bool | None = None


class ClientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str
    contact_person: str | None
    contact_email: str | None
    hourly_rate: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime
