"""Time entry schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from app.backend.src.models import TimeEntryStatus


def _wall_clock(value: datetime | None) -> datetime | None:
    # Entries are stored as naive local wall-clock times.
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


class TimeEntryCreate(BaseModel):
    client_id: int
    title: str = Field(min_length=1, max_length=255)
    start_at: datetime
    end_at: datetime
    status: TimeEntryStatus = TimeEntryStatus.SCHEDULED
    notes: str = ""

    @field_validator("start_at", "end_at")
    @classmethod
    def strip_timezone(cls, value: datetime | None) -> datetime | None:
        return _wall_clock(value)


class TimeEntryUpdate(BaseModel):
    client_id: int | None = None
    title: str | None = Field(default=None, min_length=1, max_length=255)
    start_at: datetime | None = None
    end_at: datetime | None = None
    notes: str | None = None

    @field_validator("start_at", "end_at")
    @classmethod
    def strip_timezone(cls, value: datetime | None) -> datetime | None:
        return _wall_clock(value)


class TimeEntryStatusUpdate(BaseModel):
    status: TimeEntryStatus


class TimeEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    template_id: int | None
    title: str
    start_at: datetime
    end_at: datetime
    status: TimeEntryStatus
    notes: str
    duration_hours: Decimal
    created_at: datetime

    @field_serializer("duration_hours")
    def round_hours(self, value: Decimal) -> Decimal:
        return value.quantize(Decimal("0.01"))
