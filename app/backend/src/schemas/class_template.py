"""Class template schemas."""

from datetime import date, time

from pydantic import BaseModel, ConfigDict, Field


class TemplateCreate(BaseModel):
    client_id: int
    name: str = Field(min_length=1, max_length=255)
    title: str = ""
    weekday: int = Field(ge=0, le=6, description="0 = Monday, 6 = Sunday")
    start_time: time
    end_time: time
    is_active: bool = True
    auto_schedule: bool = False


class TemplateUpdate(BaseModel):
    client_id: int | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    title: str | None = None
    weekday: int | None = Field(default=None, ge=0, le=6)
    start_time: time | None = None
    end_time: time | None = None
    is_active: bool | None = None
    auto_schedule: bool | None = None


class TemplateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    name: str
    title: str
    weekday: int
    start_time: time
    end_time: time
    is_active: bool
    auto_schedule: bool
    last_scheduled_date: date | None


class TemplateInstantiateRequest(BaseModel):
    on_date: date


class ScheduleWeekRequest(BaseModel):
    week_start: date
