"""Dashboard schemas."""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict


class DashboardMetricsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period: Literal["month", "quarter", "year"]
    period_start: date
    period_end: date
    revenue: Decimal
    outstanding: Decimal
    invoice_count: int
    paid_count: int
    sent_count: int
