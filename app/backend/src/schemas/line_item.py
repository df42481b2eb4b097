"""Invoice line item schema."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_serializer


class InvoiceLineItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    position: int
    time_entry_id: int | None
    title: str
    start_at: datetime
    end_at: datetime
    duration_seconds: int
    duration_hours: Decimal

    @field_serializer("duration_hours")
    def round_hours(self, value: Decimal) -> Decimal:
        return value.quantize(Decimal("0.01"))
