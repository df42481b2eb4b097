"""Dashboard endpoints."""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.backend.src.schemas.dashboard import DashboardMetricsRead
from app.backend.src.services import dashboard as dashboard_service
from ..db import get_session_dependency

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/metrics", response_model=DashboardMetricsRead)
def dashboard_metrics(
    session: Annotated[Session, Depends(get_session_dependency)],
    period: Literal["month", "quarter", "year"] = Query(default="month"),
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
) -> DashboardMetricsRead:
    """Return revenue, outstanding amount and invoice counts for the period."""

    metrics = dashboard_service.compute_metrics(
        session, period, year=year, month=month
    )
    return DashboardMetricsRead.model_validate(metrics)
