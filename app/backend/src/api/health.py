"""Health check endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import StorageError
from ..db import get_session_dependency

LOGGER = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health/live")
def liveness() -> dict[str, str]:
    """Return a liveness indicator."""

    return {"status": "live"}


@router.get("/health/ready")
def readiness(session: Session = Depends(get_session_dependency)) -> dict[str, str]:
    """Report ready once the invoice database answers a trivial query."""

    try:
        session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        LOGGER.error("readiness_check_failed", error=str(exc))
        raise StorageError("Database is not reachable") from exc
    return {"status": "ready"}


@router.get("/metrics")
def metrics() -> Response:
    """Expose Prometheus metrics for invoice generation and rendering."""

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
