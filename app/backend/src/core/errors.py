"""Domain error taxonomy and its HTTP rendering."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

LOGGER = structlog.get_logger(__name__)


class SessionbookError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "status": "error",
            "code": self.code,
            "details": self.details,
        }


class NotFoundError(SessionbookError):
    """Unknown client, time entry, template or invoice id."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class InvalidRangeError(SessionbookError):
    """Invoice period whose start lies after its end, or which is too long."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_RANGE"


class InvalidInputError(SessionbookError):
    """Business-rule validation failure on otherwise well-formed input."""

    status_code = 422
    code = "VALIDATION_ERROR"


class InvalidStatusTransitionError(SessionbookError):
    """Status change that the lifecycle does not allow."""

    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_STATUS_TRANSITION"


class StorageError(SessionbookError):
    """Underlying database or document storage failure. Never retried here."""

    code = "STORAGE_ERROR"


class NumberingConflictError(SessionbookError):
    """An invoice number was issued twice. Fatal; never renumbered silently."""

    code = "NUMBERING_CONFLICT"


async def handle_sessionbook_error(request: Request, exc: SessionbookError) -> JSONResponse:
    """Render a :class:`SessionbookError` as a JSON error response."""

    log = LOGGER.error if exc.status_code >= 500 else LOGGER.warning
    log(
        "request_failed",
        method=request.method,
        path=request.url.path,
        code=exc.code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


__all__ = [
    "InvalidInputError",
    "InvalidRangeError",
    "InvalidStatusTransitionError",
    "NotFoundError",
    "NumberingConflictError",
    "SessionbookError",
    "StorageError",
    "handle_sessionbook_error",
]
