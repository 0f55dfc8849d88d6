"""
Scheduling error taxonomy and global exception handlers.

Every booking rejection is a ``SchedulingError`` carrying a stable ``kind``
(for clients) and a human-readable message (for the toast).  The handlers
below turn them, and any database or unexpected failure, into JSON without
leaking stack traces.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class SchedulingError(Exception):
    """Base class for booking rejections surfaced to the user."""

    kind: str = "SCHEDULING_ERROR"
    status_code: int = 409

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SlotCollisionError(SchedulingError):
    """The slot became occupied between display and commit."""

    kind = "SLOT_COLLISION"


class CapacityExceededError(SchedulingError):
    kind = "CAPACITY_EXCEEDED"


class NoEligibleSubscriptionError(SchedulingError):
    kind = "NO_ELIGIBLE_SUBSCRIPTION"
    status_code = 403


class QuotaExhaustedError(SchedulingError):
    kind = "QUOTA_EXHAUSTED"


class InvalidInputError(SchedulingError):
    kind = "INVALID_INPUT"
    status_code = 422


# ── Handlers ────────────────────────────────────────────────────────
async def _scheduling_error_handler(_request: Request, exc: SchedulingError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind, "success": False},
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(SchedulingError, _scheduling_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
