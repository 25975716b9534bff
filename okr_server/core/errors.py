"""
Error taxonomy and the handlers that render it.

Every failure a caller can see has a stable ``code``. Errors render as::

    {"error": {"code": "...", "message": "...", "status": 403, "details": [...]}}

Store failures never expose their underlying cause.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import JSONResponse

log = structlog.get_logger()


class OKRTrackerError(HTTPException):
    """Base class for errors with a stable, user-visible outcome kind."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[list[dict]] = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)
        self.details = details


class ValidationFailed(OKRTrackerError):
    status_code = 422
    code = "VALIDATION_FAILED"
    default_message = "Validation failed"


class Unauthenticated(OKRTrackerError):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "Authentication required"


class Forbidden(OKRTrackerError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(OKRTrackerError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(OKRTrackerError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflict"


class StoreFailure(OKRTrackerError):
    status_code = 500
    code = "STORE_FAILURE"
    default_message = "Internal server error"


def field_error(field: str, message: str) -> dict:
    return {"field": field, "message": message}


def error_response(
    status: int, code: str, message: str, details: Optional[list[dict]] = None
) -> JSONResponse:
    body: dict = {"code": code, "message": message, "status": status}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status, content={"error": body})


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def _handle_tracker_error(request: Request, exc: OKRTrackerError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request.failed", path=request.url.path, code=exc.code)
    return error_response(exc.status_code, exc.code, exc.detail, exc.details)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        # Drop the leading "body"/"query"/"path" segment.
        loc = [str(part) for part in err.get("loc", ())[1:]]
        details.append(field_error(".".join(loc) or "request", err.get("msg", "Invalid value")))
    return error_response(422, ValidationFailed.code, ValidationFailed.default_message, details)


async def _handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.error("store.failure", path=request.url.path, error=str(exc), exc_info=exc)
    return error_response(500, StoreFailure.code, StoreFailure.default_message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OKRTrackerError, _handle_tracker_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(SQLAlchemyError, _handle_store_error)
