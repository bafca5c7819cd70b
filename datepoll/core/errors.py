"""Error taxonomy for the poll service and its HTTP mapping.

Every error carries the HTTP status it surfaces as, a short machine-readable
code, and a human-readable detail. Extra keyword arguments are kept as
context and returned to the client.

Register the handlers once in main.py:

    from datepoll.core.errors import register_exception_handlers
    register_exception_handlers(app)
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    context: dict[str, Any] | None = None


class PollError(Exception):
    """Base class for poll errors."""

    status_code: int = 500
    error: str = "internal_error"
    detail: str = "An unexpected error occurred"

    def __init__(self, detail: str | None = None, **context: Any) -> None:
        self.detail = detail or self.__class__.detail
        self.context = context if context else None
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.error, detail=self.detail, context=self.context)


class ValidationError(PollError):
    """Malformed or missing input (400)."""

    status_code = 400
    error = "validation_error"
    detail = "Invalid input"


class NotFoundError(PollError):
    """Unknown slug or id (404)."""

    status_code = 404
    error = "not_found"
    detail = "Not found"


class DeadlinePassedError(PollError):
    """Response submitted after the event deadline (400, never retried)."""

    status_code = 400
    error = "deadline_passed"
    detail = "Response deadline has passed"


class StorageError(PollError):
    """Backing store unavailable or failed (500)."""

    status_code = 500
    error = "storage_error"
    detail = "Storage operation failed"


class SlugCollisionError(StorageError):
    """Raised by a store when the slug it was given is already taken."""

    error = "slug_collision"
    detail = "Slug already in use"


async def poll_error_handler(request: Request, exc: PollError) -> JSONResponse:
    """Render a PollError as JSON."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error}: {exc.detail} (path={request.url.path})")
    else:
        logger.warning(f"{exc.error}: {exc.detail} (path={request.url.path})")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 validation errors."""
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.warning(f"Request validation failed (path={request.url.path}): {errors}")
    body = ErrorResponse(
        error=ValidationError.error,
        detail="Request body is malformed",
        context={"errors": errors},
    )
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(PollError, poll_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
