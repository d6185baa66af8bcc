# app/core/errors.py
"""
Error taxonomy and HTTP error rendering.

Every failure leaves the API as a JSON body with a stable ``error`` field:

    {"error": "Todo not found", "message": "..."}

Services raise the ``AppError`` subclasses below; storage constraint
violations raised by Tortoise are translated into the same taxonomy so raw
database codes never reach the client.
"""
import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from tortoise.exceptions import IntegrityError

from app.config import settings

logger = logging.getLogger("uvicorn.error")


class AppError(Exception):
    """
    Base class for errors that map onto an HTTP status.

    Attributes:
        status_code: HTTP status returned to the client
        error: Short, stable error label (rendered as the ``error`` field)
        message: Optional human readable explanation
        details: Optional list of per-field problems
        headers: Extra response headers (e.g. Retry-After)
    """
    status_code = 500
    error = "Internal server error"

    def __init__(
        self,
        error: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[list[dict[str, Any]]] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        if error is not None:
            self.error = error
        self.message = message
        self.details = details
        self.headers = headers
        super().__init__(message or self.error)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.message:
            body["message"] = self.message
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    status_code = 400
    error = "Validation failed"


class Unauthenticated(AppError):
    status_code = 401
    error = "Access denied"


class Forbidden(AppError):
    status_code = 403
    error = "Access denied"


class NotFound(AppError):
    status_code = 404
    error = "Not found"


class Conflict(AppError):
    status_code = 409
    error = "Conflict"


class InternalError(AppError):
    status_code = 500
    error = "Internal server error"


class ServiceUnavailable(AppError):
    """Raised when no storage connection could be acquired in time. Safe to retry."""
    status_code = 503
    error = "Service temporarily unavailable"


def translate_integrity_error(exc: IntegrityError) -> AppError:
    """
    Map a storage constraint violation onto the error taxonomy.

    PostgreSQL (asyncpg) exposes an SQLSTATE on the wrapped driver error;
    SQLite only gives a message such as "UNIQUE constraint failed: users.email".
    """
    original = exc.args[0] if exc.args else exc
    sqlstate = getattr(original, "sqlstate", None) or getattr(exc.__cause__, "sqlstate", None)
    text = str(original).lower()

    if sqlstate == "23505" or "unique" in text or "duplicate" in text:
        return Conflict("Duplicate entry")
    if sqlstate == "23503" or "foreign key" in text:
        return ValidationError("Referenced record not found")
    if sqlstate == "23502" or "not null" in text:
        return ValidationError("Required field missing")
    if sqlstate == "23514" or "check constraint" in text:
        return ValidationError("Constraint violated")
    return InternalError()


def _render(exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[%s %s] %s", request.method, request.url.path, exc)
    return _render(exc)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")})
    return _render(ValidationError(details=details))


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        body = {"error": "Route not found"}
    else:
        body = {"error": exc.detail if isinstance(exc.detail, str) else "Request failed"}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    translated = translate_integrity_error(exc)
    logger.warning("[%s %s] integrity error -> %s", request.method, request.url.path, translated.error)
    return _render(translated)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[%s %s] unhandled error", request.method, request.url.path)
    body: dict[str, Any] = {"error": InternalError.error}
    if settings.is_development:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on the application."""
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
