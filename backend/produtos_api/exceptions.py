"""
Application exceptions and the handlers that render them.

Every error response shares one envelope:
    {statusCode, timestamp, path, method, message, details?}

Usage:
    from produtos_api.exceptions import NotFoundError, ConflictError

    raise NotFoundError("Produto", produto_id)
    raise ConflictError("Produto 'Pizza' already exists")
"""
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppException(HTTPException):
    """Base class for errors raised by the service layer."""

    def __init__(self, status_code: int, detail: str, details: Any = None):
        super().__init__(status_code=status_code, detail=detail)
        self.details = details


class ValidationError(AppException):
    """Malformed input that got past request parsing (400)."""

    def __init__(self, detail: str, details: Any = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, details)


class NotFoundError(AppException):
    """Entity not found (404)."""

    def __init__(self, entity: str, entity_id: int | str | None = None):
        if entity_id is not None:
            detail = f"{entity} #{entity_id} not found"
        else:
            detail = f"{entity} not found"
        super().__init__(status.HTTP_404_NOT_FOUND, detail)


class ConflictError(AppException):
    """Duplicate name or slug within a store (400, as the API contract requires)."""

    def __init__(self, detail: str, details: Any = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, details)


class InternalError(AppException):
    """Unexpected storage or I/O failure (500)."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)


class DuplicateRecordError(Exception):
    """Raised by the repository when a unique constraint rejects a write."""


def _envelope(request: Request, status_code: int, message: Any, details: Any = None) -> JSONResponse:
    body = {
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
        "message": message,
    }
    if details:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=body)


def _log(request: Request, status_code: int, message: Any, exc: Exception | None = None):
    line = f"{request.method} {request.url.path} - {status_code} - {message}"
    if status_code >= 500:
        logger.error(line, exc_info=exc)
    else:
        logger.warning(line)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    _log(request, exc.status_code, exc.detail)
    return _envelope(request, exc.status_code, exc.detail, getattr(exc, "details", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "Validation failed"
    _log(request, status.HTTP_400_BAD_REQUEST, message)
    return _envelope(request, status.HTTP_400_BAD_REQUEST, message, exc.errors())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    message = "Internal server error"
    _log(request, status.HTTP_500_INTERNAL_SERVER_ERROR, message, exc)
    return _envelope(request, status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
