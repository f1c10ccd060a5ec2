"""
Custom exception handlers for FastAPI.

Security:
- Request IDs are logged server-side for tracing but NOT exposed to clients
- Generic error messages for 500 errors to prevent information disclosure
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from community.exceptions import (
    CommunityError,
    Conflict,
    Forbidden,
    InternalError,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from community.logging import get_logger

logger = get_logger("backend.errors")

# Conflict is reported as 400, the same as other bad input
STATUS_CODES: dict[type[CommunityError], int] = {
    ValidationError: 400,
    Conflict: 400,
    Unauthenticated: 401,
    Forbidden: 403,
    NotFound: 404,
    InternalError: 500,
}

# Location prefixes FastAPI adds that clients never named
_LOCATION_SOURCES = {"body", "query", "path", "form", "header", "cookie"}


def _get_request_id() -> str:
    """
    Get the current request ID from context.

    Used for server-side logging only - NOT exposed to clients.
    """
    return structlog.contextvars.get_contextvars().get("request_id", "-")


def _response_payload(detail: str, status_code: int) -> dict:
    """
    Create error response payload.

    Security: Does NOT include request_id to prevent information disclosure.
    """
    return {
        "detail": detail,
        "status_code": status_code,
    }


def _field_name(loc) -> str:
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in _LOCATION_SOURCES:
        parts = parts[1:]
    return ".".join(parts) or "request"


def field_errors(errors: list[dict]) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into ``[{field, message}]``."""
    return [{"field": _field_name(error.get("loc", ())), "message": error.get("msg", "Invalid value")} for error in errors]


def _validation_response(errors: list[dict[str, str]], detail: str = "Validation error") -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={**_response_payload(detail, 400), "errors": errors},
    )


def status_code_for(exc: CommunityError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return 500


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CommunityError)
    async def community_error_handler(request: Request, exc: CommunityError):
        status_code = status_code_for(exc)
        logger.warning(
            "domain_error",
            error_type=type(exc).__name__,
            detail=exc.message,
            status_code=status_code,
            request_id=_get_request_id(),
        )
        if isinstance(exc, ValidationError):
            return _validation_response(exc.errors, exc.message)
        return JSONResponse(status_code=status_code, content=_response_payload(exc.message, status_code))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = field_errors(exc.errors())
        logger.warning("validation_error", errors=errors, request_id=_get_request_id())
        return _validation_response(errors)

    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_handler(request: Request, exc: PydanticValidationError):
        errors = field_errors(exc.errors())
        logger.warning("validation_error", errors=errors, request_id=_get_request_id())
        return _validation_response(errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            "http_exception",
            detail=exc.detail,
            status_code=exc.status_code,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_response_payload(str(exc.detail), exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        # Full details stay in the server log
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=500,
            content=_response_payload("Internal server error", 500),
        )
