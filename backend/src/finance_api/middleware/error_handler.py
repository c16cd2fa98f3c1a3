"""Global error handling to map domain errors and prevent information disclosure."""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from finance_api.config import Settings, get_settings
from finance_api.exceptions import (
    BackupExportError,
    BackupValidationError,
    FinanceAPIError,
    NotAuthenticatedError,
    UnsupportedImportStrategyError,
)

logger = logging.getLogger(__name__)


def _get_settings(request: Request) -> Settings:
    """Settings of the application serving the request."""
    return getattr(request.app.state, "settings", None) or get_settings()


def _get_cors_headers(request: Request) -> dict[str, str]:
    """Get CORS headers for error responses.

    Exception handlers run outside the CORS middleware, so error responses
    need the headers added here.

    Args:
        request: The incoming request

    Returns:
        Dict of CORS headers to add to the response
    """
    origin = request.headers.get("origin")
    if not origin:
        return {}

    if origin in _get_settings(request).cors_origins_list:
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Credentials": "true",
        }

    return {}


# Safe error messages that can be shown to users
SAFE_ERROR_MESSAGES = {
    400: "Invalid request",
    401: "Authentication required",
    404: "Resource not found",
    405: "Method not allowed",
    422: "Invalid input data",
    500: "Internal server error",
}

# Error messages that are safe to pass through
ALLOWED_ERROR_PATTERNS = [
    "Authentication required",
    "Resource not found",
    "No filename provided",
    "File too large",
    "Invalid file type",
]


def is_safe_error_message(message: str) -> bool:
    """Check if an error message is safe to expose to users.

    Args:
        message: Error message to check

    Returns:
        True if message is safe to expose
    """
    message_lower = message.lower()
    return any(pattern.lower() in message_lower for pattern in ALLOWED_ERROR_PATTERNS)


def sanitize_error_detail(detail: Any, status_code: int) -> str:
    """Sanitize error detail to prevent information disclosure.

    Args:
        detail: Original error detail
        status_code: HTTP status code

    Returns:
        Safe error message
    """
    if isinstance(detail, str):
        if is_safe_error_message(detail):
            return detail
    elif isinstance(detail, list):
        # Request validation errors: keep field names and messages only
        safe_errors = []
        for error in detail:
            if isinstance(error, dict):
                loc = error.get("loc", [])
                msg = error.get("msg", "Invalid value")
                field = loc[-1] if loc else "field"
                if isinstance(field, str) and not field.startswith("_"):
                    safe_errors.append(f"{field}: {msg}")
        if safe_errors:
            return "; ".join(safe_errors[:3])

    return SAFE_ERROR_MESSAGES.get(status_code, "Request failed")


def status_code_for(exc: FinanceAPIError) -> int:
    """HTTP status code for a domain error."""
    if isinstance(exc, NotAuthenticatedError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, BackupValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, BackupExportError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


async def finance_api_exception_handler(request: Request, exc: FinanceAPIError) -> JSONResponse:
    """Handle domain errors raised by services.

    Args:
        request: FastAPI request
        exc: Domain exception

    Returns:
        JSONResponse with the error message, and the validation report for
        rejected backups
    """
    status_code = status_code_for(exc)
    content: dict[str, Any] = {"detail": exc.message}

    if isinstance(exc, BackupValidationError):
        content["report"] = exc.report.model_dump(mode="json")
    elif isinstance(exc, UnsupportedImportStrategyError):
        content["details"] = exc.details
    elif status_code >= 500:
        logger.error(f"{type(exc).__name__} for {request.url}: {exc.message} {exc.details}")
        if _get_settings(request).debug:
            content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=_get_cors_headers(request),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions with sanitized messages.

    Args:
        request: FastAPI request
        exc: HTTP exception

    Returns:
        JSONResponse with sanitized error
    """
    cors_headers = _get_cors_headers(request)

    if _get_settings(request).debug:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=cors_headers,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": sanitize_error_detail(exc.detail, exc.status_code)},
        headers=cors_headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation exceptions with sanitized messages.

    Args:
        request: FastAPI request
        exc: Validation exception

    Returns:
        JSONResponse with sanitized error
    """
    cors_headers = _get_cors_headers(request)

    logger.warning(f"Validation error for {request.url}: {exc.errors()}")

    if _get_settings(request).debug:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors()},
            headers=cors_headers,
        )

    safe_detail = sanitize_error_detail(exc.errors(), status.HTTP_422_UNPROCESSABLE_ENTITY)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": safe_detail},
        headers=cors_headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking information.

    Args:
        request: FastAPI request
        exc: Unexpected exception

    Returns:
        JSONResponse with generic error
    """
    cors_headers = _get_cors_headers(request)

    logger.error(f"Unhandled exception for {request.url}: {exc}", exc_info=True)

    if _get_settings(request).debug:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": str(exc),
                "type": type(exc).__name__,
            },
            headers=cors_headers,
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": SAFE_ERROR_MESSAGES[500]},
        headers=cors_headers,
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy exceptions without leaking database details.

    Args:
        request: FastAPI request
        exc: SQLAlchemy exception

    Returns:
        JSONResponse with safe error
    """
    cors_headers = _get_cors_headers(request)

    logger.error(f"Database error for {request.url}: {exc}", exc_info=True)

    if _get_settings(request).debug:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Database error",
                "type": type(exc).__name__,
            },
            headers=cors_headers,
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error occurred"},
        headers=cors_headers,
    )
