"""Global exception handlers for consistent error responses.

Every error leaves the service as::

    {"error": {"code": ..., "message": ..., "request_id": ..., "details"?: ...}}

``AppError`` subclasses choose their own HTTP status (400, 429, 500).
Anything else is a generic 500 that never echoes the exception text.
"""

import logging
import math

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import AppError, RateLimitAppError
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _rate_limit_headers(exc: RateLimitAppError) -> dict[str, str]:
    """Advisory throttling headers; Retry-After is whole seconds, at least 1."""

    if not settings.app.rate_limit_include_headers:
        return {}

    headers = {"Retry-After": str(max(1, math.ceil(exc.retry_after)))}
    details = exc.details or {}
    if "limit" in details:
        headers["X-RateLimit-Limit"] = str(details["limit"])
    if "remaining" in details:
        headers["X-RateLimit-Remaining"] = str(details["remaining"])
    return headers


def _error_body(code: str, message: str, details: dict | None = None) -> dict:
    error: dict = {"code": code, "message": message, "request_id": get_request_id()}
    if details:
        error["details"] = details
    return {"error": error}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a greeting error with the status its class declares.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse carrying the error envelope, plus throttling headers
        for rate-limit rejections.
    """
    headers = _rate_limit_headers(exc) if isinstance(exc, RateLimitAppError) else {}

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": exc.status_code,
            "request_path": request.url.path,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.code, exc.message, dict(exc.details) if exc.details else None),
        headers=headers or None,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unexpected errors; details are logged, never returned."""

    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the greeting error handler and the generic 500 fallback."""

    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
