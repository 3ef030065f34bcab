"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return ``{"error": message}`` JSON bodies with
the fixed CORS headers.

Design:
- ClientAppError subclasses -> their own 4xx status (400, 405, 429)
- EmailAppError -> 500 with a generic "failed to send" message
- Unexpected Exception -> 500 with a generic internal error message (safety net)
- Router-level 405 (a method no route is declared for) -> same body as the
  form gate, so every method other than OPTIONS and POST gets one answer
"""

import logging

from fastapi import Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from form_mailer.core.config import settings
from form_mailer.core.errors import (
    AppError,
    ClientAppError,
    EmailAppError,
    RateLimitedAppError,
)
from form_mailer.core.logging import get_request_id
from form_mailer.core.responses import error_response

logger = logging.getLogger(__name__)

METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"
EMAIL_FAILURE_MESSAGE = "Failed to send email. Please try again later."
INTERNAL_ERROR_MESSAGE = "Internal server error. Please try again later."


def _rate_limit_headers(exc: RateLimitedAppError) -> dict[str, str]:
    """Build Retry-After / X-RateLimit-* headers from the error details."""

    if not settings.app.rate_limit_include_headers or not exc.details:
        return {}

    details = exc.details
    return {
        "Retry-After": str(details.get("retry_after", 0)),
        "X-RateLimit-Limit": str(details.get("limit", 0)),
        "X-RateLimit-Remaining": str(details.get("remaining", 0)),
        "X-RateLimit-Reset": str(details.get("reset_at", 0)),
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    Routes domain errors to HTTP status codes:
    - ClientAppError -> its declared 4xx status, message returned verbatim
    - EmailAppError -> 500, generic message (provider detail stays in logs)

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the appropriate status code and error message.
    """
    if isinstance(exc, RateLimitedAppError):
        # Throttling is expected behaviour, already logged by the limiter
        return error_response(429, exc.message, headers=_rate_limit_headers(exc))

    if isinstance(exc, ClientAppError):
        logger.info(
            "client_error_handled",
            extra={
                "error_code": exc.code,
                "status_code": exc.status_code,
                "request_path": request.url.path,
                "request_id": get_request_id(),
            },
        )
        return error_response(exc.status_code, exc.message)

    if isinstance(exc, EmailAppError):
        logger.error(
            "email_error_handled",
            extra={
                "error_code": exc.code,
                "status_code": 500,
                "request_path": request.url.path,
                "request_id": get_request_id(),
            },
        )
        return error_response(500, EMAIL_FAILURE_MESSAGE)

    logger.error(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": 500,
            "request_id": get_request_id(),
        },
    )
    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Catches any exception not handled by specific handlers, including bodies
    that are not parseable JSON. Logs detailed information for debugging while
    returning a generic message, so no stack trace reaches the client.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def routing_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Handle errors raised by the router before any endpoint runs.

    A method without a declared route (TRACE, PROPFIND, ...) never reaches the
    form gate, so the router's 405 is rewritten into the gate's response.
    Other statuses (404 and friends) keep FastAPI's default rendering.

    Args:
        request: FastAPI request object.
        exc: HTTPException raised by Starlette routing.

    Returns:
        Response for the client.
    """
    if exc.status_code == 405:
        logger.info(
            "client_error_handled",
            extra={
                "error_code": "method_not_allowed",
                "status_code": 405,
                "request_path": request.url.path,
                "request_method": request.method,
                "request_id": get_request_id(),
            },
        )
        return error_response(405, METHOD_NOT_ALLOWED_MESSAGE)

    return await http_exception_handler(request, exc)


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(routing_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
