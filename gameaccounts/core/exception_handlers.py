"""Global exception handlers for consistent error responses.

Design:
- AppError subclasses -> status code from ERROR_STATUS_CODES (400 by default)
- Unexpected Exception (including storage engine failures) -> generic 500
- All responses include request_id for tracing
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from gameaccounts.core.errors import (
    AppError,
    AuthError,
    AuthenticationAppError,
    CorruptHashError,
    DuplicateError,
    ErrorDetails,
    NotFoundError,
)
from gameaccounts.core.logging import get_request_id

logger = logging.getLogger(__name__)

# Checked in order; first isinstance match wins
ERROR_STATUS_CODES: tuple[tuple[type[AppError], int], ...] = (
    (NotFoundError, 404),
    (DuplicateError, 409),
    (AuthError, 401),
    (AuthenticationAppError, 403),
    (CorruptHashError, 500),
)


def status_code_for(exc: AppError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 400


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: ErrorDetails | None = None,
) -> JSONResponse:
    body: dict = {"code": code, "message": message, "request_id": get_request_id()}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a domain error as ``{"error": {code, message, request_id, details?}}``.

    Server-side failures (5xx) are logged at error level, client errors at
    warning level.
    """
    status_code = status_code_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error.handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    return _error_response(status_code, exc.code, exc.message, exc.details)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for anything that is not an AppError.

    Only the exception type is logged; driver messages can embed connection
    strings or row values, so neither they nor tracebacks reach the client.
    """
    logger.error(
        "app_error.unhandled",
        extra={
            "error_type": type(exc).__name__,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return _error_response(
        500,
        "internal_server_error",
        "An unexpected error occurred. Please try again later.",
    )


def setup_exception_handlers(app) -> None:
    """Register the AppError and catch-all handlers on ``app``."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
