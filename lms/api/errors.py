# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception handlers mapping errors onto the JSON error envelope.

Every error response has the shape:

    {"error": {"code": "NotFoundError", "message": "...", "timestamp": "..."}}

LMSError subclasses carry their own status code. Request validation
failures become 400 ValidationError, rate limiting becomes 429, and any
other exception becomes a generic 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from lms.core.exceptions import LMSError
from lms.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "ValidationError",
    status.HTTP_401_UNAUTHORIZED: "AuthenticationError",
    status.HTTP_403_FORBIDDEN: "AuthorizationError",
    status.HTTP_404_NOT_FOUND: "NotFoundError",
    status.HTTP_409_CONFLICT: "ConflictError",
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build an error envelope response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "timestamp": format_iso(utc_now()),
            }
        },
        headers=headers,
    )


def _log(request: Request, status_code: int, code: str, message: str, exc: Exception) -> None:
    if status_code >= 500:
        logger.error(
            "%s %s failed: %s: %s",
            request.method,
            request.url.path,
            code,
            message,
            exc_info=exc,
        )
    else:
        logger.warning("%s %s rejected: %s: %s", request.method, request.url.path, code, message)


async def lms_error_handler(request: Request, exc: LMSError) -> JSONResponse:
    """Render an application error with its own status code."""
    _log(request, exc.status_code, exc.code, exc.message, exc)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return error_response(exc.status_code, exc.code, exc.message, headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body, query and path validation failures as 400."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    message = "; ".join(messages) or "Validation failed"

    _log(request, status.HTTP_400_BAD_REQUEST, "ValidationError", message, exc)
    return error_response(status.HTTP_400_BAD_REQUEST, "ValidationError", message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown routes, wrong methods)."""
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTPError")
    message = str(exc.detail)
    _log(request, exc.status_code, code, message, exc)
    return error_response(exc.status_code, code, message, getattr(exc, "headers", None))


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a rate limit rejection as 429."""
    logger.warning("Rate limit exceeded: %s for %s", exc.detail, request.url.path)
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "RateLimitError",
        "Too many requests. Please try again later.",
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render anything unexpected as a generic 500."""
    _log(request, 500, "InternalServerError", str(exc), exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install all error handlers on the application."""
    app.add_exception_handler(LMSError, lms_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
