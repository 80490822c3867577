"""Centralized exception handlers for the FastAPI app.

Every error leaves the service as {"error": CODE, "message": ..., "details"?}.
Register with register_exception_handlers(app).
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from notifyhub.core.config import get_settings
from notifyhub.domain.exceptions import NotifyHubException

logger = logging.getLogger(__name__)

# Domain error_code -> HTTP status. Unmapped codes are 400.
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "INVITE_INVALID_CODE": 404,
    "INVALID_STATE_TRANSITION": 409,
    "QUOTA_RESET_IN_PROGRESS": 409,
    "INVITE_ALREADY_SATISFIED": 409,
    "INVITE_EXPIRED": 410,
    "INVITE_EXHAUSTED": 410,
    "SERVICE_UNAVAILABLE": 503,
}


def status_for(exc: NotifyHubException) -> int:
    """HTTP status for a domain exception (400 when the code is unmapped)."""
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _error_body(error: str, message: Any, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error, "message": message}
    if details:
        body["details"] = details
    return body


def _notifyhub_exception_handler(
    request: Request, exc: NotifyHubException
) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.error_code, exc.message)
    # Bearer challenge on 401.
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content=exc.to_dict(), headers=headers)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=_error_body(
            "VALIDATION_ERROR",
            "Request validation failed",
            jsonable_encoder(exc.errors()),
        ),
    )


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit hit on %s %s: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=429,
        content=_error_body("RATE_LIMITED", f"Rate limit exceeded: {exc.detail}"),
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", exc.detail),
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500; the exception text is only exposed when debug is on."""
    logger.exception("Unhandled exception: %s", exc)
    message: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(status_code=500, content=_error_body("INTERNAL_ERROR", message))


def register_exception_handlers(app: FastAPI) -> None:
    """Register domain, validation, rate limit, HTTP and catch-all handlers."""
    app.add_exception_handler(NotifyHubException, _notifyhub_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
