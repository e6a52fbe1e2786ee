"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain error codes and
framework exceptions to JSON responses shaped {"error", "message", "details"}.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pkgsearch.core.config import get_settings
from pkgsearch.domain.exceptions import PackageSearchException
from pkgsearch.shared.telemetry.tracing import get_trace_id

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "SERVICE_UNAVAILABLE": 503,
    "SEARCH_UNAVAILABLE": 503,
    "VIEW_REFRESH_FAILED": 503,
}


def status_for(exc: PackageSearchException) -> int:
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _package_search_exception_handler(
    request: Request, exc: PackageSearchException
) -> JSONResponse:
    """Return exc.to_dict() with the status mapped from its error_code."""
    status = status_for(exc)
    if status >= 500:
        logger.warning("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail, "details": {}},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include the exception text only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    details: dict[str, Any] = {}
    trace_id = get_trace_id()
    if trace_id:
        details["trace_id"] = trace_id
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail, "details": details},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all handlers on the app. Call once after creating it."""
    app.add_exception_handler(PackageSearchException, _package_search_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
