"""Global exception handlers for FastAPI application.

Ingress errors use a flat ``{"error": "..."}`` body.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from order_service.core.exceptions import AppException
from order_service.infra.messaging.exceptions import PublishError

logger = logging.getLogger(__name__)

INVALID_JSON = "invalid json"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render application exceptions with their status code."""
    logger.warning(
        "Application exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
            **exc.extra,
        },
    )
    return _error(exc.status_code, exc.detail)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed JSON and invalid fields both answer 400 ``invalid json``."""
    errors = exc.errors()
    logger.info(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
            "fields": [".".join(str(loc) for loc in error.get("loc", ())) for error in errors],
        },
    )
    return _error(status.HTTP_400_BAD_REQUEST, INVALID_JSON)


async def publish_exception_handler(request: Request, exc: PublishError) -> JSONResponse:
    """Publish failures that escape a route are reported as 503."""
    logger.error(
        "Publish failed during request",
        extra={"path": request.url.path, "error": exc.message, **exc.details},
    )
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "order could not be queued")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log with traceback, return a generic 500."""
    logger.error(
        "Unexpected exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=True,
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error")


def configure_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PublishError, publish_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
