"""Custom exception classes for the application."""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    All HTTP-facing exceptions inherit from this class. The exception handlers
    render them as ``{"error": detail}`` with ``status_code``.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message returned to the client.
        type: Error type identifier used in logs.
        title: Short, human-readable summary of the problem type.
        extra: Additional context-specific information about the error.

    Example:
            raise AppException(
            status_code=503,
            detail="order could not be queued",
            type="publish-failed",
            extra={"order_id": "0192..."}
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        titles = {
            400: "Bad Request",
            409: "Conflict",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class ServiceUnavailableException(AppException):
    """Exception raised when a dependency (broker, database) is unavailable.

    Example:
            raise ServiceUnavailableException(
            detail="order could not be queued",
            type="publish-failed",
            extra={"exchange": "order-service.orders"}
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "service-unavailable",
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=503,
            detail=detail,
            type=type,
            title="Service Unavailable",
            extra=extra,
        )


__all__ = [
    "AppException",
    "ServiceUnavailableException",
]
