"""CLI utilities for running async operations and formatting output."""

from order_service.cli.utils.async_runner import coro
from order_service.cli.utils.formatters import bullet, error, header, info, success

__all__ = [
    "bullet",
    "coro",
    "error",
    "header",
    "info",
    "success",
]
