from __future__ import annotations

from order_service.utils.retry.decorator import retry
from order_service.utils.retry.exceptions import RetryError, RetryStatistics
from order_service.utils.retry.strategies import RetryStrategy

__all__ = ["RetryError", "RetryStatistics", "RetryStrategy", "retry"]
