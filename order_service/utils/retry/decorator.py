"""Exponential-backoff retry for coroutine functions.

Used for in-process retries of infrastructure calls (broker publishes, order
persistence, startup connectivity checks). Broker-level redelivery of payment
requests is handled by the retry queue, not by this decorator.
"""

from __future__ import annotations

import asyncio
import logging
import time
from functools import wraps
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from order_service.infra.metrics.tracking import (
    track_retry_attempt,
    track_retry_exhausted,
    track_retry_success,
)

from .exceptions import RetryError, RetryStatistics
from .strategies import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    jitter_range: tuple[float, float] = (0.5, 1.5),
    exceptions: tuple[type[Exception], ...] = (Exception,),
    retry_if: Callable[[Exception], bool] | None = None,
    stop_after_delay: float | None = None,
    on_retry: Callable[[Exception, int], None] | None = None,
    operation: str | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Retry a coroutine function with exponential backoff.

    Exceptions rejected by ``exceptions``/``retry_if`` propagate immediately.
    Once attempts (or ``stop_after_delay``) are exhausted a :class:`RetryError`
    wrapping the last exception is raised.

    Args:
        max_attempts: Total attempts, including the first call.
        initial_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for a single delay.
        exponential_base: Growth factor between delays.
        jitter: Multiply each delay by a random factor from ``jitter_range``.
        jitter_range: Bounds for the jitter factor.
        exceptions: Exception types considered retryable.
        retry_if: Predicate overriding ``exceptions``.
        stop_after_delay: Give up once this many seconds have elapsed.
        on_retry: Callback invoked with ``(exception, attempt)`` before sleeping.
        operation: Name used in logs and metrics; defaults to the function name.

    Example:
        @retry(max_attempts=5, exceptions=(ConnectionError, TimeoutError))
        async def ping() -> None:
            ...
    """
    strategy = RetryStrategy(
        max_attempts=max_attempts,
        initial_delay=initial_delay,
        max_delay=max_delay,
        exponential_base=exponential_base,
        jitter=jitter,
        jitter_range=jitter_range,
        exceptions=exceptions,
        retry_if=retry_if,
    )

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        name = operation or func.__name__

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            statistics = RetryStatistics(start_time=time.monotonic())

            for attempt in range(max_attempts):
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    if not strategy.should_retry(e):
                        logger.warning(
                            "Non-retryable exception in %s: %s",
                            name,
                            e,
                            extra={"operation": name, "exception": str(e)},
                        )
                        raise

                    elapsed = time.monotonic() - statistics.start_time
                    out_of_time = stop_after_delay is not None and elapsed >= stop_after_delay
                    if out_of_time or attempt >= max_attempts - 1:
                        statistics.end_time = time.monotonic()
                        track_retry_exhausted(name)
                        logger.error(
                            "All retry attempts exhausted for %s",
                            name,
                            extra={
                                "operation": name,
                                "attempts": attempt + 1,
                                "last_exception": str(e),
                                "total_delay": statistics.total_delay,
                                "duration": statistics.duration,
                            },
                        )
                        raise RetryError(e, attempt + 1, statistics) from e

                    delay = strategy.calculate_delay(attempt)
                    statistics.attempts += 1
                    statistics.total_delay += delay
                    statistics.exceptions.append(type(e).__name__)
                    track_retry_attempt(name, attempt + 2)

                    logger.warning(
                        "Retrying %s after %.2fs (attempt %d/%d)",
                        name,
                        delay,
                        attempt + 1,
                        max_attempts,
                        extra={
                            "operation": name,
                            "attempt": attempt + 1,
                            "max_attempts": max_attempts,
                            "delay": delay,
                            "exception": str(e),
                        },
                    )

                    if on_retry:
                        on_retry(e, attempt + 1)

                    await asyncio.sleep(delay)
                else:
                    if statistics.attempts > 0:
                        track_retry_success(name, statistics.attempts + 1)
                    return result

            msg = "Retry logic error: exhausted all attempts"
            raise RuntimeError(msg)

        return async_wrapper

    return decorator
