"""Unit tests for the retry decorator and backoff strategy."""
from __future__ import annotations

import asyncio

import pytest

from order_service.utils.retry import RetryError, RetryStrategy, retry


@pytest.mark.unit
class TestRetryDecorator:
    """Test suite for retry decorator."""

    async def test_retry_succeeds_first_attempt(self):
        """No retry on success."""
        call_count = 0

        @retry(max_attempts=3)
        async def successful_func():
            nonlocal call_count
            call_count += 1
            return "success"

        assert await successful_func() == "success"
        assert call_count == 1

    async def test_retry_succeeds_after_retries(self):
        call_count = 0

        @retry(max_attempts=3, initial_delay=0.01)
        async def eventually_successful():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionError("Not yet")
            return "success"

        assert await eventually_successful() == "success"
        assert call_count == 3

    async def test_retry_fails_after_max_attempts(self):
        """RetryError wraps the last exception once attempts run out."""
        call_count = 0

        @retry(max_attempts=3, initial_delay=0.01)
        async def always_fails():
            nonlocal call_count
            call_count += 1
            raise TimeoutError("Always fails")

        with pytest.raises(RetryError) as exc_info:
            await always_fails()

        assert call_count == 3
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_exception, TimeoutError)
        assert "after 3 attempts" in str(exc_info.value)
        assert exc_info.value.statistics.attempts == 2

    async def test_retry_only_retries_specified_exceptions(self):
        call_count = 0

        @retry(max_attempts=3, initial_delay=0.01, exceptions=(ConnectionError,))
        async def raises_type_error():
            nonlocal call_count
            call_count += 1
            raise TypeError("Not retryable")

        with pytest.raises(TypeError):
            await raises_type_error()

        assert call_count == 1

    async def test_retry_if_predicate(self):
        call_count = 0

        @retry(
            max_attempts=5,
            initial_delay=0,
            retry_if=lambda e: "transient" in str(e),
        )
        async def flaky():
            nonlocal call_count
            call_count += 1
            raise ValueError("permanent" if call_count > 1 else "transient")

        with pytest.raises(ValueError, match="permanent"):
            await flaky()
        assert call_count == 2

    async def test_on_retry_callback(self):
        seen: list[int] = []

        @retry(max_attempts=3, initial_delay=0, on_retry=lambda e, attempt: seen.append(attempt))
        async def always_fails():
            raise ConnectionError("down")

        with pytest.raises(RetryError):
            await always_fails()
        assert seen == [1, 2]

    async def test_cancellation_is_not_retried(self):
        call_count = 0

        @retry(max_attempts=3, initial_delay=0)
        async def cancelled():
            nonlocal call_count
            call_count += 1
            raise asyncio.CancelledError

        with pytest.raises(asyncio.CancelledError):
            await cancelled()
        assert call_count == 1


@pytest.mark.unit
class TestRetryStrategy:
    def test_exponential_delays_without_jitter(self):
        strategy = RetryStrategy(initial_delay=1.0, exponential_base=2.0, jitter=False)
        assert [strategy.calculate_delay(a) for a in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_delay_capped(self):
        strategy = RetryStrategy(initial_delay=1.0, max_delay=3.0, jitter=False)
        assert strategy.calculate_delay(10) == 3.0

    def test_jitter_within_range(self):
        strategy = RetryStrategy(initial_delay=1.0, jitter_range=(0.5, 1.5))
        for _ in range(50):
            assert 0.5 <= strategy.calculate_delay(0) <= 1.5

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError, match="max_attempts"):
            RetryStrategy(max_attempts=0)
