"""Tests for the JSON formatter and the logging context."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from order_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    get_log_context,
    log_context,
    set_log_context,
)


def _record(message: str = "Delivery settled", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="order_service.infra.messaging.consumer",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _clean_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.mark.unit
class TestJSONFormatter:
    def test_one_json_object_per_record(self):
        line = JSONFormatter(static={"service": "order-service"}).format(
            _record(outcome="ack", correlation_id="order-1")
        )

        data = json.loads(line)
        assert data["level"] == "INFO"
        assert data["message"] == "Delivery settled"
        assert data["service"] == "order-service"
        assert data["outcome"] == "ack"
        assert data["correlation_id"] == "order-1"
        assert data["timestamp"].endswith("Z")

    def test_exception_stays_on_one_line(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        line = JSONFormatter().format(record)

        assert "\n" not in line
        assert "RuntimeError: boom" in json.loads(line)["exception"]

    def test_unserializable_extras_are_stringified(self):
        line = JSONFormatter().format(_record(payload=object()))
        assert json.loads(line)["payload"].startswith("<object object")


@pytest.mark.unit
class TestLogContext:
    def test_scoped_context_restored(self):
        set_log_context(service="payment")

        with log_context(correlation_id="order-1", attempt=2):
            assert get_log_context() == {
                "service": "payment",
                "correlation_id": "order-1",
                "attempt": 2,
            }

        assert get_log_context() == {"service": "payment"}

    def test_restored_when_block_raises(self):
        with pytest.raises(ValueError), log_context(queue="q"):
            raise ValueError

        assert "queue" not in get_log_context()

    def test_filter_injects_context(self):
        record = _record()
        with log_context(correlation_id="order-9", queue="order-service.payment-queue"):
            assert ContextInjectingFilter().filter(record)

        assert record.correlation_id == "order-9"
        assert record.queue == "order-service.payment-queue"

    def test_explicit_extra_wins(self):
        record = _record(correlation_id="explicit")
        with log_context(correlation_id="context"):
            ContextInjectingFilter().filter(record)

        assert record.correlation_id == "explicit"
