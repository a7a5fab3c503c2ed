"""Tests for DeadLetterRecorder and DeadLetterRepository."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from order_service.features.dead_letters.recorder import WORK_ITEM_ID_LENGTH, DeadLetterRecorder
from order_service.features.dead_letters.repository import get_dead_letter_repository
from order_service.infra.messaging.outcomes import DeadLetterEntry


class FailingSessionFactory:
    def __call__(self) -> FailingSessionFactory:
        return self

    async def __aenter__(self):
        raise OperationalError("INSERT INTO dead_letters", {}, OSError("disk full"))

    async def __aexit__(self, *exc_info) -> bool:
        return False


def _entry(work_item_id: str = "order-1", **overrides) -> DeadLetterEntry:
    fields = {
        "work_item_id": work_item_id,
        "number_of_retries": 3,
        "service_name": "payment",
        "error": "payment gateway unavailable",
    }
    fields.update(overrides)
    return DeadLetterEntry(**fields)


@pytest.mark.unit
class TestDeadLetterRecorder:
    async def test_record_persists_entry(self, session_factory):
        recorder = DeadLetterRecorder(session_factory)

        assert await recorder.record(_entry()) is True

        async with session_factory() as session:
            [record] = await get_dead_letter_repository().list_for_work_item(session, "order-1")
        assert record.payment_id == "order-1"
        assert record.number_of_retries == 3
        assert record.service_name == "payment"
        assert record.error == "payment gateway unavailable"
        assert record.is_replayed is False
        assert record.created_at is not None
        assert len(record.id) == 36

    async def test_long_work_item_id_is_cut_to_column_length(self, session_factory):
        long_id = "corr-" + "x" * 200
        recorder = DeadLetterRecorder(session_factory)

        assert await recorder.record(_entry(long_id)) is True

        async with session_factory() as session:
            [record] = await get_dead_letter_repository().list_for_work_item(
                session, long_id[:WORK_ITEM_ID_LENGTH]
            )
        assert WORK_ITEM_ID_LENGTH == 64
        assert record.payment_id == long_id[:64]

    async def test_repeated_records_are_kept(self, session_factory):
        recorder = DeadLetterRecorder(session_factory)

        await recorder.record(_entry(number_of_retries=0))
        await recorder.record(_entry(number_of_retries=3))

        async with session_factory() as session:
            records = await get_dead_letter_repository().list_for_work_item(session, "order-1")
        assert [r.number_of_retries for r in records] == [0, 3]

    async def test_storage_failure_returns_false(self):
        recorder = DeadLetterRecorder(FailingSessionFactory())

        assert await recorder.record(_entry()) is False

    async def test_storage_failure_is_logged(self, caplog):
        recorder = DeadLetterRecorder(FailingSessionFactory())

        with caplog.at_level("ERROR"):
            await recorder.record(_entry())

        assert any("Failed to store dead-letter record" in r.message for r in caplog.records)


@pytest.mark.unit
class TestDeadLetterRepository:
    async def test_list_by_service(self, session_factory):
        recorder = DeadLetterRecorder(session_factory)
        await recorder.record(_entry("a", service_name="payment"))
        await recorder.record(_entry("b", service_name="order"))
        await recorder.record(_entry("c", service_name="payment"))

        async with session_factory() as session:
            repo = get_dead_letter_repository()
            payment = await repo.list_by_service(session, "payment")
            order = await repo.list_by_service(session, "order", limit=1)

        assert {r.payment_id for r in payment} == {"a", "c"}
        assert [r.payment_id for r in order] == ["b"]

    async def test_unknown_work_item_is_empty(self, db_session):
        assert await get_dead_letter_repository().list_for_work_item(db_session, "missing") == []
