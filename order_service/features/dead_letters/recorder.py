"""Dead-letter recorder: durable audit of abandoned work items.

Each record is written in its own session and transaction, independent of
whatever the failing handler was doing. A storage failure is logged and
reported as ``False``; the consumer still acknowledges the delivery, so a
broken audit table can never block a queue.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from order_service.features.dead_letters.models import DeadLetterRecord
from order_service.features.dead_letters.repository import (
    DeadLetterRepository,
    get_dead_letter_repository,
)
from order_service.infra.metrics.tracking import track_dead_letter

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from order_service.infra.messaging.outcomes import DeadLetterEntry

logger = logging.getLogger(__name__)

WORK_ITEM_ID_LENGTH = DeadLetterRecord.__table__.c.payment_id.type.length


class DeadLetterRecorder:
    """Persists :class:`DeadLetterEntry` values as ``dead_letters`` rows.

    Example:
        recorder = DeadLetterRecorder()
        stored = await recorder.record(
            DeadLetterEntry(
                work_item_id=order_id,
                number_of_retries=3,
                service_name="payment",
                error="gateway declined",
            )
        )
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        repository: DeadLetterRepository | None = None,
    ) -> None:
        if session_factory is None:
            from order_service.infra.database import AsyncSessionLocal

            session_factory = AsyncSessionLocal
        self._session_factory = session_factory
        self._repository = repository or get_dead_letter_repository()

    async def record(self, entry: DeadLetterEntry) -> bool:
        """Store ``entry``; returns False if storage failed.

        Ids longer than the column (a client-supplied correlation id) are cut
        to fit.
        """
        record = DeadLetterRecord(
            payment_id=entry.work_item_id[:WORK_ITEM_ID_LENGTH],
            number_of_retries=entry.number_of_retries,
            service_name=entry.service_name,
            error=entry.error,
            is_replayed=False,
        )
        try:
            async with self._session_factory() as session, session.begin():
                await self._repository.create(session, record)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to store dead-letter record",
                extra={
                    "work_item_id": entry.work_item_id,
                    "service_name": entry.service_name,
                    "number_of_retries": entry.number_of_retries,
                    "reason": entry.error,
                    "error": str(e),
                },
                exc_info=True,
            )
            track_dead_letter(entry.service_name, stored=False)
            return False

        logger.warning(
            "Work item dead-lettered",
            extra={
                "work_item_id": entry.work_item_id,
                "service_name": entry.service_name,
                "number_of_retries": entry.number_of_retries,
                "reason": entry.error,
            },
        )
        track_dead_letter(entry.service_name, stored=True)
        return True


__all__ = ["WORK_ITEM_ID_LENGTH", "DeadLetterRecorder"]
