"""Repository for dead-letter records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from order_service.core.database import BaseRepository
from order_service.features.dead_letters.models import DeadLetterRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class DeadLetterRepository(BaseRepository[DeadLetterRecord]):
    """Repository for DeadLetterRecord.

    Inherits get/create from BaseRepository.
    """

    def __init__(self) -> None:
        super().__init__(DeadLetterRecord)

    async def list_for_work_item(
        self,
        session: AsyncSession,
        work_item_id: str,
    ) -> Sequence[DeadLetterRecord]:
        """Every record stored for one work item, oldest first."""
        stmt = (
            select(DeadLetterRecord)
            .where(DeadLetterRecord.payment_id == work_item_id)
            .order_by(DeadLetterRecord.created_at.asc(), DeadLetterRecord.id.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_service(
        self,
        session: AsyncSession,
        service_name: str,
        *,
        limit: int = 100,
    ) -> Sequence[DeadLetterRecord]:
        """Most recent records written by one consumer."""
        stmt = (
            select(DeadLetterRecord)
            .where(DeadLetterRecord.service_name == service_name)
            .order_by(DeadLetterRecord.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


_dead_letter_repository: DeadLetterRepository | None = None


def get_dead_letter_repository() -> DeadLetterRepository:
    """Get DeadLetterRepository instance.

    Usage in FastAPI routes:
        repo: DeadLetterRepository = Depends(get_dead_letter_repository)
    """
    global _dead_letter_repository
    if _dead_letter_repository is None:
        _dead_letter_repository = DeadLetterRepository()
    return _dead_letter_repository
