"""SQLAlchemy models for the dead-letter audit trail."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from order_service.core.database import Base, CreatedAtMixin, UUIDv7PKMixin


class DeadLetterRecord(Base, UUIDv7PKMixin, CreatedAtMixin):
    """A work item a consumer gave up on.

    ``is_replayed`` is stored for operators; nothing in the service reads it.
    """

    __tablename__ = "dead_letters"

    payment_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Id of the abandoned work item (order id or correlation id)",
    )
    number_of_retries: Mapped[int] = mapped_column(Integer(), nullable=False, default=0)
    is_replayed: Mapped[bool] = mapped_column(
        Boolean(),
        nullable=False,
        default=False,
        server_default="false",
    )
    service_name: Mapped[str] = mapped_column(String(50), nullable=False)
    error: Mapped[str] = mapped_column(Text(), nullable=False, default="")
