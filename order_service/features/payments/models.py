"""SQLAlchemy models for the payments feature."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from order_service.core.database import Base, CreatedAtMixin, UUIDv7PKMixin


class Payment(Base, UUIDv7PKMixin, CreatedAtMixin):
    """A recorded payment. Written once, never updated."""

    __tablename__ = "payments"

    # Soft reference; orders and payments are written by different workers.
    order_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
