"""Declarative base and shared column mixins.

Examples:
    class Payment(Base, UUIDv7PKMixin, CreatedAtMixin):
        __tablename__ = "payments"
        order_id: Mapped[str] = mapped_column(String(36), index=True)
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from order_service.core.database.utils import new_id

# Consistent naming convention for database constraints
# Ensures predictable names for migrations and schema management
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base with a constraint naming convention.

    Models declare ``__tablename__`` explicitly.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UUIDv7PKMixin:
    """UUID v7 primary key stored as its canonical 36-character string.

    The default only applies when the caller does not supply an id; orders
    keep the id assigned at ingress so it doubles as the correlation id.
    """

    __allow_unmapped__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
        comment="UUID v7 primary key (time-sortable)",
    )


class CreatedAtMixin:
    """Immutable creation timestamp (timezone-aware, UTC)."""

    __allow_unmapped__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
        comment="Timestamp of record creation",
    )
