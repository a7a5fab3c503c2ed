"""SQLAlchemy models for the orders feature."""

from __future__ import annotations

from enum import StrEnum

from sqlalchemy import CheckConstraint, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from order_service.core.database import Base, CreatedAtMixin, UUIDv7PKMixin


class OrderStatus(StrEnum):
    """Lifecycle of an order; only the payment worker moves it forward."""

    PENDING = "pending"
    PURCHASED = "purchased"
    CANCELLED = "cancelled"


class Order(Base, UUIDv7PKMixin, CreatedAtMixin):
    """A user order persisted by the order worker.

    The id is assigned at ingress and doubles as the correlation id of both
    work messages. ``status`` is the only column that changes after insert.
    """

    __tablename__ = "orders"
    __table_args__ = (CheckConstraint("quantity > 0", name="quantity_positive"),)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer(), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(
            OrderStatus,
            name="order_status",
            values_callable=lambda enum: [member.value for member in enum],
            native_enum=False,
            length=16,
        ),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )

    @property
    def is_settled(self) -> bool:
        """True once the order can no longer be charged."""
        return self.status in (OrderStatus.PURCHASED, OrderStatus.CANCELLED)
