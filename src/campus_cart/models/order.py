"""Order model for item purchases."""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_cart.core.database import Base
from campus_cart.models.base import TimestampMixin, uuid_pk

if TYPE_CHECKING:
    from campus_cart.models.delivery import Delivery
    from campus_cart.models.item import Item


class OrderStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ASSIGNED = "assigned"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    CANCELLABLE = (PENDING, CONFIRMED)
    TERMINAL = (DELIVERED, CANCELLED)


class Order(Base, TimestampMixin):
    """A purchase of an item; owns exactly one Delivery."""

    __tablename__ = "orders"

    order_id: Mapped[uuid.UUID] = uuid_pk()
    buyer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("items.item_id"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )
    # price x quantity at creation, never recomputed
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    delivery_address: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    cancel_reason: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=OrderStatus.PENDING,
    )

    # Relationships
    item: Mapped["Item"] = relationship("Item")
    delivery: Mapped["Delivery"] = relationship(
        "Delivery", back_populates="order", uselist=False
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_quantity_positive"),
        Index("idx_orders_buyer_created", "buyer_id", "created_at"),
        Index("idx_orders_seller_created", "seller_id", "created_at"),
        Index("idx_orders_status", "status"),
    )
