"""Delivery model for order fulfilment."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_cart.core.database import Base
from campus_cart.models.base import TimestampMixin, uuid_pk

if TYPE_CHECKING:
    from campus_cart.models.order import Order


class DeliveryStatus:
    OPEN = "open"
    ASSIGNED = "assigned"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    # rider-driven step -> the status it must follow
    RIDER_STEPS = {
        PICKED_UP: ASSIGNED,
        DELIVERED: PICKED_UP,
    }


class Delivery(Base, TimestampMixin):
    """Fulfilment record for an order.

    ``rider_id`` goes from NULL to a rider exactly once, written only by the
    guarded claim in DeliveryService.accept.
    """

    __tablename__ = "deliveries"

    delivery_id: Mapped[uuid.UUID] = uuid_pk()
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.order_id"),
        unique=True,
        nullable=False,
    )
    rider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=True,
    )
    pickup_address: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    delivery_address: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    delivery_fee: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DeliveryStatus.OPEN,
    )
    pickup_time: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )
    delivery_time: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )

    # Relationships
    order: Mapped["Order"] = relationship("Order", back_populates="delivery")

    __table_args__ = (
        Index("idx_deliveries_status_created", "status", "created_at"),
        Index("idx_deliveries_rider", "rider_id"),
    )
