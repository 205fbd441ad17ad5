"""Item model for marketplace listings."""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_cart.core.database import Base
from campus_cart.models.base import TimestampMixin, uuid_pk

if TYPE_CHECKING:
    from campus_cart.models.user import User


class Item(Base, TimestampMixin):
    """A listing owned by a seller, purchasable and optionally borrowable.

    ``is_available`` is written only by the availability guard; every such
    write bumps ``version``.
    """

    __tablename__ = "items"

    item_id: Mapped[uuid.UUID] = uuid_pk()
    seller_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    category: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    condition_status: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    is_available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    is_borrowable: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    borrow_price_per_day: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    max_borrow_days: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=7,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Relationships
    seller: Mapped["User"] = relationship("User", back_populates="items")

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_item_price_non_negative"),
        CheckConstraint("borrow_price_per_day >= 0", name="chk_item_borrow_price_non_negative"),
        CheckConstraint("max_borrow_days > 0", name="chk_item_max_borrow_days_positive"),
        Index("idx_items_seller", "seller_id"),
        Index("idx_items_available", "is_available"),
    )
