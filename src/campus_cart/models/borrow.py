"""Borrow request and item condition models."""

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    DDL,
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_cart.core.database import Base
from campus_cart.models.base import TimestampMixin, uuid_pk

if TYPE_CHECKING:
    from campus_cart.models.item import Item


class BorrowStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    RETURNED = "returned"

    # statuses that hold the item's dates
    RESERVING = (APPROVED, ACTIVE)
    TERMINAL = (REJECTED, RETURNED)


class BorrowRequest(Base, TimestampMixin):
    """A time-boxed loan proposal for a borrowable item."""

    __tablename__ = "borrow_requests"

    request_id: Mapped[uuid.UUID] = uuid_pk()
    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("items.item_id"),
        nullable=False,
    )
    borrower_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    end_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    total_days: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    total_cost: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    admin_notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BorrowStatus.PENDING,
    )

    # Relationships
    item: Mapped["Item"] = relationship("Item")
    condition: Mapped["ItemCondition | None"] = relationship(
        "ItemCondition", back_populates="borrow_request", uselist=False
    )

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="chk_borrow_dates"),
        CheckConstraint("total_days > 0", name="chk_borrow_total_days_positive"),
        Index("idx_borrow_item_status", "item_id", "status"),
        Index("idx_borrow_borrower_created", "borrower_id", "created_at"),
        Index("idx_borrow_seller_created", "seller_id", "created_at"),
    )


class ItemCondition(Base, TimestampMixin):
    """Before/after condition snapshot for one borrow cycle."""

    __tablename__ = "item_conditions"

    condition_id: Mapped[uuid.UUID] = uuid_pk()
    borrow_request_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("borrow_requests.request_id"),
        unique=True,
        nullable=False,
    )
    condition_before: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    images_before: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    condition_after: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    images_after: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    damage_reported: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    damage_description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    refund_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    # Relationships
    borrow_request: Mapped["BorrowRequest"] = relationship(
        "BorrowRequest", back_populates="condition"
    )


# Two approved/active loans of the same item may never share a day.
# PostgreSQL only; other backends rely on the guarded statements alone.
event.listen(
    BorrowRequest.__table__,
    "after_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    BorrowRequest.__table__,
    "after_create",
    DDL(
        "ALTER TABLE borrow_requests ADD CONSTRAINT excl_borrow_reserved_dates "
        "EXCLUDE USING gist (item_id WITH =, daterange(start_date, end_date, '[]') WITH &&) "
        "WHERE (status IN ('approved', 'active'))"
    ).execute_if(dialect="postgresql"),
)
