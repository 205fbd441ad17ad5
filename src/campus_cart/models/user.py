"""User model for marketplace members."""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_cart.core.database import Base
from campus_cart.models.base import TimestampMixin, uuid_pk

if TYPE_CHECKING:
    from campus_cart.models.item import Item
    from campus_cart.models.rider_application import RiderApplication


class User(Base, TimestampMixin):
    """A member acting as buyer, seller, rider or admin."""

    __tablename__ = "users"

    user_id: Mapped[uuid.UUID] = uuid_pk()
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    phone: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="buyer",
    )
    # none -> pending -> approved | rejected
    rider_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="none",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
    )

    # Relationships
    items: Mapped[List["Item"]] = relationship("Item", back_populates="seller")
    rider_applications: Mapped[List["RiderApplication"]] = relationship(
        "RiderApplication", back_populates="user"
    )

    __table_args__ = (
        Index("idx_users_role", "role"),
        Index("idx_users_status", "status"),
    )
