"""Rider application model."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_cart.core.database import Base
from campus_cart.models.base import TimestampMixin, uuid_pk

if TYPE_CHECKING:
    from campus_cart.models.user import User


class RiderApplication(Base, TimestampMixin):
    """A member's request to become a delivery rider, reviewed by an admin."""

    __tablename__ = "rider_applications"

    application_id: Mapped[uuid.UUID] = uuid_pk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    license_number: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    license_image: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
    )
    admin_notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="rider_applications")

    __table_args__ = (
        Index("idx_rider_applications_user_status", "user_id", "status"),
    )
