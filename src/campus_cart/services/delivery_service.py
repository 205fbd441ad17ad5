"""Delivery service: rider claims and fulfilment tracking.

Claiming is first-writer-wins. The open/unclaimed predicate is evaluated by
the same UPDATE that writes the rider, so two riders racing for one delivery
always produce exactly one winner; the loser gets a ConflictError and must
pick another delivery.
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_cart.core.actor import Actor, Role
from campus_cart.core.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from campus_cart.middleware.metrics import record_delivery_claim
from campus_cart.models.delivery import Delivery, DeliveryStatus
from campus_cart.models.order import Order
from campus_cart.services.events import DeliveryStatusChanged
from campus_cart.services.order_service import OrderService

logger = logging.getLogger(__name__)


class DeliveryService:
    """Service class for delivery operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.order_service = OrderService(db)

    async def list_open(
        self, actor: Actor, skip: int = 0, limit: int = 100
    ) -> list[Delivery]:
        """Get unclaimed deliveries, oldest first."""
        actor.require(Role.RIDER)

        result = await self.db.execute(
            select(Delivery)
            .options(selectinload(Delivery.order).selectinload(Order.item))
            .where(Delivery.status == DeliveryStatus.OPEN)
            .order_by(Delivery.created_at.asc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def accept(self, actor: Actor, delivery_id: UUID) -> Delivery:
        """Claim an open delivery for the calling rider.

        Args:
            actor: Rider claiming the delivery
            delivery_id: Delivery UUID

        Returns:
            The delivery, now assigned to the rider

        Raises:
            ConflictError: Another rider already claimed it, or it was cancelled
            NotFoundError: Delivery does not exist
        """
        actor.require(Role.RIDER)

        try:
            result = await self.db.execute(
                update(Delivery)
                .where(Delivery.delivery_id == delivery_id)
                .where(Delivery.status == DeliveryStatus.OPEN)
                .where(Delivery.rider_id.is_(None))
                .values(rider_id=actor.id, status=DeliveryStatus.ASSIGNED)
                .returning(Delivery.order_id)
                .execution_options(synchronize_session=False)
            )
            order_id = result.scalar_one_or_none()

            if order_id is None:
                raise await self._claim_failure(delivery_id)

            moved = await self.order_service.handle_delivery_status_changed(
                DeliveryStatusChanged(
                    delivery_id=delivery_id,
                    order_id=order_id,
                    status=DeliveryStatus.ASSIGNED,
                    rider_id=actor.id,
                )
            )
            if not moved:
                # The order was cancelled between the delivery's creation and now.
                raise ConflictError(
                    "Delivery is no longer available", code="DELIVERY_CANCELLED"
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        record_delivery_claim("won")
        logger.info(f"Delivery {delivery_id} assigned to rider {actor.id}")
        return await self._get(delivery_id)

    async def update_status(
        self, actor: Actor, delivery_id: UUID, status: str
    ) -> Delivery:
        """Advance an assigned delivery to picked_up or delivered.

        The timestamp for the step is taken from the database clock.

        Args:
            actor: The assigned rider
            delivery_id: Delivery UUID
            status: picked_up or delivered

        Returns:
            Updated delivery

        Raises:
            InvalidInputError: status is not a rider step
            NotFoundError: Delivery missing or assigned to another rider
            InvalidStateError: Step is out of order
        """
        actor.require(Role.RIDER)

        previous = DeliveryStatus.RIDER_STEPS.get(status)
        if previous is None:
            raise InvalidInputError(
                "Status must be one of: picked_up, delivered", code="INVALID_DELIVERY_STATUS"
            )

        values: dict = {"status": status}
        if status == DeliveryStatus.PICKED_UP:
            values["pickup_time"] = func.now()
        else:
            values["delivery_time"] = func.now()

        try:
            result = await self.db.execute(
                update(Delivery)
                .where(Delivery.delivery_id == delivery_id)
                .where(Delivery.rider_id == actor.id)
                .where(Delivery.status == previous)
                .values(**values)
                .returning(Delivery.order_id)
                .execution_options(synchronize_session=False)
            )
            order_id = result.scalar_one_or_none()

            if order_id is None:
                owned = await self.db.execute(
                    select(Delivery.status)
                    .where(Delivery.delivery_id == delivery_id)
                    .where(Delivery.rider_id == actor.id)
                )
                current = owned.scalar_one_or_none()
                if current is None:
                    raise NotFoundError("Delivery not found", code="DELIVERY_NOT_FOUND")
                raise InvalidStateError(
                    f"Cannot mark a {current} delivery as {status}",
                    code="INVALID_DELIVERY_TRANSITION",
                )

            await self.order_service.handle_delivery_status_changed(
                DeliveryStatusChanged(
                    delivery_id=delivery_id,
                    order_id=order_id,
                    status=status,
                    rider_id=actor.id,
                )
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Delivery {delivery_id} marked {status} by rider {actor.id}")
        return await self._get(delivery_id)

    async def get_rider_deliveries(
        self, actor: Actor, skip: int = 0, limit: int = 100
    ) -> list[Delivery]:
        """Get deliveries claimed by the rider, newest first."""
        actor.require(Role.RIDER)

        result = await self.db.execute(
            select(Delivery)
            .options(selectinload(Delivery.order).selectinload(Order.item))
            .where(Delivery.rider_id == actor.id)
            .order_by(Delivery.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_rider_stats(self, actor: Actor) -> dict:
        """Aggregate the rider's delivery counts and earnings."""
        actor.require(Role.RIDER)

        result = await self.db.execute(
            select(
                func.count(Delivery.delivery_id),
                func.count(case((Delivery.status == DeliveryStatus.DELIVERED, 1))),
                func.count(
                    case(
                        (
                            Delivery.status.in_(
                                (DeliveryStatus.ASSIGNED, DeliveryStatus.PICKED_UP)
                            ),
                            1,
                        )
                    )
                ),
                func.coalesce(
                    func.sum(
                        case(
                            (Delivery.status == DeliveryStatus.DELIVERED, Delivery.delivery_fee),
                            else_=0,
                        )
                    ),
                    0,
                ),
            ).where(Delivery.rider_id == actor.id)
        )
        total, completed, active, earnings = result.one()
        return {
            "total_deliveries": total,
            "completed_deliveries": completed,
            "active_deliveries": active,
            "total_earnings": Decimal(str(earnings)),
        }

    async def _claim_failure(self, delivery_id: UUID) -> Exception:
        """Classify a claim that matched no row. Read-only."""
        result = await self.db.execute(
            select(Delivery.status).where(Delivery.delivery_id == delivery_id)
        )
        current = result.scalar_one_or_none()

        if current is None:
            record_delivery_claim("missing")
            return NotFoundError("Delivery not found", code="DELIVERY_NOT_FOUND")

        record_delivery_claim("lost")
        logger.info(f"Delivery {delivery_id} claim lost (status={current})")
        if current == DeliveryStatus.CANCELLED:
            return ConflictError(
                "Delivery is no longer available", code="DELIVERY_CANCELLED"
            )
        return ConflictError(
            "Delivery already assigned", code="DELIVERY_ALREADY_ASSIGNED"
        )

    async def _get(self, delivery_id: UUID) -> Delivery | None:
        result = await self.db.execute(
            select(Delivery)
            .options(selectinload(Delivery.order).selectinload(Order.item))
            .where(Delivery.delivery_id == delivery_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
