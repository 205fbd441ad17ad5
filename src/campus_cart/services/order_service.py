"""Order service for the purchase lifecycle."""

import logging
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_cart.core.actor import Actor, Role
from campus_cart.core.config import settings
from campus_cart.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from campus_cart.middleware.metrics import record_order_transition
from campus_cart.models.delivery import Delivery, DeliveryStatus
from campus_cart.models.item import Item
from campus_cart.models.order import Order, OrderStatus
from campus_cart.services.events import DeliveryStatusChanged

logger = logging.getLogger(__name__)

# Delivery status -> order statuses it may follow from
_MIRROR_SOURCES = {
    OrderStatus.ASSIGNED: (OrderStatus.PENDING, OrderStatus.CONFIRMED),
    OrderStatus.PICKED_UP: (OrderStatus.ASSIGNED,),
    OrderStatus.DELIVERED: (OrderStatus.PICKED_UP,),
}


class OrderService:
    """Service class for order operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order(
        self,
        actor: Actor,
        item_id: UUID,
        quantity: int,
        delivery_address: str,
    ) -> Order:
        """Create an order and its open delivery in one transaction.

        The item row is locked for the duration so a concurrent borrow
        approval cannot flip availability between the check and the insert.
        Item availability itself is not changed.

        Args:
            actor: Buyer placing the order
            item_id: Item UUID
            quantity: Units to buy
            delivery_address: Where the rider delivers

        Returns:
            Created order with its delivery loaded

        Raises:
            NotFoundError: Item missing or not available
        """
        actor.require(Role.BUYER)

        try:
            result = await self.db.execute(
                select(Item)
                .where(Item.item_id == item_id)
                .where(Item.is_available.is_(True))
                .with_for_update()
            )
            item = result.scalar_one_or_none()
            if not item:
                raise NotFoundError("Item not available", code="ITEM_NOT_AVAILABLE")

            order = Order(
                buyer_id=actor.id,
                seller_id=item.seller_id,
                item_id=item.item_id,
                quantity=quantity,
                total_amount=item.price * quantity,
                delivery_address=delivery_address,
                status=OrderStatus.PENDING,
            )
            self.db.add(order)
            await self.db.flush()

            self.db.add(
                Delivery(
                    order_id=order.order_id,
                    pickup_address=settings.DEFAULT_PICKUP_ADDRESS,
                    delivery_address=delivery_address,
                    status=DeliveryStatus.OPEN,
                )
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        record_order_transition("created")
        logger.info(
            f"Order {order.order_id} created by buyer {actor.id} "
            f"for item {item_id} (total={order.total_amount})"
        )
        return await self._get(order.order_id)

    async def confirm_order(self, actor: Actor, order_id: UUID) -> Order:
        """Confirm a pending order (seller only).

        Compare-and-set on (order_id, seller_id, status=pending).

        Raises:
            NotFoundError: Order missing, not this seller's, or not pending
        """
        actor.require(Role.SELLER)

        result = await self.db.execute(
            update(Order)
            .where(Order.order_id == order_id)
            .where(Order.seller_id == actor.id)
            .where(Order.status == OrderStatus.PENDING)
            .values(status=OrderStatus.CONFIRMED)
            .returning(Order.order_id)
            .execution_options(synchronize_session=False)
        )
        if result.scalar_one_or_none() is None:
            await self.db.rollback()
            raise NotFoundError(
                "Order not found or already processed", code="ORDER_NOT_FOUND"
            )
        await self.db.commit()

        record_order_transition("confirmed")
        logger.info(f"Order {order_id} confirmed by seller {actor.id}")
        return await self._get(order_id)

    async def cancel_order(
        self, actor: Actor, order_id: UUID, reason: str | None = None
    ) -> Order:
        """Cancel an order from pending/confirmed and cancel its delivery.

        Raises:
            NotFoundError: Order missing
            ForbiddenError: Caller is neither the buyer nor the seller
            InvalidStateError: Order has progressed past confirmed
        """
        try:
            result = await self.db.execute(
                select(Order.buyer_id, Order.seller_id).where(Order.order_id == order_id)
            )
            parties = result.first()
            if parties is None:
                raise NotFoundError("Order not found", code="ORDER_NOT_FOUND")
            if actor.id not in (parties.buyer_id, parties.seller_id):
                raise ForbiddenError(
                    "Only the buyer or seller can cancel this order", code="NOT_ORDER_PARTY"
                )

            result = await self.db.execute(
                update(Order)
                .where(Order.order_id == order_id)
                .where(Order.status.in_(OrderStatus.CANCELLABLE))
                .values(status=OrderStatus.CANCELLED, cancel_reason=reason)
                .returning(Order.order_id)
                .execution_options(synchronize_session=False)
            )
            if result.scalar_one_or_none() is None:
                raise InvalidStateError(
                    "Order cannot be cancelled at this stage", code="ORDER_NOT_CANCELLABLE"
                )

            # A rider may have claimed the delivery since the order was read.
            result = await self.db.execute(
                update(Delivery)
                .where(Delivery.order_id == order_id)
                .where(Delivery.status == DeliveryStatus.OPEN)
                .values(status=DeliveryStatus.CANCELLED)
                .returning(Delivery.delivery_id)
                .execution_options(synchronize_session=False)
            )
            if result.scalar_one_or_none() is None:
                raise InvalidStateError(
                    "Order cannot be cancelled at this stage", code="ORDER_NOT_CANCELLABLE"
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        record_order_transition("cancelled")
        logger.info(f"Order {order_id} cancelled by {actor.id}")
        return await self._get(order_id)

    async def handle_delivery_status_changed(self, event: DeliveryStatusChanged) -> bool:
        """Move the order's status to follow its delivery.

        Runs inside the delivery transition's transaction; does not commit.

        Returns:
            True if the order moved, False if it was not in a state that can
            follow (e.g. already cancelled)
        """
        sources = _MIRROR_SOURCES.get(event.status)
        if sources is None:
            return False

        result = await self.db.execute(
            update(Order)
            .where(Order.order_id == event.order_id)
            .where(Order.status.in_(sources))
            .values(status=event.status)
            .returning(Order.order_id)
            .execution_options(synchronize_session=False)
        )
        moved = result.scalar_one_or_none() is not None
        if moved:
            record_order_transition(event.status)
        return moved

    async def get_order_for_actor(self, actor: Actor, order_id: UUID) -> Order:
        """Get an order visible to its buyer or seller."""
        order = await self._get(order_id)
        if not order or actor.id not in (order.buyer_id, order.seller_id):
            raise NotFoundError("Order not found", code="ORDER_NOT_FOUND")
        return order

    async def get_buyer_orders(
        self, actor: Actor, skip: int = 0, limit: int = 100
    ) -> tuple[list[Order], int]:
        """Get orders placed by the buyer, newest first.

        Returns:
            Tuple of (orders list, total count)
        """
        actor.require(Role.BUYER)
        return await self._list(Order.buyer_id == actor.id, skip, limit)

    async def get_seller_orders(
        self, actor: Actor, skip: int = 0, limit: int = 100
    ) -> tuple[list[Order], int]:
        """Get orders received by the seller, newest first.

        Returns:
            Tuple of (orders list, total count)
        """
        actor.require(Role.SELLER)
        return await self._list(Order.seller_id == actor.id, skip, limit)

    async def _list(self, criterion, skip: int, limit: int) -> tuple[list[Order], int]:
        count_result = await self.db.execute(
            select(func.count(Order.order_id)).where(criterion)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Order)
            .options(selectinload(Order.delivery), selectinload(Order.item))
            .where(criterion)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def _get(self, order_id: UUID) -> Order | None:
        result = await self.db.execute(
            select(Order)
            .options(selectinload(Order.delivery), selectinload(Order.item))
            .where(Order.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
