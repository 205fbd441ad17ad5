"""Tests for delivery claims and rider status updates."""

import asyncio
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import update

from campus_cart.core.actor import Role
from campus_cart.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from campus_cart.models import Delivery, Order
from campus_cart.services.delivery_service import DeliveryService
from campus_cart.services.order_service import OrderService


async def place_order(db, buyer, item, address="Dorm B"):
    order = await OrderService(db).create_order(buyer, item.item_id, 1, address)
    return order.order_id, order.delivery.delivery_id


class TestListOpen:
    """Test the open delivery queue."""

    @pytest.mark.asyncio
    async def test_oldest_first_and_only_open(self, db, buyer, rider, item):
        first_order, first = await place_order(db, buyer, item, "First")
        _, second = await place_order(db, buyer, item, "Second")
        _, cancelled = await place_order(db, buyer, item, "Cancelled")
        await db.execute(
            update(Delivery)
            .where(Delivery.delivery_id == first)
            .values(created_at=datetime(2026, 1, 1, 8, 0))
        )
        await db.execute(
            update(Delivery)
            .where(Delivery.delivery_id == second)
            .values(created_at=datetime(2026, 1, 1, 9, 0))
        )
        await db.commit()
        cancelled_order = (await DeliveryService(db)._get(cancelled)).order_id
        await OrderService(db).cancel_order(buyer, cancelled_order)

        deliveries = await DeliveryService(db).list_open(rider)

        assert [d.delivery_id for d in deliveries] == [first, second]
        assert deliveries[0].order.order_id == first_order

    @pytest.mark.asyncio
    async def test_buyer_cannot_list(self, db, buyer):
        with pytest.raises(ForbiddenError):
            await DeliveryService(db).list_open(buyer)


class TestAccept:
    """Test rider claims."""

    @pytest.mark.asyncio
    async def test_accept_assigns_rider_and_order(self, db, buyer, rider, item):
        order_id, delivery_id = await place_order(db, buyer, item)

        delivery = await DeliveryService(db).accept(rider, delivery_id)

        assert delivery.rider_id == rider.id
        assert delivery.status == "assigned"
        order = await db.get(Order, order_id, populate_existing=True)
        assert order.status == "assigned"

    @pytest.mark.asyncio
    async def test_accept_from_confirmed(self, db, buyer, seller, rider, item):
        order_id, delivery_id = await place_order(db, buyer, item)
        await OrderService(db).confirm_order(seller, order_id)

        await DeliveryService(db).accept(rider, delivery_id)

        order = await db.get(Order, order_id, populate_existing=True)
        assert order.status == "assigned"

    @pytest.mark.asyncio
    async def test_second_rider_loses(self, db, buyer, rider, item, make_user):
        _, delivery_id = await place_order(db, buyer, item)
        other = await make_user(Role.RIDER)
        service = DeliveryService(db)
        await service.accept(rider, delivery_id)

        with pytest.raises(ConflictError) as exc_info:
            await service.accept(other, delivery_id)

        assert exc_info.value.code == "DELIVERY_ALREADY_ASSIGNED"
        delivery = await service._get(delivery_id)
        assert delivery.rider_id == rider.id

    @pytest.mark.asyncio
    async def test_concurrent_riders_one_winner(
        self, db, session_maker, buyer, item, make_user
    ):
        _, delivery_id = await place_order(db, buyer, item)
        riders = [await make_user(Role.RIDER) for _ in range(5)]

        async def claim(rider):
            async with session_maker() as session:
                return await DeliveryService(session).accept(rider, delivery_id)

        results = await asyncio.gather(
            *(claim(r) for r in riders), return_exceptions=True
        )

        winners = [r for r in results if isinstance(r, Delivery)]
        losers = [r for r in results if isinstance(r, ConflictError)]
        assert len(winners) == 1
        assert len(losers) == 4

        async with session_maker() as session:
            final = await DeliveryService(session)._get(delivery_id)
        assert final.rider_id == winners[0].rider_id
        assert final.status == "assigned"

    @pytest.mark.asyncio
    async def test_missing_delivery(self, db, rider):
        with pytest.raises(NotFoundError) as exc_info:
            await DeliveryService(db).accept(rider, uuid4())

        assert exc_info.value.code == "DELIVERY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_cancelled_delivery(self, db, buyer, rider, item):
        order_id, delivery_id = await place_order(db, buyer, item)
        await OrderService(db).cancel_order(buyer, order_id)

        with pytest.raises(ConflictError) as exc_info:
            await DeliveryService(db).accept(rider, delivery_id)

        assert exc_info.value.code == "DELIVERY_CANCELLED"

    @pytest.mark.asyncio
    async def test_non_rider_forbidden(self, db, buyer, item):
        _, delivery_id = await place_order(db, buyer, item)

        with pytest.raises(ForbiddenError):
            await DeliveryService(db).accept(buyer, delivery_id)


class TestUpdateStatus:
    """Test the rider-driven steps."""

    @pytest.mark.asyncio
    async def test_pickup_then_deliver(self, db, buyer, rider, item):
        order_id, delivery_id = await place_order(db, buyer, item)
        service = DeliveryService(db)
        await service.accept(rider, delivery_id)

        picked = await service.update_status(rider, delivery_id, "picked_up")
        assert picked.status == "picked_up"
        assert picked.pickup_time is not None
        assert picked.delivery_time is None
        order = await db.get(Order, order_id, populate_existing=True)
        assert order.status == "picked_up"

        delivered = await service.update_status(rider, delivery_id, "delivered")
        assert delivered.status == "delivered"
        assert delivered.delivery_time is not None
        order = await db.get(Order, order_id, populate_existing=True)
        assert order.status == "delivered"

    @pytest.mark.asyncio
    async def test_cannot_skip_pickup(self, db, buyer, rider, item):
        _, delivery_id = await place_order(db, buyer, item)
        service = DeliveryService(db)
        await service.accept(rider, delivery_id)

        with pytest.raises(InvalidStateError) as exc_info:
            await service.update_status(rider, delivery_id, "delivered")

        assert exc_info.value.code == "INVALID_DELIVERY_TRANSITION"

    @pytest.mark.asyncio
    async def test_other_rider_not_found(self, db, buyer, rider, item, make_user):
        _, delivery_id = await place_order(db, buyer, item)
        other = await make_user(Role.RIDER)
        service = DeliveryService(db)
        await service.accept(rider, delivery_id)

        with pytest.raises(NotFoundError):
            await service.update_status(other, delivery_id, "picked_up")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["assigned", "cancelled", "open", "lost"])
    async def test_rejects_non_rider_steps(self, db, rider, status):
        with pytest.raises(InvalidInputError) as exc_info:
            await DeliveryService(db).update_status(rider, uuid4(), status)

        assert exc_info.value.code == "INVALID_DELIVERY_STATUS"

    @pytest.mark.asyncio
    async def test_delivered_order_is_final(self, db, buyer, rider, item):
        order_id, delivery_id = await place_order(db, buyer, item)
        service = DeliveryService(db)
        await service.accept(rider, delivery_id)
        await service.update_status(rider, delivery_id, "picked_up")
        await service.update_status(rider, delivery_id, "delivered")

        with pytest.raises(InvalidStateError):
            await OrderService(db).cancel_order(buyer, order_id)
        with pytest.raises(InvalidStateError):
            await service.update_status(rider, delivery_id, "picked_up")


class TestRiderQueries:
    @pytest.mark.asyncio
    async def test_stats_and_history(self, db, buyer, rider, item):
        service = DeliveryService(db)
        _, done = await place_order(db, buyer, item)
        _, active = await place_order(db, buyer, item)
        await place_order(db, buyer, item)
        await db.execute(
            update(Delivery).where(Delivery.delivery_id == done).values(delivery_fee=Decimal("4.50"))
        )
        await db.commit()

        await service.accept(rider, done)
        await service.update_status(rider, done, "picked_up")
        await service.update_status(rider, done, "delivered")
        await service.accept(rider, active)

        stats = await service.get_rider_stats(rider)
        history = await service.get_rider_deliveries(rider)

        assert stats["total_deliveries"] == 2
        assert stats["completed_deliveries"] == 1
        assert stats["active_deliveries"] == 1
        assert stats["total_earnings"] == Decimal("4.5")
        assert {d.delivery_id for d in history} == {done, active}

    @pytest.mark.asyncio
    async def test_stats_for_new_rider(self, db, rider):
        stats = await DeliveryService(db).get_rider_stats(rider)

        assert stats["total_deliveries"] == 0
        assert stats["total_earnings"] == Decimal("0")
