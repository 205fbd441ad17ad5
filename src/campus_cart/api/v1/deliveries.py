"""Delivery assignment and tracking API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query

from campus_cart.api.deps import CurrentActor, DbSession
from campus_cart.schemas.delivery import DeliveryResponse, DeliveryStatusUpdate
from campus_cart.services.delivery_service import DeliveryService

router = APIRouter()


@router.get("/available", response_model=list[DeliveryResponse])
async def list_available(
    db: DbSession,
    actor: CurrentActor,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get unclaimed deliveries, oldest first (riders only)."""
    return await DeliveryService(db).list_open(actor, skip=skip, limit=limit)


@router.get("/mine", response_model=list[DeliveryResponse])
async def list_mine(
    db: DbSession,
    actor: CurrentActor,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get deliveries the rider has claimed."""
    return await DeliveryService(db).get_rider_deliveries(actor, skip=skip, limit=limit)


@router.put("/{delivery_id}/accept", response_model=DeliveryResponse)
async def accept_delivery(delivery_id: UUID, db: DbSession, actor: CurrentActor):
    """Claim an open delivery.

    Exactly one of several concurrent riders succeeds; the others get 409.
    """
    return await DeliveryService(db).accept(actor, delivery_id)


@router.put("/{delivery_id}/status", response_model=DeliveryResponse)
async def update_delivery_status(
    delivery_id: UUID,
    update: DeliveryStatusUpdate,
    db: DbSession,
    actor: CurrentActor,
):
    """Advance a claimed delivery to picked_up or delivered."""
    return await DeliveryService(db).update_status(actor, delivery_id, update.status)
