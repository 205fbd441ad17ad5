"""Order lifecycle API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from campus_cart.api.deps import CurrentActor, DbSession
from campus_cart.schemas.order import OrderCancel, OrderCreate, OrderListResponse, OrderResponse
from campus_cart.services.order_service import OrderService

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(order_data: OrderCreate, db: DbSession, actor: CurrentActor):
    """Place an order; an open delivery is created with it.

    Raises:
        404: Item missing or not available
    """
    service = OrderService(db)
    return await service.create_order(
        actor,
        item_id=order_data.item_id,
        quantity=order_data.quantity,
        delivery_address=order_data.delivery_address,
    )


@router.get("", response_model=OrderListResponse)
async def get_my_orders(
    db: DbSession,
    actor: CurrentActor,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get current buyer's orders."""
    orders, total = await OrderService(db).get_buyer_orders(actor, skip=skip, limit=limit)
    return OrderListResponse(orders=orders, total=total)


@router.get("/seller", response_model=OrderListResponse)
async def get_seller_orders(
    db: DbSession,
    actor: CurrentActor,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get orders received by the current seller."""
    orders, total = await OrderService(db).get_seller_orders(actor, skip=skip, limit=limit)
    return OrderListResponse(orders=orders, total=total)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: UUID, db: DbSession, actor: CurrentActor):
    """Get an order the caller bought or sold."""
    return await OrderService(db).get_order_for_actor(actor, order_id)


@router.put("/{order_id}/confirm", response_model=OrderResponse)
async def confirm_order(order_id: UUID, db: DbSession, actor: CurrentActor):
    """Confirm a pending order (owning seller only)."""
    return await OrderService(db).confirm_order(actor, order_id)


@router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: UUID,
    db: DbSession,
    actor: CurrentActor,
    body: OrderCancel | None = None,
):
    """Cancel an order before a rider has claimed it.

    Raises:
        403: Caller is not the buyer or seller
        404: Order not found
        409: Order can no longer be cancelled
    """
    reason = body.reason if body else None
    return await OrderService(db).cancel_order(actor, order_id, reason)
