"""Order schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class OrderCreate(BaseModel):
    """Schema for order placement request."""

    item_id: UUID
    quantity: int = Field(default=1, ge=1)
    delivery_address: str = Field(..., min_length=1)


class OrderCancel(BaseModel):
    """Schema for order cancellation request."""

    reason: str | None = None


class OrderDeliverySummary(BaseModel):
    """Delivery fields shown alongside an order."""

    delivery_id: UUID
    rider_id: UUID | None
    status: str
    pickup_time: datetime | None
    delivery_time: datetime | None

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    """Schema for order response."""

    order_id: UUID
    buyer_id: UUID
    seller_id: UUID
    item_id: UUID
    quantity: int
    total_amount: Decimal
    delivery_address: str
    cancel_reason: str | None
    status: str
    delivery: OrderDeliverySummary | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderListResponse(BaseModel):
    """Schema for order list response."""

    orders: list[OrderResponse]
    total: int
