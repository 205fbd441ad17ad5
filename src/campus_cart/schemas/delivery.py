"""Delivery schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel


class DeliveryStatusUpdate(BaseModel):
    """Schema for a rider's status step.

    Only the rider-driven steps are accepted here; anything else is
    rejected by the service with INVALID_DELIVERY_STATUS.
    """

    status: str


class DeliveryResponse(BaseModel):
    """Schema for delivery response."""

    delivery_id: UUID
    order_id: UUID
    rider_id: UUID | None
    pickup_address: str
    delivery_address: str
    delivery_fee: Decimal
    notes: str | None
    status: str
    pickup_time: datetime | None
    delivery_time: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class RiderStats(BaseModel):
    """Schema for a rider's delivery totals."""

    total_deliveries: int
    completed_deliveries: int
    active_deliveries: int
    total_earnings: Decimal
