"""Borrow schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class BorrowRequestCreate(BaseModel):
    """Schema for borrow request."""

    item_id: UUID
    start_date: date
    end_date: date
    message: str | None = None


class BorrowRespond(BaseModel):
    """Schema for the seller's decision on a pending request."""

    status: str
    admin_notes: str | None = None


class BorrowStart(BaseModel):
    """Schema for handing an item over."""

    condition_before: str | None = None
    images_before: list[str] = Field(default_factory=list)


class BorrowReturn(BaseModel):
    """Schema for taking an item back."""

    condition_after: str | None = None
    images_after: list[str] = Field(default_factory=list)
    damage_reported: bool = False
    damage_description: str | None = None
    refund_amount: Decimal | None = Field(None, ge=0)


class BorrowRequestResponse(BaseModel):
    """Schema for borrow request response."""

    request_id: UUID
    item_id: UUID
    borrower_id: UUID
    seller_id: UUID
    start_date: date
    end_date: date
    total_days: int
    total_cost: Decimal
    message: str | None
    admin_notes: str | None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BorrowRequestListResponse(BaseModel):
    """Schema for borrow request list response."""

    requests: list[BorrowRequestResponse]
    total: int


class ItemConditionResponse(BaseModel):
    """Schema for a loan's condition record."""

    condition_id: UUID
    borrow_request_id: UUID
    condition_before: str | None
    images_before: list[str]
    condition_after: str | None
    images_after: list[str]
    damage_reported: bool
    damage_description: str | None
    refund_amount: Decimal

    model_config = {"from_attributes": True}
