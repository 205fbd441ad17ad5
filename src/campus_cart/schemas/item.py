"""Item schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class ItemCreate(BaseModel):
    """Schema for item listing request."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(None, max_length=50)
    condition_status: str | None = Field(None, max_length=30)
    price: Decimal = Field(..., ge=0)
    is_borrowable: bool = False
    borrow_price_per_day: Decimal = Field(default=Decimal("0"), ge=0)
    max_borrow_days: int = Field(default=7, ge=1)

    @model_validator(mode="after")
    def check_borrow_price(self) -> "ItemCreate":
        if self.is_borrowable and self.borrow_price_per_day <= 0:
            raise ValueError("borrow_price_per_day must be positive for borrowable items")
        return self


class ItemResponse(BaseModel):
    """Schema for item response."""

    item_id: UUID
    seller_id: UUID
    title: str
    description: str | None
    category: str | None
    condition_status: str | None
    price: Decimal
    is_available: bool
    is_borrowable: bool
    borrow_price_per_day: Decimal
    max_borrow_days: int
    version: int
    created_at: datetime

    model_config = {"from_attributes": True}


class ItemListResponse(BaseModel):
    """Schema for item list response."""

    items: list[ItemResponse]
    total: int
