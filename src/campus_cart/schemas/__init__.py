"""Pydantic schemas for request/response validation."""

from campus_cart.schemas.admin import AdminStats
from campus_cart.schemas.borrow import (
    BorrowRequestCreate,
    BorrowRequestListResponse,
    BorrowRequestResponse,
    BorrowRespond,
    BorrowReturn,
    BorrowStart,
    ItemConditionResponse,
)
from campus_cart.schemas.delivery import DeliveryResponse, DeliveryStatusUpdate, RiderStats
from campus_cart.schemas.item import ItemCreate, ItemListResponse, ItemResponse
from campus_cart.schemas.order import (
    OrderCancel,
    OrderCreate,
    OrderDeliverySummary,
    OrderListResponse,
    OrderResponse,
)
from campus_cart.schemas.rider import (
    RiderApplicationCreate,
    RiderApplicationResponse,
    RiderApplicationReview,
    RiderApplicationStatus,
)
from campus_cart.schemas.user import TokenResponse, UserLogin, UserRegister, UserResponse

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    "ItemCreate",
    "ItemResponse",
    "ItemListResponse",
    "OrderCreate",
    "OrderCancel",
    "OrderDeliverySummary",
    "OrderResponse",
    "OrderListResponse",
    "DeliveryResponse",
    "DeliveryStatusUpdate",
    "RiderStats",
    "BorrowRequestCreate",
    "BorrowRespond",
    "BorrowStart",
    "BorrowReturn",
    "BorrowRequestResponse",
    "BorrowRequestListResponse",
    "ItemConditionResponse",
    "RiderApplicationCreate",
    "RiderApplicationReview",
    "RiderApplicationResponse",
    "RiderApplicationStatus",
    "AdminStats",
]
