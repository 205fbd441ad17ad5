"""SQLAlchemy ORM models."""

from campus_cart.models.base import TimestampMixin
from campus_cart.models.borrow import BorrowRequest, BorrowStatus, ItemCondition
from campus_cart.models.delivery import Delivery, DeliveryStatus
from campus_cart.models.item import Item
from campus_cart.models.order import Order, OrderStatus
from campus_cart.models.rider_application import RiderApplication
from campus_cart.models.user import User

__all__ = [
    "TimestampMixin",
    "User",
    "Item",
    "Order",
    "OrderStatus",
    "Delivery",
    "DeliveryStatus",
    "BorrowRequest",
    "BorrowStatus",
    "ItemCondition",
    "RiderApplication",
]
