"""Business logic services."""

from campus_cart.services.availability_service import AvailabilityService
from campus_cart.services.borrow_service import BorrowService
from campus_cart.services.delivery_service import DeliveryService
from campus_cart.services.item_service import ItemService
from campus_cart.services.order_service import OrderService
from campus_cart.services.redis_service import RedisService
from campus_cart.services.rider_service import RiderService
from campus_cart.services.stats_service import StatsService
from campus_cart.services.user_service import UserService

__all__ = [
    "AvailabilityService",
    "BorrowService",
    "DeliveryService",
    "ItemService",
    "OrderService",
    "RedisService",
    "RiderService",
    "StatsService",
    "UserService",
]
