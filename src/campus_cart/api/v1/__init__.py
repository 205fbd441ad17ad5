"""API v1 routers."""

from campus_cart.api.v1 import admin, auth, borrow, deliveries, items, orders, riders

__all__ = ["admin", "auth", "borrow", "deliveries", "items", "orders", "riders"]
