"""Admin dashboard schemas."""

from pydantic import BaseModel


class AdminStats(BaseModel):
    """Counts grouped by role or status."""

    users: dict[str, int]
    orders: dict[str, int]
    deliveries: dict[str, int]
    borrows: dict[str, int]
    overdue_borrows: int
