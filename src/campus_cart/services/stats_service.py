"""Admin dashboard statistics."""

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_cart.core.actor import Actor, Role
from campus_cart.models.borrow import BorrowRequest, BorrowStatus
from campus_cart.models.delivery import Delivery
from campus_cart.models.order import Order
from campus_cart.models.user import User


class StatsService:
    """Read-only aggregate counts for administrators."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count_by(self, column) -> dict[str, int]:
        result = await self.db.execute(select(column, func.count()).group_by(column))
        return {key: count for key, count in result.all()}

    async def count_overdue(self, today: date | None = None) -> int:
        """Count active loans whose end date has passed.

        Overdue is derived on read; no row is ever moved to an overdue status.
        """
        today = today or date.today()
        result = await self.db.execute(
            select(func.count(BorrowRequest.request_id))
            .where(BorrowRequest.status == BorrowStatus.ACTIVE)
            .where(BorrowRequest.end_date < today)
        )
        return result.scalar_one()

    async def get_stats(self, actor: Actor, today: date | None = None) -> dict:
        """Collect dashboard counts.

        Returns:
            Dict with users, orders, deliveries and borrows grouped by
            role or status, plus the derived overdue loan count
        """
        actor.require(Role.ADMIN)
        return {
            "users": await self._count_by(User.role),
            "orders": await self._count_by(Order.status),
            "deliveries": await self._count_by(Delivery.status),
            "borrows": await self._count_by(BorrowRequest.status),
            "overdue_borrows": await self.count_overdue(today),
        }
