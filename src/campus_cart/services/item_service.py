"""Item service for catalogue operations."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_cart.core.actor import Actor, Role
from campus_cart.core.exceptions import NotFoundError
from campus_cart.models.item import Item
from campus_cart.schemas.item import ItemCreate

logger = logging.getLogger(__name__)


class ItemService:
    """Service class for item operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_available(self, skip: int = 0, limit: int = 100) -> tuple[list[Item], int]:
        """Get items currently open for purchase or borrowing.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (items list, total count)
        """
        count_result = await self.db.execute(
            select(func.count(Item.item_id)).where(Item.is_available.is_(True))
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Item)
            .where(Item.is_available.is_(True))
            .order_by(Item.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_seller_items(self, actor: Actor) -> list[Item]:
        actor.require(Role.SELLER)
        result = await self.db.execute(
            select(Item).where(Item.seller_id == actor.id).order_by(Item.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_by_id(self, item_id: UUID) -> Item:
        result = await self.db.execute(select(Item).where(Item.item_id == item_id))
        item = result.scalar_one_or_none()
        if not item:
            raise NotFoundError("Item not found", code="ITEM_NOT_FOUND")
        return item

    async def create(self, actor: Actor, item_data: ItemCreate) -> Item:
        """Create a listing owned by the calling seller.

        Args:
            actor: Seller
            item_data: Item creation data

        Returns:
            Created item
        """
        actor.require(Role.SELLER)

        item = Item(
            seller_id=actor.id,
            title=item_data.title,
            description=item_data.description,
            category=item_data.category,
            condition_status=item_data.condition_status,
            price=item_data.price,
            is_available=True,
            is_borrowable=item_data.is_borrowable,
            borrow_price_per_day=item_data.borrow_price_per_day,
            max_borrow_days=item_data.max_borrow_days,
            version=0,
        )

        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)

        logger.info(f"Item {item.item_id} listed by seller {actor.id}")
        return item
