"""Item availability guard.

The only writer of ``Item.is_available``. Callers are the borrow lifecycle
transitions; each write is one guarded UPDATE that also bumps
``Item.version`` so concurrent readers can detect the change.
"""

import logging
from uuid import UUID

from sqlalchemy import and_, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from campus_cart.models.borrow import BorrowRequest, BorrowStatus
from campus_cart.models.item import Item

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Reserve and release items around borrow transitions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def reserve(self, item_id: UUID) -> int | None:
        """Mark an item unavailable.

        Runs inside the caller's transaction; does not commit.

        Args:
            item_id: Item UUID

        Returns:
            The item's new version, or None if the item does not exist
        """
        result = await self.db.execute(
            update(Item)
            .where(Item.item_id == item_id)
            .values(is_available=False, version=Item.version + 1)
            .returning(Item.version)
            .execution_options(synchronize_session=False)
        )
        version = result.scalar_one_or_none()
        logger.info(f"Item {item_id} reserved (version={version})")
        return version

    async def release(self, item_id: UUID) -> int | None:
        """Mark an item available again unless another loan still holds it.

        Runs inside the caller's transaction, after the releasing request has
        already left the approved/active states.

        Args:
            item_id: Item UUID

        Returns:
            The item's new version, or None if the item stays reserved
        """
        still_reserved = exists().where(
            and_(
                BorrowRequest.item_id == item_id,
                BorrowRequest.status.in_(BorrowStatus.RESERVING),
            )
        )
        result = await self.db.execute(
            update(Item)
            .where(Item.item_id == item_id)
            .where(~still_reserved)
            .values(is_available=True, version=Item.version + 1)
            .returning(Item.version)
            .execution_options(synchronize_session=False)
        )
        version = result.scalar_one_or_none()
        if version is None:
            logger.info(f"Item {item_id} kept unavailable: another loan still holds it")
        else:
            logger.info(f"Item {item_id} released (version={version})")
        return version

    async def is_available(self, item_id: UUID) -> bool:
        result = await self.db.execute(
            select(Item.is_available).where(Item.item_id == item_id)
        )
        return bool(result.scalar_one_or_none())
