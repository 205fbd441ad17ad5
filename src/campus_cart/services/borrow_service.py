"""Borrow lifecycle service.

pending -> approved | rejected; approved -> active; active -> returned.
Every transition after creation is a compare-and-set on the expected prior
status and the owning seller. Overlap against approved/active loans of the
same item (inclusive date bounds) is checked inside the same statement that
writes, both when a request is created and when it is approved.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, Integer, Numeric, String, Text, Uuid, and_, exists, func, insert, literal, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from campus_cart.core.actor import Actor, Role
from campus_cart.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from campus_cart.middleware.metrics import record_borrow_request
from campus_cart.models.borrow import BorrowRequest, BorrowStatus, ItemCondition
from campus_cart.models.item import Item
from campus_cart.services.availability_service import AvailabilityService
from campus_cart.services.borrow_terms import compute_borrow_terms

logger = logging.getLogger(__name__)

RESPONSE_STATUSES = (BorrowStatus.APPROVED, BorrowStatus.REJECTED)


def overlapping_reservation(item_id, start_date, end_date, exclude_request_id=None):
    """EXISTS clause matching approved/active loans that share a day with the window.

    Inclusive bounds: existing.start <= new.end AND existing.end >= new.start.
    """
    other = aliased(BorrowRequest)
    criteria = [
        other.item_id == item_id,
        other.status.in_(BorrowStatus.RESERVING),
        other.start_date <= end_date,
        other.end_date >= start_date,
    ]
    if exclude_request_id is not None:
        criteria.append(other.request_id != exclude_request_id)
    return exists().where(and_(*criteria))


class BorrowService:
    """Service class for borrow request operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.availability = AvailabilityService(db)

    async def request_borrow(
        self,
        actor: Actor,
        item_id: UUID,
        start_date: date,
        end_date: date,
        message: str | None = None,
    ) -> BorrowRequest:
        """Create a pending borrow request.

        Args:
            actor: Borrower
            item_id: Item UUID
            start_date: First day of the loan
            end_date: Last day of the loan
            message: Optional note to the seller

        Returns:
            The created request

        Raises:
            NotFoundError: Item missing or not borrowable
            InvalidInputError: Empty window or longer than the item allows
            ConflictError: Dates overlap an approved/active loan
        """
        actor.require(Role.BUYER)

        result = await self.db.execute(
            select(Item)
            .where(Item.item_id == item_id)
            .where(Item.is_borrowable.is_(True))
        )
        item = result.scalar_one_or_none()
        if not item:
            raise NotFoundError(
                "Item not available for borrowing", code="ITEM_NOT_BORROWABLE"
            )

        try:
            terms = compute_borrow_terms(
                start_date, end_date, item.borrow_price_per_day, item.max_borrow_days
            )
        except InvalidInputError:
            record_borrow_request("rejected_input")
            raise

        # Overlap check and insert are one statement: the row is written only
        # if no approved/active loan holds any of the requested days.
        request_id = uuid.uuid4()
        row = select(
            literal(request_id, Uuid),
            literal(item.item_id, Uuid),
            literal(actor.id, Uuid),
            literal(item.seller_id, Uuid),
            literal(start_date, Date),
            literal(end_date, Date),
            literal(terms.total_days, Integer),
            literal(terms.total_cost, Numeric(10, 2)),
            literal(message, Text),
            literal(BorrowStatus.PENDING, String(20)),
        ).where(~overlapping_reservation(item.item_id, start_date, end_date))

        try:
            result = await self.db.execute(
                insert(BorrowRequest.__table__).from_select(
                    [
                        "request_id",
                        "item_id",
                        "borrower_id",
                        "seller_id",
                        "start_date",
                        "end_date",
                        "total_days",
                        "total_cost",
                        "message",
                        "status",
                    ],
                    row,
                )
            )
            if result.rowcount != 1:
                record_borrow_request("overlap")
                raise ConflictError(
                    "Item is not available for the selected dates", code="DATES_UNAVAILABLE"
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        record_borrow_request("created")
        logger.info(
            f"Borrow request {request_id} for item {item_id} by {actor.id}: "
            f"{start_date}..{end_date} ({terms.total_days} days, cost={terms.total_cost})"
        )
        return await self._get(request_id)

    async def respond(
        self,
        actor: Actor,
        request_id: UUID,
        status: str,
        admin_notes: str | None = None,
    ) -> BorrowRequest:
        """Approve or reject a pending request (owning seller only).

        Approval reserves the item and is refused if another loan of the same
        item was approved for overlapping dates in the meantime.

        Raises:
            InvalidInputError: status is not approved/rejected
            NotFoundError: Request missing, not this seller's, or not pending
            ConflictError: Approval would double-book the item
        """
        actor.require(Role.SELLER)

        if status not in RESPONSE_STATUSES:
            raise InvalidInputError("Invalid status", code="INVALID_BORROW_STATUS")

        stmt = (
            update(BorrowRequest)
            .where(BorrowRequest.request_id == request_id)
            .where(BorrowRequest.seller_id == actor.id)
            .where(BorrowRequest.status == BorrowStatus.PENDING)
        )
        if status == BorrowStatus.APPROVED:
            stmt = stmt.where(
                ~overlapping_reservation(
                    BorrowRequest.item_id,
                    BorrowRequest.start_date,
                    BorrowRequest.end_date,
                    exclude_request_id=BorrowRequest.request_id,
                )
            )

        try:
            result = await self.db.execute(
                stmt.values(status=status, admin_notes=admin_notes)
                .returning(BorrowRequest.item_id)
                .execution_options(synchronize_session=False)
            )
            item_id = result.scalar_one_or_none()

            if item_id is None:
                if status == BorrowStatus.APPROVED and await self._is_pending_for(
                    actor, request_id
                ):
                    raise ConflictError(
                        "Item is not available for the selected dates",
                        code="DATES_UNAVAILABLE",
                    )
                raise NotFoundError(
                    "Borrow request not found", code="BORROW_REQUEST_NOT_FOUND"
                )

            if status == BorrowStatus.APPROVED:
                await self.availability.reserve(item_id)
            await self.db.commit()
        except IntegrityError as e:
            # Exclusion constraint backstop on PostgreSQL
            await self.db.rollback()
            raise ConflictError(
                "Item is not available for the selected dates", code="DATES_UNAVAILABLE"
            ) from e
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Borrow request {request_id} {status} by seller {actor.id}")
        return await self._get(request_id)

    async def start(
        self,
        actor: Actor,
        request_id: UUID,
        condition_before: str | None = None,
        images_before: list[str] | None = None,
    ) -> BorrowRequest:
        """Hand the item over: approved -> active, recording its condition.

        Raises:
            NotFoundError: Request missing, not this seller's, or not approved
        """
        actor.require(Role.SELLER)

        try:
            result = await self.db.execute(
                update(BorrowRequest)
                .where(BorrowRequest.request_id == request_id)
                .where(BorrowRequest.seller_id == actor.id)
                .where(BorrowRequest.status == BorrowStatus.APPROVED)
                .values(status=BorrowStatus.ACTIVE)
                .returning(BorrowRequest.request_id)
                .execution_options(synchronize_session=False)
            )
            if result.scalar_one_or_none() is None:
                raise NotFoundError(
                    "Approved borrow request not found", code="BORROW_REQUEST_NOT_FOUND"
                )

            self.db.add(
                ItemCondition(
                    borrow_request_id=request_id,
                    condition_before=condition_before,
                    images_before=list(images_before or []),
                )
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Borrow request {request_id} started by seller {actor.id}")
        return await self._get(request_id)

    async def return_item(
        self,
        actor: Actor,
        request_id: UUID,
        condition_after: str | None = None,
        images_after: list[str] | None = None,
        damage_reported: bool = False,
        damage_description: str | None = None,
        refund_amount: Decimal | None = None,
    ) -> BorrowRequest:
        """Take the item back: active -> returned, completing its condition record.

        Raises:
            NotFoundError: Request missing, not this seller's, or not active
        """
        actor.require(Role.SELLER)

        try:
            result = await self.db.execute(
                update(BorrowRequest)
                .where(BorrowRequest.request_id == request_id)
                .where(BorrowRequest.seller_id == actor.id)
                .where(BorrowRequest.status == BorrowStatus.ACTIVE)
                .values(status=BorrowStatus.RETURNED)
                .returning(BorrowRequest.item_id)
                .execution_options(synchronize_session=False)
            )
            item_id = result.scalar_one_or_none()
            if item_id is None:
                raise NotFoundError(
                    "Active borrow request not found", code="BORROW_REQUEST_NOT_FOUND"
                )

            await self.db.execute(
                update(ItemCondition)
                .where(ItemCondition.borrow_request_id == request_id)
                .values(
                    condition_after=condition_after,
                    images_after=list(images_after or []),
                    damage_reported=damage_reported,
                    damage_description=damage_description,
                    refund_amount=refund_amount or Decimal("0"),
                )
                .execution_options(synchronize_session=False)
            )
            await self.availability.release(item_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Borrow request {request_id} returned to seller {actor.id} "
            f"(damage_reported={damage_reported})"
        )
        return await self._get(request_id)

    async def get_condition(self, actor: Actor, request_id: UUID) -> ItemCondition:
        """Get the condition record, visible to the borrower and the seller."""
        result = await self.db.execute(
            select(ItemCondition)
            .join(BorrowRequest, ItemCondition.borrow_request_id == BorrowRequest.request_id)
            .where(BorrowRequest.request_id == request_id)
            .where(
                or_(
                    BorrowRequest.borrower_id == actor.id,
                    BorrowRequest.seller_id == actor.id,
                )
            )
            .execution_options(populate_existing=True)
        )
        condition = result.scalar_one_or_none()
        if not condition:
            raise NotFoundError("Condition record not found", code="CONDITION_NOT_FOUND")
        return condition

    async def get_borrower_requests(
        self, actor: Actor, skip: int = 0, limit: int = 100
    ) -> tuple[list[BorrowRequest], int]:
        """Get requests made by the borrower, newest first."""
        actor.require(Role.BUYER)
        return await self._list(BorrowRequest.borrower_id == actor.id, skip, limit)

    async def get_seller_requests(
        self, actor: Actor, skip: int = 0, limit: int = 100
    ) -> tuple[list[BorrowRequest], int]:
        """Get requests for the seller's items, newest first."""
        actor.require(Role.SELLER)
        return await self._list(BorrowRequest.seller_id == actor.id, skip, limit)

    async def _is_pending_for(self, actor: Actor, request_id: UUID) -> bool:
        result = await self.db.execute(
            select(BorrowRequest.request_id)
            .where(BorrowRequest.request_id == request_id)
            .where(BorrowRequest.seller_id == actor.id)
            .where(BorrowRequest.status == BorrowStatus.PENDING)
        )
        return result.scalar_one_or_none() is not None

    async def _list(
        self, criterion, skip: int, limit: int
    ) -> tuple[list[BorrowRequest], int]:
        count_result = await self.db.execute(
            select(func.count(BorrowRequest.request_id)).where(criterion)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(BorrowRequest)
            .options(selectinload(BorrowRequest.item))
            .where(criterion)
            .order_by(BorrowRequest.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def _get(self, request_id: UUID) -> BorrowRequest | None:
        result = await self.db.execute(
            select(BorrowRequest)
            .options(selectinload(BorrowRequest.item), selectinload(BorrowRequest.condition))
            .where(BorrowRequest.request_id == request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
