"""Borrow lifecycle API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from campus_cart.api.deps import CurrentActor, DbSession
from campus_cart.schemas.borrow import (
    BorrowRequestCreate,
    BorrowRequestListResponse,
    BorrowRequestResponse,
    BorrowRespond,
    BorrowReturn,
    BorrowStart,
    ItemConditionResponse,
)
from campus_cart.services.borrow_service import BorrowService

router = APIRouter()


@router.post(
    "/requests",
    response_model=BorrowRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_borrow(data: BorrowRequestCreate, db: DbSession, actor: CurrentActor):
    """Request to borrow an item for a date range.

    Raises:
        400: Invalid date range or longer than the item allows
        404: Item not borrowable
        409: Dates overlap an approved or active loan
    """
    return await BorrowService(db).request_borrow(
        actor,
        item_id=data.item_id,
        start_date=data.start_date,
        end_date=data.end_date,
        message=data.message,
    )


@router.get("/requests/mine", response_model=BorrowRequestListResponse)
async def my_requests(
    db: DbSession,
    actor: CurrentActor,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get the caller's borrow requests."""
    requests, total = await BorrowService(db).get_borrower_requests(actor, skip=skip, limit=limit)
    return BorrowRequestListResponse(requests=requests, total=total)


@router.get("/requests/seller", response_model=BorrowRequestListResponse)
async def seller_requests(
    db: DbSession,
    actor: CurrentActor,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get borrow requests for the caller's items."""
    requests, total = await BorrowService(db).get_seller_requests(actor, skip=skip, limit=limit)
    return BorrowRequestListResponse(requests=requests, total=total)


@router.put("/requests/{request_id}/respond", response_model=BorrowRequestResponse)
async def respond(
    request_id: UUID, data: BorrowRespond, db: DbSession, actor: CurrentActor
):
    """Approve or reject a pending request."""
    return await BorrowService(db).respond(
        actor, request_id, data.status, admin_notes=data.admin_notes
    )


@router.put("/requests/{request_id}/start", response_model=BorrowRequestResponse)
async def start(request_id: UUID, data: BorrowStart, db: DbSession, actor: CurrentActor):
    """Hand the item to the borrower."""
    return await BorrowService(db).start(
        actor,
        request_id,
        condition_before=data.condition_before,
        images_before=data.images_before,
    )


@router.put("/requests/{request_id}/return", response_model=BorrowRequestResponse)
async def return_item(
    request_id: UUID, data: BorrowReturn, db: DbSession, actor: CurrentActor
):
    """Take the item back and close the loan."""
    return await BorrowService(db).return_item(
        actor,
        request_id,
        condition_after=data.condition_after,
        images_after=data.images_after,
        damage_reported=data.damage_reported,
        damage_description=data.damage_description,
        refund_amount=data.refund_amount,
    )


@router.get("/requests/{request_id}/condition", response_model=ItemConditionResponse)
async def get_condition(request_id: UUID, db: DbSession, actor: CurrentActor):
    """Get the loan's condition record."""
    return await BorrowService(db).get_condition(actor, request_id)
