"""Item catalogue API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from campus_cart.api.deps import CurrentActor, DbSession
from campus_cart.schemas.item import ItemCreate, ItemListResponse, ItemResponse
from campus_cart.services.item_service import ItemService

router = APIRouter()


@router.get("", response_model=ItemListResponse)
async def list_items(
    db: DbSession,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get available items with pagination."""
    service = ItemService(db)
    items, total = await service.get_available(skip=skip, limit=limit)
    return ItemListResponse(items=items, total=total)


@router.get("/mine", response_model=list[ItemResponse])
async def list_my_items(db: DbSession, actor: CurrentActor):
    """Get the calling seller's listings, including unavailable ones."""
    return await ItemService(db).get_seller_items(actor)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: UUID, db: DbSession):
    """Get item by ID."""
    return await ItemService(db).get_by_id(item_id)


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(item_data: ItemCreate, db: DbSession, actor: CurrentActor):
    """Create a new listing (sellers only)."""
    return await ItemService(db).create(actor, item_data)
