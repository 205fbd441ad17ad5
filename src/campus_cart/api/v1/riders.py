"""Rider onboarding API endpoints."""

from fastapi import APIRouter, status

from campus_cart.api.deps import CurrentActor, DbSession, RedisServiceDep
from campus_cart.schemas.delivery import RiderStats
from campus_cart.schemas.rider import (
    RiderApplicationCreate,
    RiderApplicationResponse,
    RiderApplicationStatus,
)
from campus_cart.services.delivery_service import DeliveryService
from campus_cart.services.rider_service import RiderService

router = APIRouter()


@router.post(
    "/applications",
    response_model=RiderApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def apply(
    data: RiderApplicationCreate,
    db: DbSession,
    actor: CurrentActor,
    redis_service: RedisServiceDep,
):
    """Apply to become a rider. Admins are notified by email."""
    service = RiderService(db, redis_service)
    return await service.apply(actor, data.license_number, data.license_image)


@router.get("/applications/status", response_model=RiderApplicationStatus)
async def application_status(db: DbSession, actor: CurrentActor):
    """Get the caller's latest application, or status "none"."""
    application = await RiderService(db).get_latest(actor)
    if application is None:
        return RiderApplicationStatus(status="none")
    return RiderApplicationStatus(
        status=application.status,
        application=RiderApplicationResponse.model_validate(application),
    )


@router.get("/stats", response_model=RiderStats)
async def rider_stats(db: DbSession, actor: CurrentActor):
    """Get the rider's delivery totals and earnings."""
    return await DeliveryService(db).get_rider_stats(actor)
