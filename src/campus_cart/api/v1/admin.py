"""Admin API endpoints."""

from uuid import UUID

from fastapi import APIRouter

from campus_cart.api.deps import CurrentActor, DbSession, RedisServiceDep
from campus_cart.schemas.admin import AdminStats
from campus_cart.schemas.rider import RiderApplicationResponse, RiderApplicationReview
from campus_cart.services.rider_service import RiderService
from campus_cart.services.stats_service import StatsService

router = APIRouter()


@router.get("/rider-applications", response_model=list[RiderApplicationResponse])
async def list_rider_applications(db: DbSession, actor: CurrentActor):
    """Get pending rider applications, oldest first."""
    return await RiderService(db).list_pending(actor)


@router.put(
    "/rider-applications/{application_id}/approve",
    response_model=RiderApplicationResponse,
)
async def approve_rider(
    application_id: UUID,
    db: DbSession,
    actor: CurrentActor,
    redis_service: RedisServiceDep,
    review: RiderApplicationReview | None = None,
):
    """Approve an application and promote the applicant to rider."""
    notes = review.admin_notes if review else None
    return await RiderService(db, redis_service).approve(actor, application_id, notes)


@router.put(
    "/rider-applications/{application_id}/reject",
    response_model=RiderApplicationResponse,
)
async def reject_rider(
    application_id: UUID,
    db: DbSession,
    actor: CurrentActor,
    redis_service: RedisServiceDep,
    review: RiderApplicationReview | None = None,
):
    """Reject an application."""
    notes = review.admin_notes if review else None
    return await RiderService(db, redis_service).reject(actor, application_id, notes)


@router.get("/stats", response_model=AdminStats)
async def admin_stats(db: DbSession, actor: CurrentActor):
    """Get dashboard counts, including derived overdue loans."""
    return await StatsService(db).get_stats(actor)
