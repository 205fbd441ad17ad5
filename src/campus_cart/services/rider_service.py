"""Rider onboarding: applications and admin review."""

import logging
from uuid import UUID

from redis.exceptions import RedisError
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from campus_cart.core.actor import Actor, Role
from campus_cart.core.config import settings
from campus_cart.core.exceptions import ConflictError, NotFoundError
from campus_cart.models.rider_application import RiderApplication
from campus_cart.models.user import User
from campus_cart.services.notification_service import EmailNotifier, notify_in_background
from campus_cart.services.redis_service import RedisService

logger = logging.getLogger(__name__)


class RiderService:
    """Service class for rider application operations."""

    def __init__(
        self,
        db: AsyncSession,
        redis_service: RedisService | None = None,
        notifier: EmailNotifier | None = None,
    ):
        self.db = db
        self.redis_service = redis_service
        self.notifier = notifier or EmailNotifier()

    async def apply(
        self, actor: Actor, license_number: str, license_image: str | None = None
    ) -> RiderApplication:
        """Submit a rider application.

        Raises:
            ConflictError: The caller already has a pending application or is a rider
        """
        if actor.has_role(Role.RIDER, Role.ADMIN):
            raise ConflictError("You are already a rider", code="ALREADY_RIDER")

        existing = await self.db.execute(
            select(RiderApplication.application_id)
            .where(RiderApplication.user_id == actor.id)
            .where(RiderApplication.status == "pending")
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(
                "You already have a pending rider request", code="APPLICATION_PENDING"
            )

        application = RiderApplication(
            user_id=actor.id,
            license_number=license_number,
            license_image=license_image,
            status="pending",
        )
        try:
            self.db.add(application)
            await self.db.execute(
                update(User)
                .where(User.user_id == actor.id)
                .values(rider_status="pending")
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(application)

        user = await self._get_user(actor.id)
        notify_in_background(
            self.notifier,
            settings.ADMIN_EMAIL,
            "New Rider Application",
            f"User {user.full_name} ({user.email}) has applied to become a rider. "
            f"License: {license_number}. Please review in admin panel.",
        )
        logger.info(f"Rider application {application.application_id} submitted by {actor.id}")
        return application

    async def get_latest(self, actor: Actor) -> RiderApplication | None:
        """Get the caller's most recent application, if any."""
        result = await self.db.execute(
            select(RiderApplication)
            .where(RiderApplication.user_id == actor.id)
            .order_by(RiderApplication.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_pending(self, actor: Actor) -> list[RiderApplication]:
        actor.require(Role.ADMIN)
        result = await self.db.execute(
            select(RiderApplication)
            .where(RiderApplication.status == "pending")
            .order_by(RiderApplication.created_at.asc())
        )
        return list(result.scalars().all())

    async def approve(
        self, actor: Actor, application_id: UUID, admin_notes: str | None = None
    ) -> RiderApplication:
        """Approve a pending application and promote the applicant to rider."""
        return await self._review(actor, application_id, "approved", admin_notes)

    async def reject(
        self, actor: Actor, application_id: UUID, admin_notes: str | None = None
    ) -> RiderApplication:
        """Reject a pending application."""
        return await self._review(actor, application_id, "rejected", admin_notes)

    async def _review(
        self,
        actor: Actor,
        application_id: UUID,
        decision: str,
        admin_notes: str | None,
    ) -> RiderApplication:
        """Apply an admin decision, then notify the applicant.

        The email is sent only after the commit and its failure is not
        reported to the caller.

        Raises:
            NotFoundError: Application missing or already reviewed
        """
        actor.require(Role.ADMIN)

        try:
            result = await self.db.execute(
                update(RiderApplication)
                .where(RiderApplication.application_id == application_id)
                .where(RiderApplication.status == "pending")
                .values(status=decision, admin_notes=admin_notes)
                .returning(RiderApplication.user_id)
                .execution_options(synchronize_session=False)
            )
            user_id = result.scalar_one_or_none()
            if user_id is None:
                raise NotFoundError(
                    "Pending rider application not found", code="APPLICATION_NOT_FOUND"
                )

            values = {"rider_status": decision}
            if decision == "approved":
                values["role"] = Role.RIDER.value
            await self.db.execute(
                update(User)
                .where(User.user_id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        if self.redis_service:
            try:
                await self.redis_service.invalidate_user_cache(str(user_id))
            except RedisError as e:
                logger.warning(f"Could not invalidate cached user {user_id}: {e}")

        user = await self._get_user(user_id)
        if decision == "approved":
            subject = "Your rider application was approved"
            body = f"Hi {user.full_name}, you can now accept deliveries on Campus Cart."
        else:
            subject = "Your rider application was rejected"
            body = f"Hi {user.full_name}, your rider application was not approved."
            if admin_notes:
                body += f" Notes: {admin_notes}"
        notify_in_background(self.notifier, user.email, subject, body)

        logger.info(f"Rider application {application_id} {decision} by admin {actor.id}")
        result = await self.db.execute(
            select(RiderApplication)
            .where(RiderApplication.application_id == application_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _get_user(self, user_id: UUID) -> User:
        result = await self.db.execute(
            select(User)
            .where(User.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
