"""Tests for rider onboarding and its notifications."""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from campus_cart.core.actor import Role
from campus_cart.core.config import settings
from campus_cart.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from campus_cart.models import User
from campus_cart.services.notification_service import EmailNotifier
from campus_cart.services.rider_service import RiderService


@pytest.fixture
def notifier() -> MagicMock:
    notifier = MagicMock()
    notifier.send = AsyncMock()
    return notifier


@pytest.fixture
def redis_service() -> MagicMock:
    service = MagicMock()
    service.invalidate_user_cache = AsyncMock(return_value=True)
    return service


async def drain_notifications():
    """Let fire-and-forget email tasks run."""
    await asyncio.sleep(0)
    await asyncio.sleep(0)


async def load_user(db, user_id) -> User:
    return await db.get(User, user_id, populate_existing=True)


class TestApply:
    @pytest.mark.asyncio
    async def test_apply_creates_pending_and_notifies_admin(self, db, buyer, notifier):
        service = RiderService(db, notifier=notifier)

        application = await service.apply(buyer, "DL-12345", "license.jpg")
        await drain_notifications()

        assert application.status == "pending"
        assert application.user_id == buyer.id
        assert (await load_user(db, buyer.id)).rider_status == "pending"
        notifier.send.assert_awaited_once()
        to, subject, body = notifier.send.await_args.args
        assert to == settings.ADMIN_EMAIL
        assert subject == "New Rider Application"
        assert "DL-12345" in body

    @pytest.mark.asyncio
    async def test_duplicate_pending_rejected(self, db, buyer, notifier):
        service = RiderService(db, notifier=notifier)
        await service.apply(buyer, "DL-1")

        with pytest.raises(ConflictError) as exc_info:
            await service.apply(buyer, "DL-2")

        assert exc_info.value.code == "APPLICATION_PENDING"

    @pytest.mark.asyncio
    async def test_rider_cannot_apply(self, db, rider, notifier):
        with pytest.raises(ConflictError):
            await RiderService(db, notifier=notifier).apply(rider, "DL-1")

    @pytest.mark.asyncio
    async def test_latest_application(self, db, buyer, notifier):
        service = RiderService(db, notifier=notifier)
        assert await service.get_latest(buyer) is None

        application = await service.apply(buyer, "DL-1")

        latest = await service.get_latest(buyer)
        assert latest.application_id == application.application_id


class TestReview:
    @pytest.mark.asyncio
    async def test_approve_promotes_to_rider(
        self, db, buyer, admin, notifier, redis_service
    ):
        service = RiderService(db, redis_service, notifier)
        application = await service.apply(buyer, "DL-1")
        await drain_notifications()
        notifier.send.reset_mock()

        approved = await service.approve(admin, application.application_id, "Welcome")
        await drain_notifications()

        assert approved.status == "approved"
        assert approved.admin_notes == "Welcome"
        user = await load_user(db, buyer.id)
        assert user.role == "rider"
        assert user.rider_status == "approved"
        redis_service.invalidate_user_cache.assert_awaited_once_with(str(buyer.id))
        to, subject, _ = notifier.send.await_args.args
        assert to == user.email
        assert "approved" in subject

    @pytest.mark.asyncio
    async def test_reject_keeps_role(self, db, buyer, admin, notifier, redis_service):
        service = RiderService(db, redis_service, notifier)
        application = await service.apply(buyer, "DL-1")

        rejected = await service.reject(admin, application.application_id, "Blurry license")
        await drain_notifications()

        assert rejected.status == "rejected"
        user = await load_user(db, buyer.id)
        assert user.role == "buyer"
        assert user.rider_status == "rejected"
        _, _, body = notifier.send.await_args.args
        assert "Blurry license" in body

    @pytest.mark.asyncio
    async def test_review_only_once(self, db, buyer, admin, notifier):
        service = RiderService(db, notifier=notifier)
        application = await service.apply(buyer, "DL-1")
        application_id = application.application_id
        await service.approve(admin, application_id)

        with pytest.raises(NotFoundError) as exc_info:
            await service.reject(admin, application_id)

        assert exc_info.value.code == "APPLICATION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_missing_application(self, db, admin, notifier):
        with pytest.raises(NotFoundError):
            await RiderService(db, notifier=notifier).approve(admin, uuid4())

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, db, buyer, seller, notifier):
        service = RiderService(db, notifier=notifier)
        application = await service.apply(buyer, "DL-1")

        with pytest.raises(ForbiddenError):
            await service.approve(seller, application.application_id)
        with pytest.raises(ForbiddenError):
            await service.list_pending(seller)

    @pytest.mark.asyncio
    async def test_list_pending(self, db, buyer, admin, notifier, make_user):
        service = RiderService(db, notifier=notifier)
        first = await service.apply(buyer, "DL-1")
        other = await make_user(Role.BUYER)
        second = await service.apply(other, "DL-2")
        await service.reject(admin, second.application_id)

        pending = await service.list_pending(admin)

        assert [a.application_id for a in pending] == [first.application_id]

    @pytest.mark.asyncio
    async def test_email_failure_does_not_undo_approval(
        self, db, buyer, admin, notifier, caplog
    ):
        notifier.send = AsyncMock(side_effect=OSError("SMTP down"))
        service = RiderService(db, notifier=notifier)
        application = await service.apply(buyer, "DL-1")

        with caplog.at_level(logging.ERROR):
            approved = await service.approve(admin, application.application_id)
            await drain_notifications()

        assert approved.status == "approved"
        assert (await load_user(db, buyer.id)).role == "rider"
        assert "Failed to send email" in caplog.text

    @pytest.mark.asyncio
    async def test_cache_outage_does_not_fail_approval(
        self, db, buyer, admin, notifier, redis_service, caplog
    ):
        redis_service.invalidate_user_cache = AsyncMock(
            side_effect=RedisConnectionError("connection refused")
        )
        service = RiderService(db, redis_service, notifier)
        application = await service.apply(buyer, "DL-1")
        await drain_notifications()
        notifier.send.reset_mock()

        with caplog.at_level(logging.WARNING):
            approved = await service.approve(admin, application.application_id)
            await drain_notifications()

        assert approved.status == "approved"
        assert (await load_user(db, buyer.id)).role == "rider"
        assert "Could not invalidate cached user" in caplog.text
        notifier.send.assert_awaited_once()


class TestEmailNotifier:
    @pytest.mark.asyncio
    async def test_disabled_without_host(self, monkeypatch):
        notifier = EmailNotifier(host="")
        send_sync = MagicMock()
        monkeypatch.setattr(notifier, "_send_sync", send_sync)

        await notifier.send("someone@campus.edu", "Hello", "Body")

        assert notifier.enabled is False
        send_sync.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_through_thread(self, monkeypatch):
        notifier = EmailNotifier(host="smtp.campus.edu", port=465, sender="cart@campus.edu")
        send_sync = MagicMock()
        monkeypatch.setattr(notifier, "_send_sync", send_sync)

        await notifier.send("someone@campus.edu", "Hello", "Body")

        send_sync.assert_called_once_with("someone@campus.edu", "Hello", "Body")
