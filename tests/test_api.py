"""HTTP surface tests: auth, dependency wiring and error rendering."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from campus_cart.api.deps import get_redis_service
from campus_cart.core.database import get_db
from campus_cart.core.security import create_access_token
from campus_cart.main import app
from campus_cart.services.redis_service import RedisService
from scripts.seed_data import DEMO_USERS, seed_users


@pytest_asyncio.fixture
async def client(session_maker, mock_redis, monkeypatch):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    async def override_get_redis_service():
        return RedisService(mock_redis)

    limiter_redis = MagicMock()
    limiter_redis.register_script = MagicMock(return_value=AsyncMock(return_value=[1, 1000]))
    monkeypatch.setattr(
        "campus_cart.middleware.rate_limit.get_redis", AsyncMock(return_value=limiter_redis)
    )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_service] = override_get_redis_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register_and_login(client, email, role="buyer") -> dict:
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": "password123", "full_name": "Test", "role": role},
    )
    assert response.status_code == 201
    response = await client.post(
        "/api/v1/auth/login", json={"email": email, "password": "password123"}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


class TestAuth:
    @pytest.mark.asyncio
    async def test_register_login_me(self, client):
        headers = await register_and_login(client, "bea@campus.edu")

        response = await client.get("/api/v1/auth/me", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "bea@campus.edu"
        assert body["role"] == "buyer"
        assert body["rider_status"] == "none"

    @pytest.mark.asyncio
    async def test_cannot_self_register_as_rider(self, client):
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": "rae@campus.edu",
                "password": "password123",
                "full_name": "Rae",
                "role": "rider",
            },
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_duplicate_email_conflict(self, client):
        await register_and_login(client, "dup@campus.edu")

        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "dup@campus.edu", "password": "password123", "full_name": "Dup"},
        )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "EMAIL_TAKEN"

    @pytest.mark.asyncio
    async def test_bad_password(self, client):
        await register_and_login(client, "sam@campus.edu")

        response = await client.post(
            "/api/v1/auth/login", json={"email": "sam@campus.edu", "password": "wrong-pass"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_seeded_accounts_can_log_in(self, client, session_maker):
        async with session_maker() as session:
            await seed_users(session)

        for email, password, _, role, _ in DEMO_USERS:
            response = await client.post(
                "/api/v1/auth/login", json={"email": email, "password": password}
            )
            assert response.status_code == 200, email

            headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
            me = await client.get("/api/v1/auth/me", headers=headers)
            assert me.json()["role"] == role

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_user_token(self, client):
        token = create_access_token({"sub": "00000000-0000-0000-0000-000000000000"})

        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401


class TestErrorRendering:
    @pytest.mark.asyncio
    async def test_not_found_detail(self, client):
        headers = await register_and_login(client, "buyer@campus.edu")

        response = await client.post(
            "/api/v1/orders",
            headers=headers,
            json={
                "item_id": "00000000-0000-0000-0000-000000000000",
                "quantity": 1,
                "delivery_address": "Dorm B",
            },
        )

        assert response.status_code == 404
        assert response.json() == {
            "detail": {"code": "ITEM_NOT_AVAILABLE", "message": "Item not available"}
        }

    @pytest.mark.asyncio
    async def test_wrong_role_forbidden(self, client):
        headers = await register_and_login(client, "buyer2@campus.edu")

        response = await client.get("/api/v1/deliveries/available", headers=headers)

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "ROLE_REQUIRED"


class TestOrderFlow:
    @pytest.mark.asyncio
    async def test_list_buy_and_cancel(self, client):
        seller = await register_and_login(client, "seller@campus.edu", role="seller")
        buyer = await register_and_login(client, "buyer3@campus.edu")

        response = await client.post(
            "/api/v1/items",
            headers=seller,
            json={"title": "Desk Lamp", "price": "18.50"},
        )
        assert response.status_code == 201
        item_id = response.json()["item_id"]

        listing = await client.get("/api/v1/items")
        assert listing.json()["total"] == 1

        response = await client.post(
            "/api/v1/orders",
            headers=buyer,
            json={"item_id": item_id, "quantity": 2, "delivery_address": "Dorm B"},
        )
        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "pending"
        assert order["delivery"]["status"] == "open"
        assert order["total_amount"] == "37.00"

        response = await client.put(
            f"/api/v1/orders/{order['order_id']}/cancel",
            headers=buyer,
            json={"reason": "Found one cheaper"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancel_reason"] == "Found one cheaper"


class TestOps:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_metrics(self, client):
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
