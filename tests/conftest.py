"""Pytest configuration and fixtures for testing."""

from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from campus_cart import models  # noqa: F401
from campus_cart.core.actor import Actor, Role
from campus_cart.core.database import Base
from campus_cart.models import BorrowRequest, Item, User


# Mock Redis client fixture
@pytest.fixture
def mock_redis() -> AsyncMock:
    """Create a mock Redis client."""
    redis = AsyncMock()

    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock(return_value=1)
    redis.hgetall = AsyncMock(return_value={})

    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, True])
    redis.pipeline = MagicMock(return_value=pipe)

    return redis


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite so separate sessions see each other's commits."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'campus_cart.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


async def create_user(db: AsyncSession, role: Role, **overrides) -> Actor:
    """Insert a user with the given role and return it as an Actor."""
    user = User(
        email=overrides.pop("email", f"{role.value}-{uuid4().hex[:8]}@campus.edu"),
        password_hash="not-a-real-hash",
        full_name=overrides.pop("full_name", f"Test {role.value.title()}"),
        role=role.value,
        rider_status="approved" if role == Role.RIDER else "none",
        status="active",
        **overrides,
    )
    db.add(user)
    await db.commit()
    return Actor(id=user.user_id, role=role)


async def create_item(db: AsyncSession, seller: Actor, **overrides) -> Item:
    values = {
        "title": "Graphing Calculator",
        "price": Decimal("60.00"),
        "is_available": True,
        "is_borrowable": True,
        "borrow_price_per_day": Decimal("3.50"),
        "max_borrow_days": 7,
        "version": 0,
    }
    values.update(overrides)
    item = Item(seller_id=seller.id, **values)
    db.add(item)
    await db.commit()
    return item


async def create_borrow(
    db: AsyncSession,
    item: Item,
    borrower: Actor,
    start: date,
    end: date,
    status: str,
) -> BorrowRequest:
    """Insert a borrow request directly, bypassing the lifecycle checks."""
    request = BorrowRequest(
        item_id=item.item_id,
        borrower_id=borrower.id,
        seller_id=item.seller_id,
        start_date=start,
        end_date=end,
        total_days=(end - start).days,
        total_cost=Decimal("1.00"),
        status=status,
    )
    db.add(request)
    await db.commit()
    return request


@pytest_asyncio.fixture
async def buyer(db) -> Actor:
    return await create_user(db, Role.BUYER)


@pytest_asyncio.fixture
async def seller(db) -> Actor:
    return await create_user(db, Role.SELLER)


@pytest_asyncio.fixture
async def rider(db) -> Actor:
    return await create_user(db, Role.RIDER)


@pytest_asyncio.fixture
async def admin(db) -> Actor:
    return await create_user(db, Role.ADMIN)


@pytest_asyncio.fixture
async def item(db, seller) -> Item:
    return await create_item(db, seller)


@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def next_week(today) -> tuple[date, date]:
    """A three-day window starting a week from now."""
    start = today + timedelta(days=7)
    return start, start + timedelta(days=3)


@pytest.fixture
def make_user(db):
    async def _make(role: Role, **overrides) -> Actor:
        return await create_user(db, role, **overrides)

    return _make


@pytest.fixture
def make_item(db, seller):
    async def _make(owner: Actor | None = None, **overrides) -> Item:
        return await create_item(db, owner or seller, **overrides)

    return _make


@pytest.fixture
def make_borrow(db):
    async def _make(item: Item, borrower: Actor, start: date, end: date, status: str):
        return await create_borrow(db, item, borrower, start, end, status)

    return _make
