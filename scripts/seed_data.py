"""Seed data script for development.

Creates one account per role and a handful of listings:
- admin@campus.edu / admin123
- seller@campus.edu, buyer@campus.edu, rider@campus.edu / password123

Environment Variables:
    ITEM_COUNT: Number of demo listings to create (default: 5)

Usage:
    python -m scripts.seed_data
"""

import asyncio
import os
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_cart.core.database import Base, async_session_maker, engine
from campus_cart.core.security import get_password_hash
from campus_cart.models import Item, User

ITEM_COUNT = int(os.getenv("ITEM_COUNT", "5"))

DEMO_USERS = [
    ("admin@campus.edu", "admin123", "Campus Admin", "admin", "none"),
    ("seller@campus.edu", "password123", "Sam Seller", "seller", "none"),
    ("buyer@campus.edu", "password123", "Bea Buyer", "buyer", "none"),
    ("rider@campus.edu", "password123", "Rae Rider", "rider", "approved"),
]

DEMO_ITEMS = [
    ("Calculus Textbook", "books", Decimal("35.00"), True, Decimal("2.00")),
    ("Desk Lamp", "furniture", Decimal("18.50"), False, Decimal("0")),
    ("Graphing Calculator", "electronics", Decimal("60.00"), True, Decimal("3.50")),
    ("Mini Fridge", "appliances", Decimal("90.00"), False, Decimal("0")),
    ("Lab Coat", "clothing", Decimal("15.00"), True, Decimal("1.00")),
]


async def seed_users(session: AsyncSession) -> dict[str, User]:
    """Create the demo accounts, skipping any that already exist."""
    print("Seeding users...")
    users = {}
    for email, password, full_name, role, rider_status in DEMO_USERS:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user:
            print(f"  {email} already exists, skipping...")
        else:
            user = User(
                email=email,
                password_hash=get_password_hash(password),
                full_name=full_name,
                role=role,
                rider_status=rider_status,
                status="active",
            )
            session.add(user)
            print(f"  Created {role}: {email}")
        users[role] = user
    await session.commit()
    return users


async def seed_items(session: AsyncSession, seller: User) -> None:
    """Create demo listings owned by the seller."""
    print("Seeding items...")
    result = await session.execute(select(Item).where(Item.seller_id == seller.user_id).limit(1))
    if result.scalar_one_or_none():
        print("  Items already exist, skipping...")
        return

    for i in range(ITEM_COUNT):
        title, category, price, borrowable, per_day = DEMO_ITEMS[i % len(DEMO_ITEMS)]
        session.add(
            Item(
                seller_id=seller.user_id,
                title=title if i < len(DEMO_ITEMS) else f"{title} #{i + 1}",
                category=category,
                condition_status="good",
                price=price,
                is_available=True,
                is_borrowable=borrowable,
                borrow_price_per_day=per_day,
                max_borrow_days=14,
                version=0,
            )
        )
    await session.commit()
    print(f"  Created {ITEM_COUNT} items")


async def main():
    print("=" * 60)
    print("Seeding Campus Cart demo data")
    print("=" * 60)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        users = await seed_users(session)
        await seed_items(session, users["seller"])

    print("\nDone.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
