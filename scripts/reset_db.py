"""Reset database to empty state.

Drops and recreates every table from the ORM metadata, then clears Redis.

Usage:
    python -m scripts.reset_db
"""

import asyncio

from redis.exceptions import RedisError

from campus_cart import models  # noqa: F401  (registers tables on Base.metadata)
from campus_cart.core.database import Base, engine
from campus_cart.core.redis import close_redis, get_redis


async def reset_database():
    """Drop and recreate all tables."""
    print("=" * 60)
    print("Resetting database to empty state...")
    print("=" * 60)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    for table in Base.metadata.sorted_tables:
        print(f"  Recreated {table.name}")
    print("\nDatabase cleared successfully!")


async def reset_redis():
    """Clear all Redis data."""
    print("\nResetting Redis...")

    try:
        redis = await get_redis()
        await redis.flushdb()
        print("  Redis flushed successfully!")
    except RedisError as e:
        print(f"  Warning: Could not clear Redis: {e}")
        print("  (This is OK if Redis is not running locally)")
    finally:
        await close_redis()


async def main():
    await reset_database()
    await reset_redis()

    print("\n" + "=" * 60)
    print("Reset complete!")
    print("=" * 60)
    print("\nTo re-seed the database, run:")
    print("  python -m scripts.seed_data")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
