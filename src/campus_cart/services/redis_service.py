"""Redis service for the authenticated-user cache."""

from typing import Any
from uuid import UUID

from redis.asyncio import Redis

from campus_cart.core.actor import Actor, Role
from campus_cart.core.config import settings


class RedisService:
    """Service class for Redis operations."""

    def __init__(self, redis: Redis):
        """Initialize Redis service with a Redis client.

        Args:
            redis: Async Redis client instance
        """
        self.redis = redis

    @staticmethod
    def _user_key(user_id: str) -> str:
        return f"user:{user_id}"

    async def cache_user(
        self, user_id: str, user_data: dict[str, Any], ttl: int | None = None
    ) -> None:
        """Cache user data in a Redis hash.

        Key pattern: user:{user_id}

        Args:
            user_id: User UUID string
            user_data: User data dict (values will be converted to strings)
            ttl: Optional TTL in seconds (defaults to settings.USER_CACHE_TTL)
        """
        key = self._user_key(user_id)
        cache_ttl = ttl if ttl is not None else settings.USER_CACHE_TTL
        string_data = {k: str(v) for k, v in user_data.items() if v is not None}
        pipe = self.redis.pipeline()
        pipe.hset(key, mapping=string_data)
        pipe.expire(key, cache_ttl)
        await pipe.execute()

    async def get_cached_user(self, user_id: str) -> dict[str, str] | None:
        """Get cached user data, or None if not cached."""
        data = await self.redis.hgetall(self._user_key(user_id))
        return data if data else None

    async def invalidate_user_cache(self, user_id: str) -> bool:
        """Drop a cached user. Call whenever role or status changes.

        Returns:
            True if cache was deleted, False if it didn't exist
        """
        result = await self.redis.delete(self._user_key(user_id))
        return result > 0

    async def get_cached_actor(self, user_id: str) -> tuple[Actor, str] | None:
        """Rebuild an Actor from the user cache.

        Returns:
            Tuple of (actor, account status) or None on a cache miss
        """
        data = await self.get_cached_user(user_id)
        if not data or "role" not in data:
            return None
        actor = Actor(id=UUID(user_id), role=Role(data["role"]))
        return actor, data.get("status", "active")
