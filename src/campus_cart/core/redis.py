from typing import Optional

import redis.asyncio as redis

from campus_cart.core.config import settings

_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Return the process-wide Redis client, creating its pool on first use."""
    global _client
    if _client is None:
        _client = redis.Redis.from_url(
            settings.REDIS_URL,
            max_connections=50,
            decode_responses=True,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
            retry_on_timeout=True,
        )
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
