"""Per-IP and per-user request throttling backed by Redis."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from campus_cart.core.config import settings
from campus_cart.core.redis import get_redis
from campus_cart.core.security import decode_access_token

logger = logging.getLogger(__name__)

EXEMPT_PATHS = ("/health", "/metrics")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed one-second window counters keyed by client IP and by user.

    Limits default to RATE_LIMIT_IP and RATE_LIMIT_USER. When Redis is
    unreachable requests are let through and a warning is logged.
    """

    # Returns {count, ttl_ms}; the key expires with its window
    COUNTER_SCRIPT = """
    local count = redis.call('INCR', KEYS[1])
    if count == 1 then
        redis.call('PEXPIRE', KEYS[1], ARGV[1])
    end
    return {count, redis.call('PTTL', KEYS[1])}
    """

    def __init__(self, app, user_limit: int | None = None, ip_limit: int | None = None):
        super().__init__(app)
        self.user_limit = user_limit or settings.RATE_LIMIT_USER
        self.ip_limit = ip_limit or settings.RATE_LIMIT_IP
        self._script = None

    def _user_key(self, request: Request) -> str | None:
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return None
        payload = decode_access_token(auth_header[7:])
        if not payload or "sub" not in payload:
            return None
        return f"ratelimit:user:{payload['sub']}"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        window = int(time.time())

        try:
            redis = await get_redis()
            retry_after = await self._hit(redis, f"ratelimit:ip:{client_ip}:{window}", self.ip_limit)
            if retry_after:
                return self._too_many("Too many requests from this IP", retry_after)

            user_key = self._user_key(request)
            if user_key:
                retry_after = await self._hit(redis, f"{user_key}:{window}", self.user_limit)
                if retry_after:
                    return self._too_many("Too many requests for this user", retry_after)
        except RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")

        return await call_next(request)

    async def _hit(self, redis, key: str, limit: int) -> int:
        """Count one request against ``key``.

        Returns:
            0 if allowed, otherwise seconds until the window resets
        """
        if self._script is None:
            self._script = redis.register_script(self.COUNTER_SCRIPT)
        count, ttl_ms = await self._script(keys=[key], args=[1000])
        if int(count) <= limit:
            return 0
        return max(1, -(-int(ttl_ms) // 1000))

    @staticmethod
    def _too_many(detail: str, retry_after: int) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={"detail": detail},
            headers={"Retry-After": str(retry_after)},
        )
