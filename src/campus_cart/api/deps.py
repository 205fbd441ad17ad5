"""API dependencies for authentication and database access."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from campus_cart.core.actor import Actor, Role
from campus_cart.core.database import get_db
from campus_cart.core.redis import get_redis
from campus_cart.core.security import decode_access_token
from campus_cart.services.redis_service import RedisService
from campus_cart.services.user_service import UserService

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_redis_service() -> RedisService:
    """Get RedisService instance with shared Redis connection pool."""
    redis = await get_redis()
    return RedisService(redis)


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
    redis_service: Annotated[RedisService, Depends(get_redis_service)],
) -> Actor:
    """Resolve the bearer token to an Actor.

    The role is read from the user cache, falling back to the database on a
    miss. The token itself never carries the role, so a promotion to rider
    takes effect as soon as the cache entry is invalidated.

    Raises:
        HTTPException: 401 for a bad token or unknown user, 403 for an
            inactive account
    """
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid authentication token")

    user_id = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Invalid token payload")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise _unauthorized("Invalid user ID in token")

    cached = await redis_service.get_cached_actor(user_id)
    if cached:
        actor, account_status = cached
    else:
        user = await UserService(db).get_by_id(user_uuid)
        if user is None:
            raise _unauthorized("User not found")
        actor = Actor(id=user.user_id, role=Role(user.role))
        account_status = user.status
        await redis_service.cache_user(
            user_id,
            {"email": user.email, "role": user.role, "status": user.status},
        )

    if account_status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active",
        )
    return actor


# Type aliases for cleaner dependency injection
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
RedisServiceDep = Annotated[RedisService, Depends(get_redis_service)]
