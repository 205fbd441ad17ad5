from campus_cart.core.actor import Actor, Role
from campus_cart.core.config import settings
from campus_cart.core.database import Base, async_session_maker, engine, get_db
from campus_cart.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    LifecycleError,
    NotFoundError,
)
from campus_cart.core.redis import close_redis, get_redis
from campus_cart.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

__all__ = [
    "settings",
    "Base",
    "engine",
    "async_session_maker",
    "get_db",
    "get_redis",
    "close_redis",
    "Actor",
    "Role",
    "LifecycleError",
    "NotFoundError",
    "ConflictError",
    "InvalidStateError",
    "InvalidInputError",
    "ForbiddenError",
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "decode_access_token",
]
