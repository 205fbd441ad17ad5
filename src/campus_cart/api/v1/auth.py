"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status

from campus_cart.api.deps import CurrentActor, DbSession
from campus_cart.core.config import settings
from campus_cart.core.security import create_access_token
from campus_cart.schemas.user import TokenResponse, UserLogin, UserRegister, UserResponse
from campus_cart.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, db: DbSession):
    """Register a new buyer or seller.

    Args:
        user_data: Registration data (email, password, full_name, phone, role)
        db: Database session

    Returns:
        Created user information

    Raises:
        409: Email already registered
    """
    user_service = UserService(db)
    user = await user_service.create_user(user_data)
    logger.info(f"Registered {user.role} {user.user_id}")
    return user


@router.post("/login", response_model=TokenResponse)
async def login(user_data: UserLogin, db: DbSession):
    """Login and get access token.

    Raises:
        401: Invalid credentials
    """
    user_service = UserService(db)
    user = await user_service.authenticate(user_data.email, user_data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={"sub": str(user.user_id), "email": user.email})
    return TokenResponse(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(actor: CurrentActor, db: DbSession):
    """Get current user information."""
    user = await UserService(db).get_by_id(actor.id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user
