import uuid
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select

from app.core.database import get_db
from app.core.errors import Conflict, Unauthenticated, Unauthorized
from app.core.logging_config import get_logger
from app.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_token,
    get_password_hash,
    get_current_user,
    access_token_key,
    refresh_token_key,
)
from app.core.config import settings
from app.core.redis_client import get_redis
from app.models.user import User
from app.schemas.auth import Token, RefreshRequest
from app.schemas.user import UserCreate, UserResponse
from app.services import store
import redis.asyncio as redis

router = APIRouter()
logger = get_logger(__name__)


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new account together with its profile"""
    email = user.email.strip().lower()

    # Check if user already exists
    result = await db.execute(select(User).where(func.lower(User.email) == email))
    if result.scalar_one_or_none():
        raise Conflict("Email already registered")

    db_user = User(
        email=email,
        hashed_password=get_password_hash(user.password)
    )
    db.add(db_user)
    await db.flush()
    await store.ensure_profile(db, db_user, user.full_name)
    await store.commit(db, Conflict)

    logger.info("Account registered", extra={"user_id": str(db_user.id)})
    return db_user


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis),
):
    """Login with email and password and return JWT tokens"""
    email = form_data.username.strip().lower()
    result = await db.execute(select(User).where(func.lower(User.email) == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.warning("Failed login attempt")
        raise Unauthenticated("Incorrect email or password")

    if not user.is_active:
        raise Unauthorized("Inactive user")

    access_token = create_access_token(data={"sub": str(user.id)})
    refresh_token = create_refresh_token(data={"sub": str(user.id)})

    # Store tokens in Redis
    await redis_client.setex(
        access_token_key(user.id),
        settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        access_token
    )
    await redis_client.setex(
        refresh_token_key(user.id),
        settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        refresh_token
    )

    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer"
    }


@router.post("/refresh", response_model=Token)
async def refresh_token(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis),
):
    """Refresh access token using refresh token"""
    payload = verify_token(body.refresh_token, "refresh")
    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise Unauthenticated("Invalid token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise Unauthenticated("Invalid token")

    # Check if refresh token exists in Redis
    stored_refresh_token = await redis_client.get(refresh_token_key(user.id))
    if not stored_refresh_token or stored_refresh_token != body.refresh_token:
        raise Unauthenticated("Invalid refresh token")

    access_token = create_access_token(data={"sub": str(user.id)})
    await redis_client.setex(
        access_token_key(user.id),
        settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        access_token
    )

    return {
        "access_token": access_token,
        "refresh_token": body.refresh_token,
        "token_type": "bearer"
    }


@router.post("/logout")
async def logout(
    current_user: User = Depends(get_current_user),
    redis_client: redis.Redis = Depends(get_redis),
):
    """Logout user by removing tokens from Redis"""
    await redis_client.delete(access_token_key(current_user.id))
    await redis_client.delete(refresh_token_key(current_user.id))

    return {"message": "Successfully logged out"}
