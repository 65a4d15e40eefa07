import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import redis.asyncio as redis
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.errors import Unauthenticated, Unauthorized
from app.core.redis_client import get_redis
from app.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def _create_token(data: dict, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": token_type, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token."""
    return _create_token(
        data,
        "access",
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(data: dict) -> str:
    """Create a signed JWT refresh token."""
    return _create_token(data, "refresh", timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def verify_token(token: str, token_type: str = "access") -> dict:
    """Decode a JWT and check its type. Raises Unauthenticated if invalid."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise Unauthenticated("Could not validate credentials")

    if payload.get("type") != token_type or payload.get("sub") is None:
        raise Unauthenticated("Could not validate credentials")
    return payload


def access_token_key(user_id) -> str:
    return f"access_token:{user_id}"


def refresh_token_key(user_id) -> str:
    return f"refresh_token:{user_id}"


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis),
) -> User:
    """Resolve the bearer token to an account (currentIdentity)."""
    if not token:
        raise Unauthenticated()

    payload = verify_token(token, "access")
    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise Unauthenticated("Could not validate credentials")

    # Logout deletes the stored token, which revokes it
    stored_token = await redis_client.get(access_token_key(user_id))
    if not stored_token or stored_token != token:
        raise Unauthenticated("Session expired or revoked")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise Unauthenticated("Could not validate credentials")
    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise Unauthorized("Inactive user")
    return current_user
