import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.errors import NotFound
from app.core.security import get_current_active_user
from app.models.user import User
from app.schemas.user import ProfileResponse, UserResponse
from app.services import store

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_active_user)):
    """Get current account information"""
    return current_user


@router.get("/me/profile", response_model=ProfileResponse)
async def get_current_user_profile(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the current account's profile"""
    profile = await store.get_profile(db, current_user.id)
    if not profile:
        raise NotFound("Profile not found")
    return profile


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_user(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a profile by ID"""
    profile = await store.get_profile(db, user_id)
    if not profile:
        raise NotFound("User not found")
    return profile
