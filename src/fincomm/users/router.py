"""User endpoints: own profile plus admin management and analytics."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm.auth.dependencies import get_current_user, require_admin
from fincomm.database import get_session
from fincomm.db.models import User
from fincomm.users.analytics import get_user_analytics
from fincomm.users.schemas import (
    AdminUserUpdateRequest,
    ProfileUpdateRequest,
    UserAnalyticsResponse,
    UserResponse,
)
from fincomm.users.service import admin_update_user, list_users, soft_delete_user, update_profile

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


# ---------------------------------------------------------------------------
# Own profile
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> User:
    """Get the current user's account."""
    return user


@router.put("/me/profile", response_model=UserResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Complete or edit the professional profile."""
    updated = await update_profile(db, user, job_title=body.job_title, company=body.company, linkedin=body.linkedin)
    await db.commit()
    return updated


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.get("", response_model=list[UserResponse])
async def list_all_users(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> list[User]:
    return await list_users(db)


@router.get("/analytics", response_model=UserAnalyticsResponse)
async def user_analytics(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> dict:
    return await get_user_analytics(db)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: AdminUserUpdateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> User:
    user = await admin_update_user(db, user_id, body.model_dump(exclude_unset=True))
    await db.commit()
    return user


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """Soft delete: the account disappears, its comments and ratings stay."""
    await soft_delete_user(db, user_id)
    await db.commit()
    return {"success": True}
