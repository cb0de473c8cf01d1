"""User lookup, profile and admin management."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select

from fincomm import errors
from fincomm.database import store_errors
from fincomm.db.models import USER_ROLES, User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

ADMIN_EDITABLE_FIELDS = frozenset({"name", "email", "job_title", "company", "linkedin", "role"})


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Active (not soft-deleted) user by id."""
    with store_errors("user lookup"):
        result = await db.execute(select(User).where(User.id == user_id, User.deleted_at.is_(None)))
        return result.scalar_one_or_none()


async def update_profile(
    db: AsyncSession,
    user: User,
    job_title: str,
    company: str | None = None,
    linkedin: str | None = None,
) -> User:
    """
    Fill in the professional profile and mark it complete.

    Raises:
        ValidationError: If job_title is blank.
    """
    job_title = job_title.strip()
    if not job_title:
        raise errors.ValidationError("Job title is required")

    first_completion = not user.profile_completed
    user.job_title = job_title
    user.company = company.strip() if company and company.strip() else None
    user.linkedin = linkedin.strip() if linkedin and linkedin.strip() else None
    user.profile_completed = True
    with store_errors("profile update"):
        await db.flush()

    if first_completion:
        logger.info("profile_completed", user_id=user.id)
    return user


async def list_users(db: AsyncSession) -> list[User]:
    """All active users, newest first."""
    with store_errors("user listing"):
        result = await db.execute(
            select(User).where(User.deleted_at.is_(None)).order_by(User.created_at.desc(), User.id.desc())
        )
        return list(result.scalars().all())


async def admin_update_user(db: AsyncSession, user_id: int, data: dict[str, Any]) -> User:
    """
    Update an active user's account fields.

    Raises:
        NotFoundError: No active user with this id.
        ValidationError: Unknown role or field.
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise errors.NotFoundError("User not found")

    unknown = set(data) - ADMIN_EDITABLE_FIELDS
    if unknown:
        raise errors.ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    if "role" in data and data["role"] not in USER_ROLES:
        raise errors.ValidationError(f"Role must be one of: {', '.join(USER_ROLES)}")

    for field, value in data.items():
        setattr(user, field, value)
    with store_errors("user update"):
        await db.flush()
    logger.info("user_updated", user_id=user_id, fields=sorted(data))
    return user


async def soft_delete_user(db: AsyncSession, user_id: int) -> None:
    """Stamp deleted_at; the row and its content stay in place."""
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise errors.NotFoundError("User not found")
    user.deleted_at = datetime.now(timezone.utc)
    with store_errors("user delete"):
        await db.flush()
    logger.info("user_soft_deleted", user_id=user_id)
