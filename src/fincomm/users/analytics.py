"""Admin dashboard metrics about the member base."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, literal_column, select

from fincomm.content.ratings import round_half_up
from fincomm.database import store_errors
from fincomm.db.models import BlogPostComment, User, VideoComment

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import ColumnElement

REGISTRATION_MONTHS = 6
TOP_JOB_TITLES = 5
TOP_COMPANIES = 10
MOST_ACTIVE = 10


def months_ago(now: datetime, months: int) -> datetime:
    """First instant of the calendar month `months` before `now`'s month."""
    index = now.year * 12 + (now.month - 1) - months
    return now.replace(year=index // 12, month=index % 12 + 1, day=1, hour=0, minute=0, second=0, microsecond=0)


def _month_bucket(db: AsyncSession) -> ColumnElement[str]:
    if db.bind.dialect.name == "sqlite":
        return func.strftime("%Y-%m", User.created_at)
    return func.to_char(User.created_at, "YYYY-MM")


async def get_user_analytics(db: AsyncSession, now: datetime | None = None) -> dict[str, Any]:
    """Member counts, profile completion, registrations and activity leaders.

    Soft-deleted users are excluded from every figure.
    """
    now = now or datetime.now(timezone.utc)
    active = User.deleted_at.is_(None)

    with store_errors("user analytics"):
        totals = (
            await db.execute(
                select(func.count(User.id), func.count(User.id).filter(User.profile_completed.is_(True))).where(active)
            )
        ).one()
        total_users, completed = totals[0] or 0, totals[1] or 0

        month = _month_bucket(db).label("month")
        registrations = await db.execute(
            select(month, func.count(User.id))
            .where(active, User.created_at >= months_ago(now, REGISTRATION_MONTHS - 1))
            .group_by(literal_column("month"))
            .order_by(literal_column("month"))
        )

        job_count = func.count(User.id)
        job_titles = await db.execute(
            select(User.job_title, job_count)
            .where(active, User.job_title.is_not(None), User.job_title != "")
            .group_by(User.job_title)
            .order_by(job_count.desc(), User.job_title)
            .limit(TOP_JOB_TITLES)
        )

        company_count = func.count(User.id)
        companies = await db.execute(
            select(User.company, company_count)
            .where(active, User.company.is_not(None), User.company != "")
            .group_by(User.company)
            .order_by(company_count.desc(), User.company)
            .limit(TOP_COMPANIES)
        )

        blog_comments = (
            select(func.count(BlogPostComment.id)).where(BlogPostComment.user_id == User.id).scalar_subquery()
        )
        video_comments = select(func.count(VideoComment.id)).where(VideoComment.user_id == User.id).scalar_subquery()
        activity = (func.coalesce(blog_comments, 0) + func.coalesce(video_comments, 0)).label("activity_count")
        most_active = await db.execute(
            select(User.id, User.name, User.email, activity)
            .where(active)
            .order_by(activity.desc(), User.id)
            .limit(MOST_ACTIVE)
        )

    return {
        "total_users": total_users,
        "profile_completion_rate": int(round_half_up(completed * 100 / total_users, 0)) if total_users else 0,
        "registrations_by_month": {m: count for m, count in registrations.all()},
        "top_job_titles": [{"title": title, "count": count} for title, count in job_titles.all()],
        "top_companies": [{"company": company, "count": count} for company, count in companies.all()],
        "most_active_users": [
            {"id": row.id, "name": row.name or "Unknown", "email": row.email or "", "activity_count": row.activity_count}
            for row in most_active.all()
        ],
    }
