"""Admin dashboard metrics for one content kind."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm.content.kinds import ContentKind
from fincomm.content.ratings import round_half_up
from fincomm.database import store_errors


async def get_content_analytics(db: AsyncSession, kind: ContentKind) -> dict[str, Any]:
    """Totals, per-category counts, rating extremes and engagement for a kind.

    A post filed under several categories counts once in each; entities with
    no category at all are grouped under None.

    Most/least rated only consider entities with at least one rating;
    engagement rate is (comments + ratings) per entity.
    """
    entity: Any = kind.entity
    category: Any = kind.category
    rating: Any = kind.rating
    comment: Any = kind.comment
    rating_fk = kind.rating_entity_id
    comment_fk = kind.comment_entity_id

    with store_errors(f"{kind.name} analytics"):
        total = (await db.execute(select(func.count(entity.id)))).scalar() or 0

        members = kind.memberships()
        member_count = func.count(members.c.entity_id)
        by_category = await db.execute(
            select(category.name_pt, member_count)
            .select_from(members)
            .join(category, category.id == members.c.category_id)
            .group_by(category.id, category.name_pt)
            .order_by(member_count.desc(), category.name_pt)
        )
        uncategorized = (
            await db.execute(select(func.count(entity.id)).where(entity.id.not_in(select(members.c.entity_id))))
        ).scalar() or 0

        average = (await db.execute(select(func.avg(rating.rating)))).scalar()
        total_ratings = (await db.execute(select(func.count(rating.id)))).scalar() or 0
        total_comments = (await db.execute(select(func.count(comment.id)))).scalar() or 0

        avg_expr = func.avg(rating.rating)
        rated = (
            select(entity.id, entity.title_pt, avg_expr.label("avg_rating"))
            .join(rating, rating_fk == entity.id)
            .group_by(entity.id, entity.title_pt)
        )
        most_rated = (await db.execute(rated.order_by(avg_expr.desc(), entity.id).limit(1))).first()
        least_rated = (await db.execute(rated.order_by(avg_expr.asc(), entity.id).limit(1))).first()

        comment_count = func.count(comment.id)
        most_commented = (
            await db.execute(
                select(entity.id, entity.title_pt, comment_count.label("comment_count"))
                .outerjoin(comment, comment_fk == entity.id)
                .group_by(entity.id, entity.title_pt)
                .order_by(comment_count.desc(), entity.id)
                .limit(1)
            )
        ).first()

    return {
        "total": total,
        "by_category": [{"category": name, "count": count} for name, count in by_category.all()]
        + ([{"category": None, "count": uncategorized}] if uncategorized else []),
        "average_rating": round_half_up(average) if average is not None else 0.0,
        "most_rated": _rated(most_rated),
        "least_rated": _rated(least_rated),
        "total_comments": total_comments,
        "average_comments_per_item": round_half_up(total_comments / total) if total else 0.0,
        "most_commented": (
            {"id": most_commented.id, "title": most_commented.title_pt, "comment_count": most_commented.comment_count}
            if most_commented is not None
            else None
        ),
        "engagement_rate": round_half_up((total_comments + total_ratings) / total) if total else 0.0,
    }


def _rated(row: Any) -> dict[str, Any] | None:
    if row is None:
        return None
    return {"id": row.id, "title": row.title_pt, "rating": round_half_up(row.avg_rating)}
