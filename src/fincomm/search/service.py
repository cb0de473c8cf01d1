"""Site-wide search across events, published posts and published videos."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import or_, select

from fincomm import errors
from fincomm.content.kinds import entity_to_dict
from fincomm.database import store_errors
from fincomm.db.models import AcademyVideo, BlogPost, Event

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

Language = Literal["pt", "en"]

RESULTS_PER_GROUP = 5

# (model, title field, body field, published-only)
_GROUPS = {
    "events": (Event, "title", "description", False),
    "blog_posts": (BlogPost, "title", "content", True),
    "videos": (AcademyVideo, "title", "description", True),
}


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def search(db: AsyncSession, query: str, language: Language = "pt") -> dict[str, list[dict[str, Any]]]:
    """Case-insensitive substring match on the title and body of the chosen language.

    Returns at most five hits per group; drafts never appear.
    """
    term = query.strip()
    if not term:
        raise errors.ValidationError("Search query cannot be empty")
    if language not in ("pt", "en"):
        raise errors.ValidationError("language must be 'pt' or 'en'")

    pattern = _like_pattern(term)
    results: dict[str, list[dict[str, Any]]] = {}
    with store_errors("search"):
        for group, (model, title, body, published_only) in _GROUPS.items():
            title_col = getattr(model, f"{title}_{language}")
            body_col = getattr(model, f"{body}_{language}")
            stmt = select(model).where(
                or_(title_col.ilike(pattern, escape="\\"), body_col.ilike(pattern, escape="\\"))
            )
            if published_only:
                stmt = stmt.where(model.published.is_(True))
            rows = await db.execute(stmt.order_by(model.id.desc()).limit(RESULTS_PER_GROUP))
            results[group] = [entity_to_dict(row) for row in rows.scalars().all()]
    return results
