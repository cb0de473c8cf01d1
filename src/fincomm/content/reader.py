"""Paginated reads of published content with batch-loaded rating summaries.

A page costs three queries regardless of its size: a count, the page rows,
and one grouped rating query for all ids on the page (instead of one rating
query per row).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm import errors
from fincomm.content.entities import EntityService
from fincomm.content.kinds import ContentKind, entity_to_dict
from fincomm.content.ratings import RatingStore
from fincomm.database import store_errors

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


def page_offset(page: int, limit: int) -> int:
    """Row offset of a 1-indexed page."""
    return (page - 1) * limit


class ContentReader:
    def __init__(self, db: AsyncSession, kind: ContentKind) -> None:
        self.db = db
        self.kind = kind
        self.ratings = RatingStore(db, kind)

    async def get_page(
        self,
        category_id: int | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> dict[str, Any]:
        """One page of published entities, newest first, each with its rating summary.

        A category filter matches the primary category and, for blog posts,
        the linked ones.

        Returns:
            {"items": [...], "total": n} where total counts every row matching
            the filter, not just this page.

        Raises:
            ValidationError: page < 1 or limit outside 1..50.
            UnavailableError: the store could not be reached.
        """
        if page < 1:
            raise errors.ValidationError("page must be >= 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise errors.ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        entity_cls: Any = self.kind.entity
        conditions = [entity_cls.published.is_(True)]
        if category_id is not None:
            conditions.append(self.kind.in_category(category_id))

        with store_errors(f"{self.kind.name} page"):
            count_result = await self.db.execute(select(func.count(entity_cls.id)).where(*conditions))
            total = count_result.scalar() or 0

            rows_result = await self.db.execute(
                select(entity_cls)
                .where(*conditions)
                .order_by(*self.kind.recency_order())
                .limit(limit)
                .offset(page_offset(page, limit))
            )
            entities = list(rows_result.scalars().all())

        if not entities:
            return {"items": [], "total": total}

        summaries = await self.ratings.get_aggregates(entity.id for entity in entities)
        return {
            "items": [self._merge(entity, summaries[entity.id]) for entity in entities],
            "total": total,
        }

    async def get_item(self, entity_id: int) -> dict[str, Any]:
        """A single published entity with its rating summary."""
        entity = await self._published_or_missing(entity_id)
        return self._merge(entity, await self.ratings.get_aggregate(entity.id))

    async def get_item_by_slug(self, slug: str) -> dict[str, Any]:
        entity = await EntityService(self.db, self.kind).get_published_by_slug(slug)
        return self._merge(entity, await self.ratings.get_aggregate(entity.id))

    async def get_all(self) -> list[dict[str, Any]]:
        """Every entity, drafts included, with rating summaries (admin listing)."""
        entities = await EntityService(self.db, self.kind).list_all()
        summaries = await self.ratings.get_aggregates(entity.id for entity in entities)
        return [self._merge(entity, summaries[entity.id]) for entity in entities]

    async def get_item_categories(self, entity_id: int) -> list[Any]:
        """Categories of a published entity."""
        await self._published_or_missing(entity_id)
        return await EntityService(self.db, self.kind).get_categories(entity_id)

    async def _published_or_missing(self, entity_id: int) -> Any:
        try:
            return await EntityService(self.db, self.kind).require_published(entity_id)
        except errors.StateError:
            # drafts are invisible to readers
            raise errors.NotFoundError(f"{self.kind.label} not found") from None

    @staticmethod
    def _merge(entity: Any, summary: dict[str, Any]) -> dict[str, Any]:
        item = entity_to_dict(entity)
        item["average_rating"] = summary["average"]
        item["rating_count"] = summary["count"]
        return item
