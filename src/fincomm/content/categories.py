"""Category administration for one content kind."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm import errors
from fincomm.content.kinds import ContentKind, reject_null_required
from fincomm.database import store_errors

logger = logging.getLogger(__name__)

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CategoryService:
    def __init__(self, db: AsyncSession, kind: ContentKind) -> None:
        self.db = db
        self.kind = kind

    async def list_categories(self) -> list[dict[str, Any]]:
        """All categories with the number of *published* entities in each.

        An entity counts once per category it is filed under, primary or linked.
        """
        category: Any = self.kind.category
        entity: Any = self.kind.entity
        members = self.kind.memberships()
        with store_errors(f"{self.kind.name} categories"):
            result = await self.db.execute(
                select(category, func.count(entity.id))
                .outerjoin(members, members.c.category_id == category.id)
                .outerjoin(entity, and_(entity.id == members.c.entity_id, entity.published.is_(True)))
                .group_by(category.id)
                .order_by(category.name_pt, category.id)
            )
            rows = result.all()
        return [
            {
                "id": cat.id,
                "name_pt": cat.name_pt,
                "name_en": cat.name_en,
                "slug": cat.slug,
                "entity_count": count,
            }
            for cat, count in rows
        ]

    async def get_by_slug(self, slug: str) -> Any | None:
        category: Any = self.kind.category
        with store_errors(f"{self.kind.name} category lookup"):
            result = await self.db.execute(select(category).where(category.slug == slug))
            return result.scalar_one_or_none()

    async def create(self, name_pt: str, name_en: str, slug: str) -> Any:
        if await self.get_by_slug(slug) is not None:
            raise errors.ConflictError("Slug already exists")
        category = self.kind.category(name_pt=name_pt, name_en=name_en, slug=slug)
        self.db.add(category)
        await self._flush()
        logger.info("%s category %r created", self.kind.name, slug)
        return category

    async def update(self, category_id: int, data: dict[str, Any]) -> Any:
        category = await self._get(category_id)
        reject_null_required(self.kind.category, data)
        if data.get("slug"):
            existing = await self.get_by_slug(data["slug"])
            if existing is not None and existing.id != category_id:
                raise errors.ConflictError("Slug already exists")
        for field, value in data.items():
            setattr(category, field, value)
        await self._flush()
        return category

    async def count_entities(self, category_id: int) -> int:
        """Entities filed under the category, primary or linked, drafts included."""
        entity: Any = self.kind.entity
        with store_errors(f"{self.kind.name} category usage"):
            result = await self.db.execute(
                select(func.count(entity.id)).where(self.kind.in_category(category_id))
            )
            return result.scalar() or 0

    async def delete(self, category_id: int) -> None:
        category = await self._get(category_id)
        in_use = await self.count_entities(category_id)
        if in_use > 0:
            raise errors.ConflictError(
                f"Cannot delete a category with {in_use} associated item(s); move or remove them first"
            )
        with store_errors(f"{self.kind.name} category delete"):
            await self.db.delete(category)
            await self.db.flush()

    async def _get(self, category_id: int) -> Any:
        with store_errors(f"{self.kind.name} category lookup"):
            category = await self.db.get(self.kind.category, category_id)
        if category is None:
            raise errors.NotFoundError("Category not found")
        return category

    async def _flush(self) -> None:
        try:
            with store_errors(f"{self.kind.name} category write"):
                await self.db.flush()
        except IntegrityError as exc:
            raise errors.ConflictError("Slug already exists") from exc
