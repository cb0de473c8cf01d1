"""Entity administration and lookup for posts and videos."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm import errors
from fincomm.content.kinds import ContentKind, reject_null_required
from fincomm.database import store_errors

logger = logging.getLogger(__name__)


class EntityService:
    """CRUD over one content kind. Callers own the transaction (commit/rollback)."""

    def __init__(self, db: AsyncSession, kind: ContentKind) -> None:
        self.db = db
        self.kind = kind

    # --- Lookup ---

    async def get(self, entity_id: int) -> Any | None:
        with store_errors(f"{self.kind.name} lookup"):
            return await self.db.get(self.kind.entity, entity_id)

    async def require_published(self, entity_id: int) -> Any:
        """Return the entity if it exists and is published.

        Raises:
            NotFoundError: No entity with this id.
            StateError: The entity exists but is a draft.
        """
        entity = await self.get(entity_id)
        if entity is None:
            raise errors.NotFoundError(f"{self.kind.label} not found")
        if not entity.published:
            raise errors.StateError(f"{self.kind.label} is not published")
        return entity

    async def get_published_by_slug(self, slug: str) -> Any:
        if self.kind.slug_field is None:
            raise errors.NotFoundError(f"{self.kind.label} has no slug")
        entity_cls: Any = self.kind.entity
        with store_errors(f"{self.kind.name} slug lookup"):
            result = await self.db.execute(
                select(entity_cls).where(
                    getattr(entity_cls, self.kind.slug_field) == slug,
                    entity_cls.published.is_(True),
                )
            )
            entity = result.scalar_one_or_none()
        if entity is None:
            raise errors.NotFoundError(f"{self.kind.label} not found")
        return entity

    async def list_all(self) -> list[Any]:
        """Every entity including drafts, newest first (admin listing)."""
        entity_cls: Any = self.kind.entity
        with store_errors(f"{self.kind.name} listing"):
            result = await self.db.execute(
                select(entity_cls).order_by(entity_cls.created_at.desc(), entity_cls.id.desc())
            )
            return list(result.scalars().all())

    # --- Mutations (admin) ---

    async def create(self, data: dict[str, Any], created_by: int) -> Any:
        await self._check_category(data.get("category_id"))
        await self._check_slug(data.get(self.kind.slug_field) if self.kind.slug_field else None)
        self._stamp_publication(data, was_published=False)

        entity = self.kind.entity(**data, created_by=created_by)
        self.db.add(entity)
        await self._flush_unique()
        logger.info("%s %s created by user %s", self.kind.label, entity.id, created_by)
        return entity

    async def update(self, entity_id: int, data: dict[str, Any]) -> Any:
        entity = await self.get(entity_id)
        if entity is None:
            raise errors.NotFoundError(f"{self.kind.label} not found")
        reject_null_required(self.kind.entity, data)

        if "category_id" in data:
            await self._check_category(data["category_id"])
        if self.kind.slug_field and data.get(self.kind.slug_field):
            await self._check_slug(data[self.kind.slug_field], exclude_id=entity_id)
        self._stamp_publication(data, was_published=entity.published, current=entity)

        for field, value in data.items():
            setattr(entity, field, value)
        await self._flush_unique()
        return entity

    async def delete(self, entity_id: int) -> dict[str, int]:
        """Hard-delete an entity together with its ratings, comments and category links.

        Every delete runs in the caller's transaction, so either all dependent
        rows go or none does.
        """
        entity = await self.get(entity_id)
        if entity is None:
            raise errors.NotFoundError(f"{self.kind.label} not found")

        with store_errors(f"{self.kind.name} delete"):
            ratings = await self.db.execute(delete(self.kind.rating).where(self.kind.rating_entity_id == entity_id))
            comments = await self.db.execute(
                delete(self.kind.comment).where(self.kind.comment_entity_id == entity_id)
            )
            if self.kind.link is not None:
                await self.db.execute(delete(self.kind.link).where(self.kind.link_entity_id == entity_id))
            await self.db.delete(entity)
            await self.db.flush()

        removed = {"ratings": ratings.rowcount or 0, "comments": comments.rowcount or 0}
        logger.info("%s %s deleted (%s)", self.kind.label, entity_id, removed)
        return removed

    # --- Categories ---

    async def get_categories(self, entity_id: int) -> list[Any]:
        """Primary and linked categories of an entity, by Portuguese name."""
        category: Any = self.kind.category
        members = self.kind.memberships()
        with store_errors(f"{self.kind.name} category lookup"):
            result = await self.db.execute(
                select(category)
                .join(members, members.c.category_id == category.id)
                .where(members.c.entity_id == entity_id)
                .order_by(category.name_pt, category.id)
            )
            return list(result.scalars().all())

    async def set_categories(self, entity_id: int, category_ids: Iterable[int]) -> list[Any]:
        """Replace the linked categories of an entity.

        The old links are removed and the new ones inserted in the caller's
        transaction, so a failure part way leaves the previous set intact.
        The primary category_id is left alone.

        Raises:
            ValidationError: The kind has no category links.
            NotFoundError: Unknown entity or category.
        """
        if self.kind.link is None:
            raise errors.ValidationError(f"{self.kind.label} has a single category; update category_id instead")
        wanted = list(dict.fromkeys(category_ids))
        entity = await self.get(entity_id)
        if entity is None:
            raise errors.NotFoundError(f"{self.kind.label} not found")

        if wanted:
            category: Any = self.kind.category
            with store_errors(f"{self.kind.name} category lookup"):
                found = await self.db.execute(select(category.id).where(category.id.in_(wanted)))
                missing = set(wanted) - set(found.scalars().all())
            if missing:
                raise errors.NotFoundError(f"Category not found: {', '.join(map(str, sorted(missing)))}")

        link = self.kind.link
        with store_errors(f"{self.kind.name} category links"):
            await self.db.execute(delete(link).where(self.kind.link_entity_id == entity_id))
            self.db.add_all([link(**{self.kind.foreign_key: entity_id}, category_id=cid) for cid in wanted])
            await self.db.flush()
        logger.info("%s %s filed under categories %s", self.kind.label, entity_id, wanted)
        return await self.get_categories(entity_id)

    # --- Helpers ---

    async def _check_category(self, category_id: int | None) -> None:
        if category_id is None:
            return
        with store_errors(f"{self.kind.name} category lookup"):
            category = await self.db.get(self.kind.category, category_id)
        if category is None:
            raise errors.NotFoundError("Category not found")

    async def _check_slug(self, slug: str | None, exclude_id: int | None = None) -> None:
        if not slug or self.kind.slug_field is None:
            return
        entity_cls: Any = self.kind.entity
        query = select(entity_cls.id).where(getattr(entity_cls, self.kind.slug_field) == slug)
        if exclude_id is not None:
            query = query.where(entity_cls.id != exclude_id)
        with store_errors(f"{self.kind.name} slug check"):
            existing = await self.db.execute(query.limit(1))
            taken = existing.scalar_one_or_none() is not None
        if taken:
            raise errors.ConflictError("Slug already exists")

    def _stamp_publication(self, data: dict[str, Any], was_published: bool, current: Any = None) -> None:
        """Set the publish timestamp the first time an entity goes live."""
        field = self.kind.publish_field
        if field is None or not data.get("published") or was_published:
            return
        if data.get(field) is None and (current is None or getattr(current, field) is None):
            data[field] = datetime.now(timezone.utc)

    async def _flush_unique(self) -> None:
        try:
            with store_errors(f"{self.kind.name} write"):
                await self.db.flush()
        except IntegrityError as exc:
            raise errors.ConflictError(f"{self.kind.label} violates a uniqueness constraint") from exc
