"""Content kind descriptors.

Blog posts and academy videos share the rating, comment, pagination and
administration logic. A ContentKind bundles the models of one kind plus the
few behavioural differences between them. Blog posts can sit in several
categories through a link table; videos have just their primary category.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_, select, union
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql.selectable import Subquery

from fincomm import errors
from fincomm.db.base import Base
from fincomm.db.models import (
    AcademyCategory,
    AcademyVideo,
    BlogCategory,
    BlogPost,
    BlogPostCategory,
    BlogPostComment,
    BlogPostRating,
    VideoComment,
    VideoRating,
)


@dataclass(frozen=True)
class ContentKind:
    name: str
    collection: str
    label: str
    entity: type[Base]
    category: type[Base]
    rating: type[Base]
    comment: type[Base]
    foreign_key: str
    members_only: bool = False
    slug_field: str | None = None
    publish_field: str | None = None
    link: type[Base] | None = None

    @property
    def rating_entity_id(self) -> InstrumentedAttribute[int]:
        return getattr(self.rating, self.foreign_key)

    @property
    def comment_entity_id(self) -> InstrumentedAttribute[int]:
        return getattr(self.comment, self.foreign_key)

    def recency_order(self) -> tuple[Any, ...]:
        """ORDER BY clauses for "newest first", with id as a stable tie-break."""
        entity: Any = self.entity
        if self.publish_field:
            newest = func.coalesce(getattr(entity, self.publish_field), entity.created_at)
        else:
            newest = entity.created_at
        return newest.desc(), entity.id.desc()

    @property
    def link_entity_id(self) -> InstrumentedAttribute[int]:
        return getattr(self.link, self.foreign_key)

    def in_category(self, category_id: int) -> Any:
        """WHERE clause for entities filed under a category, primary or linked."""
        entity: Any = self.entity
        primary = entity.category_id == category_id
        if self.link is None:
            return primary
        link: Any = self.link
        linked = select(self.link_entity_id).where(link.category_id == category_id)
        return or_(primary, entity.id.in_(linked))

    def memberships(self) -> Subquery:
        """Distinct (entity_id, category_id) pairs across primary and linked categories."""
        entity: Any = self.entity
        primary = select(entity.id.label("entity_id"), entity.category_id.label("category_id")).where(
            entity.category_id.is_not(None)
        )
        if self.link is None:
            return primary.subquery("memberships")
        link: Any = self.link
        linked = select(self.link_entity_id.label("entity_id"), link.category_id.label("category_id"))
        return union(primary, linked).subquery("memberships")


BLOG = ContentKind(
    name="blog",
    collection="posts",
    label="Blog post",
    entity=BlogPost,
    category=BlogCategory,
    rating=BlogPostRating,
    comment=BlogPostComment,
    foreign_key="post_id",
    slug_field="slug",
    publish_field="published_at",
    link=BlogPostCategory,
)

ACADEMY = ContentKind(
    name="academy",
    collection="videos",
    label="Video",
    entity=AcademyVideo,
    category=AcademyCategory,
    rating=VideoRating,
    comment=VideoComment,
    foreign_key="video_id",
    members_only=True,
)

ALL_KINDS = (BLOG, ACADEMY)


def entity_to_dict(obj: Base) -> dict[str, Any]:
    """Column values of an ORM row keyed by attribute name."""
    return {column.key: getattr(obj, column.key) for column in obj.__table__.columns}


def reject_null_required(model: type[Base], data: dict[str, Any]) -> None:
    """Refuse a partial update that would clear a NOT NULL column."""
    for column in model.__table__.columns:
        if not column.nullable and column.key in data and data[column.key] is None:
            raise errors.ValidationError(f"{column.key} cannot be null")
