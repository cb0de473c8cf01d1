"""Comment store: append-only comments on published posts and videos."""

from __future__ import annotations

import logging
from typing import Any, Literal

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm import errors
from fincomm.content.entities import EntityService
from fincomm.content.kinds import ContentKind
from fincomm.database import store_errors
from fincomm.db.models import User

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 1000

CommentOrder = Literal["asc", "desc"]


class CommentStore:
    def __init__(self, db: AsyncSession, kind: ContentKind) -> None:
        self.db = db
        self.kind = kind

    async def add(self, entity_id: int, user_id: int, text: str) -> int:
        """Store a trimmed comment and return its id.

        The published check happens at write time only; unpublishing an
        entity later leaves its comments in place.
        """
        body = (text or "").strip()
        if not body:
            raise errors.ValidationError("Comment cannot be empty")
        if len(body) > COMMENT_MAX_LENGTH:
            raise errors.ValidationError(f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters")

        await EntityService(self.db, self.kind).require_published(entity_id)

        comment = self.kind.comment(**{self.kind.foreign_key: entity_id}, user_id=user_id, comment=body)
        with store_errors(f"{self.kind.name} comment"):
            self.db.add(comment)
            await self.db.flush()
        return comment.id

    async def list(self, entity_id: int, order: CommentOrder = "desc") -> list[dict[str, Any]]:
        """Comments for an entity with author names.

        Authors that were soft-deleted still have their comments listed, with
        user_name set to None.
        """
        if order not in ("asc", "desc"):
            raise errors.ValidationError("order must be 'asc' or 'desc'")
        comment_cls: Any = self.kind.comment
        if order == "desc":
            ordering = (comment_cls.created_at.desc(), comment_cls.id.desc())
        else:
            ordering = (comment_cls.created_at.asc(), comment_cls.id.asc())

        with store_errors(f"{self.kind.name} comment listing"):
            result = await self.db.execute(
                select(
                    comment_cls.id,
                    comment_cls.comment,
                    comment_cls.created_at,
                    comment_cls.user_id,
                    User.name.label("user_name"),
                )
                .outerjoin(User, and_(User.id == comment_cls.user_id, User.deleted_at.is_(None)))
                .where(self.kind.comment_entity_id == entity_id)
                .order_by(*ordering)
            )
            return [dict(row._mapping) for row in result.all()]

    async def delete(self, comment_id: int) -> None:
        """Hard delete. Authorization is the caller's job; missing ids are a no-op."""
        with store_errors(f"{self.kind.name} comment delete"):
            result = await self.db.execute(delete(self.kind.comment).where(self.kind.comment.id == comment_id))
        if not result.rowcount:
            logger.info("%s comment %s already gone", self.kind.name, comment_id)
