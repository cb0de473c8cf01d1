"""Rating store: one 1-5 star rating per (entity, user), aggregated on read.

Summaries are never persisted; every read recomputes average/count from the
raw rating rows, so they always agree with the current table contents.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm import errors
from fincomm.content.entities import EntityService
from fincomm.content.kinds import ContentKind
from fincomm.database import store_errors

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

_NATIVE_UPSERT = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def round_half_up(value: float | Decimal, places: int = 1) -> float:
    """Round like a person would (2.25 -> 2.3), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def summarize(total: int | None, count: int | None) -> dict[str, Any]:
    """Build a {average, count} summary from a rating sum and row count."""
    if not count:
        return {"average": 0.0, "count": 0}
    average = (Decimal(int(total or 0)) / Decimal(int(count))).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return {"average": float(average), "count": int(count)}


class RatingStore:
    def __init__(self, db: AsyncSession, kind: ContentKind) -> None:
        self.db = db
        self.kind = kind

    async def rate(self, entity_id: int, user_id: int, rating: int) -> None:
        """Create or replace the user's rating of an entity.

        Raises:
            ValidationError: rating outside 1..5.
            NotFoundError: entity does not exist.
            StateError: entity is unpublished.
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise errors.ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

        await EntityService(self.db, self.kind).require_published(entity_id)

        now = datetime.now(timezone.utc)
        with store_errors(f"{self.kind.name} rate"):
            insert_fn = _NATIVE_UPSERT.get(self.db.bind.dialect.name)
            if insert_fn is not None:
                await self._native_upsert(insert_fn, entity_id, user_id, rating, now)
            else:
                await self._savepoint_upsert(entity_id, user_id, rating, now)
        logger.debug("user %s rated %s %s: %s", user_id, self.kind.name, entity_id, rating)

    async def _native_upsert(self, insert_fn: Any, entity_id: int, user_id: int, rating: int, now: datetime) -> None:
        stmt = insert_fn(self.kind.rating).values(
            {
                self.kind.foreign_key: entity_id,
                "user_id": user_id,
                "rating": rating,
                "created_at": now,
                "updated_at": now,
            }
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.kind.foreign_key, "user_id"],
            set_={"rating": stmt.excluded.rating, "updated_at": stmt.excluded.updated_at},
        )
        await self.db.execute(stmt)

    async def _savepoint_upsert(self, entity_id: int, user_id: int, rating: int, now: datetime) -> None:
        """Insert; if the unique constraint fires, someone got there first, so update."""
        try:
            async with self.db.begin_nested():
                self.db.add(
                    self.kind.rating(
                        **{self.kind.foreign_key: entity_id},
                        user_id=user_id,
                        rating=rating,
                        created_at=now,
                        updated_at=now,
                    )
                )
        except IntegrityError:
            await self.db.execute(
                update(self.kind.rating)
                .where(self.kind.rating_entity_id == entity_id, self.kind.rating.user_id == user_id)
                .values(rating=rating, updated_at=now)
            )

    async def get_aggregate(self, entity_id: int) -> dict[str, Any]:
        """Average (one decimal) and count of all ratings for one entity."""
        return (await self.get_aggregates([entity_id]))[entity_id]

    async def get_aggregates(self, entity_ids: Iterable[int]) -> dict[int, dict[str, Any]]:
        """Summaries for many entities with a single grouped query.

        Ids without ratings map to {average: 0, count: 0}.
        """
        ids = list(dict.fromkeys(entity_ids))
        if not ids:
            return {}
        entity_col = self.kind.rating_entity_id
        with store_errors(f"{self.kind.name} rating aggregate"):
            result = await self.db.execute(
                select(entity_col, func.sum(self.kind.rating.rating), func.count(self.kind.rating.id))
                .where(entity_col.in_(ids))
                .group_by(entity_col)
            )
            totals = {row[0]: (row[1], row[2]) for row in result.all()}
        return {entity_id: summarize(*totals.get(entity_id, (0, 0))) for entity_id in ids}

    async def get_user_rating(self, entity_id: int, user_id: int) -> int | None:
        with store_errors(f"{self.kind.name} user rating"):
            result = await self.db.execute(
                select(self.kind.rating.rating).where(
                    self.kind.rating_entity_id == entity_id,
                    self.kind.rating.user_id == user_id,
                )
            )
            return result.scalar_one_or_none()
