"""Event calendar service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm import errors
from fincomm.database import store_errors
from fincomm.db.models import Event

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 10

_REQUIRED_FIELDS = ("title_pt", "title_en", "event_type", "event_date")


class EventService:
    """Public calendar reads plus admin maintenance. Callers commit."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def upcoming(self, now: datetime | None = None) -> list[Event]:
        """The next events from now on, soonest first."""
        now = now or datetime.now(timezone.utc)
        with store_errors("upcoming events"):
            result = await self.db.execute(
                select(Event)
                .where(Event.event_date >= now)
                .order_by(Event.event_date.asc(), Event.id.asc())
                .limit(UPCOMING_LIMIT)
            )
            return list(result.scalars().all())

    async def list_all(self) -> list[Event]:
        with store_errors("event listing"):
            result = await self.db.execute(select(Event).order_by(Event.event_date.desc(), Event.id.desc()))
            return list(result.scalars().all())

    async def get(self, event_id: int) -> Event:
        with store_errors("event lookup"):
            event = await self.db.get(Event, event_id)
        if event is None:
            raise errors.NotFoundError("Event not found")
        return event

    async def create(self, data: dict[str, Any], created_by: int) -> Event:
        event = Event(**data, created_by=created_by)
        self.db.add(event)
        with store_errors("event create"):
            await self.db.flush()
        logger.info("Event %s created by user %s", event.id, created_by)
        return event

    async def update(self, event_id: int, data: dict[str, Any]) -> Event:
        event = await self.get(event_id)
        for field in _REQUIRED_FIELDS:
            if field in data and data[field] is None:
                raise errors.ValidationError(f"{field} cannot be null")
        for field, value in data.items():
            setattr(event, field, value)
        with store_errors("event update"):
            await self.db.flush()
        return event

    async def delete(self, event_id: int) -> None:
        event = await self.get(event_id)
        with store_errors("event delete"):
            await self.db.delete(event)
            await self.db.flush()
        logger.info("Event %s deleted", event_id)
