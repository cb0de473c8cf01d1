"""Event calendar endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm.auth.dependencies import require_admin
from fincomm.dependencies import soft_read
from fincomm.database import get_session
from fincomm.db.models import Event, User
from fincomm.events.schemas import EventCreateRequest, EventResponse, EventUpdateRequest
from fincomm.events.service import EventService

router = APIRouter(prefix="/api/v1/events", tags=["Events"])


@router.get("/upcoming", response_model=list[EventResponse])
async def upcoming_events(response: Response, db: AsyncSession = Depends(get_session)) -> list[Event]:
    """Next events on the calendar (public)."""
    return await soft_read(response, EventService(db).upcoming(), [])


@router.get("", response_model=list[EventResponse])
async def list_events(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> list[Event]:
    return await EventService(db).list_all()


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    body: EventCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Event:
    event = await EventService(db).create(body.model_dump(), created_by=admin.id)
    await db.commit()
    return event


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    body: EventUpdateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Event:
    event = await EventService(db).update(event_id, body.model_dump(exclude_unset=True))
    await db.commit()
    return event


@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> dict:
    await EventService(db).delete(event_id)
    await db.commit()
    return {"success": True}
