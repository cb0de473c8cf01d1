"""Event calendar service and endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from fincomm import errors
from fincomm.db.models import Event
from fincomm.events.service import UPCOMING_LIMIT, EventService


@pytest.fixture
def make_event(db_session, admin):
    async def _make(event_date: datetime, **fields) -> Event:
        event = Event(
            title_pt=fields.pop("title_pt", "Encontro"),
            title_en=fields.pop("title_en", "Meetup"),
            event_date=event_date,
            created_by=admin.id,
            **fields,
        )
        db_session.add(event)
        await db_session.commit()
        return event

    return _make


class TestEventService:
    async def test_upcoming_excludes_past_and_sorts_ascending(self, db_session, make_event) -> None:
        now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
        await make_event(now - timedelta(days=1))
        later = await make_event(now + timedelta(days=10))
        sooner = await make_event(now + timedelta(days=2))

        upcoming = await EventService(db_session).upcoming(now=now)
        assert [e.id for e in upcoming] == [sooner.id, later.id]

    async def test_upcoming_is_capped(self, db_session, make_event) -> None:
        now = datetime(2026, 6, 1, tzinfo=timezone.utc)
        for day in range(UPCOMING_LIMIT + 3):
            await make_event(now + timedelta(days=day + 1))
        assert len(await EventService(db_session).upcoming(now=now)) == UPCOMING_LIMIT

    async def test_list_all_newest_first(self, db_session, make_event) -> None:
        now = datetime(2026, 6, 1, tzinfo=timezone.utc)
        past = await make_event(now - timedelta(days=30))
        future = await make_event(now + timedelta(days=30))
        assert [e.id for e in await EventService(db_session).list_all()] == [future.id, past.id]

    async def test_update_and_delete(self, db_session, make_event) -> None:
        event = await make_event(datetime(2026, 9, 1, tzinfo=timezone.utc))
        svc = EventService(db_session)
        updated = await svc.update(event.id, {"location": "São Paulo", "event_type": "conference"})
        await db_session.commit()
        assert updated.location == "São Paulo"

        await svc.delete(event.id)
        await db_session.commit()
        assert await svc.list_all() == []

    async def test_required_field_cannot_be_cleared(self, db_session, make_event) -> None:
        event = await make_event(datetime(2026, 9, 1, tzinfo=timezone.utc))
        with pytest.raises(errors.ValidationError):
            await EventService(db_session).update(event.id, {"title_pt": None})

    async def test_missing_event(self, db_session) -> None:
        svc = EventService(db_session)
        with pytest.raises(errors.NotFoundError):
            await svc.update(99, {"location": "x"})
        with pytest.raises(errors.NotFoundError):
            await svc.delete(99)


@pytest.mark.asyncio
class TestEventEndpoints:
    async def test_admin_creates_and_public_sees_it(self, client: AsyncClient, admin, auth_headers) -> None:
        when = datetime.now(timezone.utc) + timedelta(days=3)
        created = await client.post(
            "/api/v1/events",
            json={
                "title_pt": "Webinar Open Finance",
                "title_en": "Open Finance webinar",
                "event_type": "webinar",
                "event_date": when.isoformat(),
            },
            headers=auth_headers(admin),
        )
        assert created.status_code == 201

        upcoming = await client.get("/api/v1/events/upcoming")
        assert upcoming.status_code == 200
        assert [e["id"] for e in upcoming.json()] == [created.json()["id"]]

    async def test_unknown_event_type_rejected(self, client: AsyncClient, admin, auth_headers) -> None:
        response = await client.post(
            "/api/v1/events",
            json={"title_pt": "x", "title_en": "x", "event_type": "party", "event_date": "2026-12-01T10:00:00Z"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 422

    async def test_members_cannot_manage_events(self, client: AsyncClient, member, auth_headers) -> None:
        assert (await client.get("/api/v1/events", headers=auth_headers(member))).status_code == 403
        assert (await client.delete("/api/v1/events/1", headers=auth_headers(member))).status_code == 403

    async def test_delete_missing_is_404(self, client: AsyncClient, admin, auth_headers) -> None:
        response = await client.delete("/api/v1/events/12345", headers=auth_headers(admin))
        assert response.status_code == 404
