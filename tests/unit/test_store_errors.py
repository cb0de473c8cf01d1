"""Store failures surface as UnavailableError, never as raw driver errors."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from fincomm import errors
from fincomm.content.categories import CategoryService
from fincomm.content.comments import CommentStore
from fincomm.content.entities import EntityService
from fincomm.content.kinds import ACADEMY, BLOG
from fincomm.content.ratings import RatingStore
from fincomm.content.reader import ContentReader
from fincomm.database import store_errors
from fincomm.db.models import User
from fincomm.events.service import EventService
from fincomm.users.service import update_profile


def _broken_session() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("connection refused")))
    session.get = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("connection refused")))
    session.flush = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("connection refused")))
    return session


class TestStoreErrors:
    def test_translates_operational_error(self):
        with pytest.raises(errors.UnavailableError, match="during page read"):
            with store_errors("page read"):
                raise OperationalError("SELECT 1", {}, Exception("server closed the connection"))

    def test_translates_os_error(self):
        with pytest.raises(errors.UnavailableError):
            with store_errors("page read"):
                raise ConnectionRefusedError("refused")

    def test_other_errors_pass_through(self):
        with pytest.raises(IntegrityError):
            with store_errors("page read"):
                raise IntegrityError("INSERT", {}, Exception("duplicate"))


class TestReadsOnBrokenStore:
    async def test_page(self):
        with pytest.raises(errors.UnavailableError):
            await ContentReader(_broken_session(), BLOG).get_page()

    async def test_aggregate(self):
        with pytest.raises(errors.UnavailableError):
            await RatingStore(_broken_session(), ACADEMY).get_aggregate(1)

    async def test_comments(self):
        with pytest.raises(errors.UnavailableError):
            await CommentStore(_broken_session(), BLOG).list(1)

    async def test_rate_checks_entity_first(self):
        with pytest.raises(errors.UnavailableError):
            await RatingStore(_broken_session(), BLOG).rate(1, 1, 5)

    async def test_invalid_input_reported_before_store_access(self):
        session = _broken_session()
        with pytest.raises(errors.ValidationError):
            await RatingStore(session, BLOG).rate(1, 1, 9)
        session.get.assert_not_called()


class TestWritesOnBrokenStore:
    async def test_category_create(self):
        with pytest.raises(errors.UnavailableError):
            await CategoryService(_broken_session(), BLOG).create("Pix", "Pix", "pix")

    async def test_category_update(self):
        with pytest.raises(errors.UnavailableError):
            await CategoryService(_broken_session(), BLOG).update(1, {"name_en": "Payments"})

    async def test_category_delete(self):
        with pytest.raises(errors.UnavailableError):
            await CategoryService(_broken_session(), ACADEMY).delete(1)

    async def test_entity_create_category_check(self):
        with pytest.raises(errors.UnavailableError):
            await EntityService(_broken_session(), ACADEMY).create(
                {"title_pt": "Aula", "title_en": "Lesson", "video_url": "https://v.example.com/1", "category_id": 3},
                created_by=1,
            )

    async def test_entity_create_flush(self):
        session = _broken_session()
        with pytest.raises(errors.UnavailableError):
            await EntityService(session, ACADEMY).create(
                {"title_pt": "Aula", "title_en": "Lesson", "video_url": "https://v.example.com/1"},
                created_by=1,
            )
        session.flush.assert_awaited_once()

    async def test_entity_slug_check(self):
        with pytest.raises(errors.UnavailableError):
            await EntityService(_broken_session(), BLOG).create(
                {"title_pt": "a", "title_en": "a", "content_pt": "a", "content_en": "a", "slug": "a"},
                created_by=1,
            )

    async def test_set_categories(self):
        with pytest.raises(errors.UnavailableError):
            await EntityService(_broken_session(), BLOG).set_categories(1, [2])

    async def test_event_create(self):
        with pytest.raises(errors.UnavailableError):
            await EventService(_broken_session()).create(
                {
                    "title_pt": "Encontro",
                    "title_en": "Meetup",
                    "event_date": datetime(2026, 11, 1, tzinfo=timezone.utc),
                },
                created_by=1,
            )

    async def test_profile_update(self):
        user = User(open_id="open-x", name="X", profile_completed=False)
        with pytest.raises(errors.UnavailableError):
            await update_profile(_broken_session(), user, job_title="CTO")


def _racing_session() -> MagicMock:
    """A session whose flush hits a unique constraint another writer just filled."""
    session = MagicMock()
    lookup = MagicMock()
    lookup.scalar_one_or_none.return_value = None
    session.execute = AsyncMock(return_value=lookup)
    session.flush = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("duplicate key")))
    session.rollback = AsyncMock()
    return session


class TestConflictLeavesTransactionToCaller:
    async def test_category_create(self):
        session = _racing_session()
        with pytest.raises(errors.ConflictError):
            await CategoryService(session, BLOG).create("Pix", "Pix", "pix")
        session.rollback.assert_not_called()

    async def test_entity_create(self):
        session = _racing_session()
        with pytest.raises(errors.ConflictError):
            await EntityService(session, ACADEMY).create(
                {"title_pt": "Aula", "title_en": "Lesson", "video_url": "https://v.example.com/1"},
                created_by=1,
            )
        session.rollback.assert_not_called()
