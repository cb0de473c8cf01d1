"""Shared test fixtures.

Each test gets its own SQLite database file, created from the ORM metadata,
so tests never see each other's rows.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timezone
from itertools import count
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm.auth.jwt import create_access_token
from fincomm.config import get_settings
from fincomm.database import close_db, create_tables, get_session, init_db
from fincomm.db.models import (
    AcademyCategory,
    AcademyVideo,
    BlogCategory,
    BlogPost,
    User,
)
from fincomm.main import create_app

TEST_JWT_SECRET = "test-secret-for-fincomm-suite-0123456789"

_sequence = count(1)


@pytest_asyncio.fixture
async def database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[str, None]:
    """Fresh SQLite database with every table created."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'fincomm.db'}"
    monkeypatch.setenv("FINCOMM_DATABASE_URL", url)
    monkeypatch.setenv("FINCOMM_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("FINCOMM_LOG_FORMAT", "console")
    get_settings.cache_clear()

    await init_db(url)
    await create_tables()
    yield url
    await close_db()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def client(database: str) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against a fresh app bound to the test database."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(database: str) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for seeding and assertions."""
    async for session in get_session():
        yield session
        await session.close()
        break


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make(role: str = "user", **fields: Any) -> User:
        n = next(_sequence)
        user = User(
            open_id=f"open-{n}",
            name=fields.pop("name", f"User {n}"),
            email=fields.pop("email", f"user{n}@example.com"),
            role=role,
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_category(db_session: AsyncSession) -> Callable[..., Awaitable[Any]]:
    async def _make(kind: str = "blog", slug: str | None = None, **fields: Any) -> Any:
        n = next(_sequence)
        model = BlogCategory if kind == "blog" else AcademyCategory
        category = model(
            name_pt=fields.pop("name_pt", f"Categoria {n}"),
            name_en=fields.pop("name_en", f"Category {n}"),
            slug=slug or f"category-{n}",
        )
        db_session.add(category)
        await db_session.commit()
        return category

    return _make


@pytest.fixture
def make_post(db_session: AsyncSession, make_user: Callable[..., Awaitable[User]]) -> Callable[..., Awaitable[BlogPost]]:
    async def _make(published: bool = True, author: User | None = None, **fields: Any) -> BlogPost:
        n = next(_sequence)
        author = author or await make_user(role="admin")
        post = BlogPost(
            title_pt=fields.pop("title_pt", f"Artigo {n}"),
            title_en=fields.pop("title_en", f"Article {n}"),
            content_pt=fields.pop("content_pt", f"Conteúdo do artigo {n}"),
            content_en=fields.pop("content_en", f"Body of article {n}"),
            slug=fields.pop("slug", f"article-{n}"),
            published=published,
            published_at=fields.pop("published_at", datetime.now(timezone.utc) if published else None),
            created_by=author.id,
            **fields,
        )
        db_session.add(post)
        await db_session.commit()
        return post

    return _make


@pytest.fixture
def make_video(
    db_session: AsyncSession, make_user: Callable[..., Awaitable[User]]
) -> Callable[..., Awaitable[AcademyVideo]]:
    async def _make(published: bool = True, author: User | None = None, **fields: Any) -> AcademyVideo:
        n = next(_sequence)
        author = author or await make_user(role="admin")
        video = AcademyVideo(
            title_pt=fields.pop("title_pt", f"Aula {n}"),
            title_en=fields.pop("title_en", f"Lesson {n}"),
            video_url=fields.pop("video_url", f"https://videos.example.com/{n}"),
            published=published,
            created_by=author.id,
            **fields,
        )
        db_session.add(video)
        await db_session.commit()
        return video

    return _make


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build a bearer header for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers


@pytest_asyncio.fixture
async def admin(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user(role="admin", name="Admin")


@pytest_asyncio.fixture
async def member(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user(name="Member")
