"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from fincomm.config import get_settings
from fincomm.content.kinds import ALL_KINDS
from fincomm.content.router import build_content_router
from fincomm.database import close_db, init_db
from fincomm.events.router import router as events_router
from fincomm.health.router import router as health_router
from fincomm.middleware import setup_middleware
from fincomm.search.router import router as search_router
from fincomm.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    logger.info("startup", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Fincomm API",
        description="Community platform API: blog, academy videos, events and member profiles",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(events_router)
    app.include_router(search_router)
    for kind in ALL_KINDS:
        app.include_router(build_content_router(kind))

    return app


app = create_app()
