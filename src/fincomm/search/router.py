"""Global search endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm.database import get_session
from fincomm.dependencies import soft_read
from fincomm.search.service import Language, search

router = APIRouter(prefix="/api/v1/search", tags=["Search"])


@router.get("")
async def global_search(
    response: Response,
    q: str = Query(min_length=1, max_length=200),
    language: Language = "pt",
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Search events, blog posts and videos in one call."""
    fallback: dict[str, Any] = {"events": [], "blog_posts": [], "videos": [], "available": False}
    found = await soft_read(response, search(db, q, language), fallback)
    return {"available": True, **found}
