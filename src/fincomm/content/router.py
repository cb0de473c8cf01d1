"""Blog and academy endpoints, built once per content kind.

Reads that only need the data store degrade instead of failing: when the
store is unreachable they answer with an empty fallback carrying
`available: false`.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fincomm.auth.dependencies import get_current_user, get_current_user_optional, require_admin
from fincomm.content.analytics import get_content_analytics
from fincomm.content.categories import CategoryService
from fincomm.content.comments import CommentOrder, CommentStore
from fincomm.content.entities import EntityService
from fincomm.content.kinds import ContentKind, entity_to_dict
from fincomm.content.ratings import RatingStore
from fincomm.content.reader import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ContentReader
from fincomm.content.schemas import (
    BlogPostCreateRequest,
    BlogPostResponse,
    BlogPostUpdateRequest,
    CategoryAssignRequest,
    CategoryCreateRequest,
    CategoryRef,
    CategoryResponse,
    CategoryUpdateRequest,
    CommentCreateRequest,
    CommentResponse,
    ContentPage,
    CreatedResponse,
    RateRequest,
    RatingSummaryResponse,
    SuccessResponse,
    VideoCreateRequest,
    VideoResponse,
    VideoUpdateRequest,
)
from fincomm.database import get_session
from fincomm.db.models import User
from fincomm.dependencies import soft_read

_SCHEMAS: dict[str, tuple[type, type, type]] = {
    "blog": (BlogPostResponse, BlogPostCreateRequest, BlogPostUpdateRequest),
    "academy": (VideoResponse, VideoCreateRequest, VideoUpdateRequest),
}


def build_content_router(kind: ContentKind) -> APIRouter:
    """Create the router for one content kind under /api/v1/<kind>."""
    item_schema, create_schema, update_schema = _SCHEMAS[kind.name]
    viewer = get_current_user if kind.members_only else get_current_user_optional
    coll = kind.collection

    router = APIRouter(prefix=f"/api/v1/{kind.name}", tags=[kind.name.capitalize()])

    # ---- Categories ----

    @router.get("/categories", response_model=list[CategoryResponse])
    async def list_categories(response: Response, db: AsyncSession = Depends(get_session)) -> Any:
        return await soft_read(response, CategoryService(db, kind).list_categories(), [])

    @router.post("/categories", response_model=CategoryResponse, status_code=201)
    async def create_category(
        body: CategoryCreateRequest,
        _admin: User = Depends(require_admin),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        category = await CategoryService(db, kind).create(body.name_pt, body.name_en, body.slug)
        await db.commit()
        return {**entity_to_dict(category), "entity_count": 0}

    @router.patch("/categories/{category_id}", response_model=CategoryResponse)
    async def update_category(
        category_id: int,
        body: CategoryUpdateRequest,
        _admin: User = Depends(require_admin),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        svc = CategoryService(db, kind)
        category = await svc.update(category_id, body.model_dump(exclude_unset=True))
        count = await svc.count_entities(category_id)
        await db.commit()
        return {**entity_to_dict(category), "entity_count": count}

    @router.delete("/categories/{category_id}", response_model=SuccessResponse)
    async def delete_category(
        category_id: int,
        _admin: User = Depends(require_admin),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        await CategoryService(db, kind).delete(category_id)
        await db.commit()
        return {"success": True}

    @router.get(f"/categories/{{category_id}}/{coll}", response_model=ContentPage[item_schema])
    async def list_items_in_category(
        category_id: int,
        response: Response,
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        _viewer: User | None = Depends(viewer),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        """Published items filed under a category, primary or linked."""
        fallback = {"items": [], "total": 0, "available": False}
        return await soft_read(response, ContentReader(db, kind).get_page(category_id, page, limit), fallback)

    # ---- Reads ----

    @router.get(f"/{coll}", response_model=ContentPage[item_schema])
    async def list_items(
        response: Response,
        category_id: int | None = None,
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        _viewer: User | None = Depends(viewer),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        """Published items, newest first, with rating summaries."""
        fallback = {"items": [], "total": 0, "available": False}
        return await soft_read(response, ContentReader(db, kind).get_page(category_id, page, limit), fallback)

    @router.get(f"/{coll}/all", response_model=list[item_schema])
    async def list_all_items(
        _admin: User = Depends(require_admin),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        """Every item including drafts, with rating summaries (admin)."""
        return await ContentReader(db, kind).get_all()

    @router.get(f"/{coll}/{{entity_id}}", response_model=item_schema)
    async def get_item(
        entity_id: int,
        _viewer: User | None = Depends(viewer),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        return await ContentReader(db, kind).get_item(entity_id)

    if kind.slug_field is not None:

        @router.get(f"/{coll}/slug/{{slug}}", response_model=item_schema)
        async def get_item_by_slug(
            slug: str,
            _viewer: User | None = Depends(viewer),
            db: AsyncSession = Depends(get_session),
        ) -> Any:
            return await ContentReader(db, kind).get_item_by_slug(slug)

    # ---- Admin mutations ----

    @router.post(f"/{coll}", response_model=item_schema, status_code=201)
    async def create_item(
        body: create_schema,  # type: ignore[valid-type]
        admin: User = Depends(require_admin),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        entity = await EntityService(db, kind).create(body.model_dump(), created_by=admin.id)
        await db.commit()
        return entity

    @router.patch(f"/{coll}/{{entity_id}}", response_model=item_schema)
    async def update_item(
        entity_id: int,
        body: update_schema,  # type: ignore[valid-type]
        _admin: User = Depends(require_admin),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        entity = await EntityService(db, kind).update(entity_id, body.model_dump(exclude_unset=True))
        await db.commit()
        return entity

    @router.delete(f"/{coll}/{{entity_id}}")
    async def delete_item(
        entity_id: int,
        _admin: User = Depends(require_admin),
        db: AsyncSession = Depends(get_session),
    ) -> dict:
        """Delete the item and every rating, comment and category link attached to it."""
        removed = await EntityService(db, kind).delete(entity_id)
        await db.commit()
        return {"success": True, "removed": removed}

    if kind.link is not None:

        @router.get(f"/{coll}/{{entity_id}}/categories", response_model=list[CategoryRef])
        async def get_item_categories(
            entity_id: int,
            _viewer: User | None = Depends(viewer),
            db: AsyncSession = Depends(get_session),
        ) -> Any:
            return await ContentReader(db, kind).get_item_categories(entity_id)

        @router.put(f"/{coll}/{{entity_id}}/categories", response_model=list[CategoryRef])
        async def set_item_categories(
            entity_id: int,
            body: CategoryAssignRequest,
            _admin: User = Depends(require_admin),
            db: AsyncSession = Depends(get_session),
        ) -> Any:
            """Replace the linked categories of an item in one transaction."""
            categories = await EntityService(db, kind).set_categories(entity_id, body.category_ids)
            await db.commit()
            return categories

    # ---- Ratings ----

    @router.post(f"/{coll}/{{entity_id}}/rating", response_model=SuccessResponse)
    async def rate_item(
        entity_id: int,
        body: RateRequest,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        await RatingStore(db, kind).rate(entity_id, user.id, body.rating)
        await db.commit()
        return {"success": True}

    @router.get(f"/{coll}/{{entity_id}}/rating", response_model=RatingSummaryResponse)
    async def get_rating(
        entity_id: int,
        response: Response,
        _viewer: User | None = Depends(viewer),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        fallback = {"average": 0.0, "count": 0, "available": False}
        return await soft_read(response, RatingStore(db, kind).get_aggregate(entity_id), fallback)

    @router.get(f"/{coll}/{{entity_id}}/rating/me", response_model=int | None)
    async def get_my_rating(
        entity_id: int,
        response: Response,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        """The caller's rating, or null. A down store also answers null, flagged by header."""
        return await soft_read(response, RatingStore(db, kind).get_user_rating(entity_id, user.id), None)

    # ---- Comments ----

    @router.post(f"/{coll}/{{entity_id}}/comments", response_model=CreatedResponse, status_code=201)
    async def add_comment(
        entity_id: int,
        body: CommentCreateRequest,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        comment_id = await CommentStore(db, kind).add(entity_id, user.id, body.comment)
        await db.commit()
        return {"success": True, "id": comment_id}

    @router.get(f"/{coll}/{{entity_id}}/comments", response_model=list[CommentResponse])
    async def list_comments(
        entity_id: int,
        response: Response,
        order_by: CommentOrder = "desc",
        _viewer: User | None = Depends(viewer),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        return await soft_read(response, CommentStore(db, kind).list(entity_id, order_by), [])

    @router.delete("/comments/{comment_id}", response_model=SuccessResponse)
    async def delete_comment(
        comment_id: int,
        _admin: User = Depends(require_admin),
        db: AsyncSession = Depends(get_session),
    ) -> Any:
        await CommentStore(db, kind).delete(comment_id)
        await db.commit()
        return {"success": True}

    # ---- Analytics ----

    @router.get("/analytics")
    async def content_analytics(
        _admin: User = Depends(require_admin),
        db: AsyncSession = Depends(get_session),
    ) -> dict:
        return await get_content_analytics(db, kind)

    return router
