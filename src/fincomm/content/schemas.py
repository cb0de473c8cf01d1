"""Pydantic request/response models for blog and academy endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from fincomm.content.categories import SLUG_PATTERN
from fincomm.content.ratings import MAX_RATING, MIN_RATING

ItemT = TypeVar("ItemT")

MAX_LINKED_CATEGORIES = 20


# --- Categories ---


class CategoryRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name_pt: str
    name_en: str
    slug: str


class CategoryResponse(CategoryRef):
    entity_count: int = 0


class CategoryCreateRequest(BaseModel):
    name_pt: str = Field(min_length=1, max_length=100)
    name_en: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=100, pattern=SLUG_PATTERN)


class CategoryUpdateRequest(BaseModel):
    name_pt: str | None = Field(default=None, min_length=1, max_length=100)
    name_en: str | None = Field(default=None, min_length=1, max_length=100)
    slug: str | None = Field(default=None, min_length=1, max_length=100, pattern=SLUG_PATTERN)


class CategoryAssignRequest(BaseModel):
    category_ids: list[int] = Field(max_length=MAX_LINKED_CATEGORIES)


# --- Blog posts ---


class BlogPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title_pt: str
    title_en: str
    content_pt: str
    content_en: str
    excerpt_pt: str | None = None
    excerpt_en: str | None = None
    slug: str
    category_id: int | None = None
    cover_image_url: str | None = None
    author_name: str | None = None
    author_linkedin: str | None = None
    published: bool
    published_at: datetime | None = None
    views: int = 0
    created_at: datetime
    updated_at: datetime
    created_by: int
    average_rating: float = 0.0
    rating_count: int = 0


class BlogPostCreateRequest(BaseModel):
    title_pt: str = Field(min_length=1, max_length=500)
    title_en: str = Field(min_length=1, max_length=500)
    content_pt: str
    content_en: str
    excerpt_pt: str | None = None
    excerpt_en: str | None = None
    slug: str = Field(min_length=1, max_length=500, pattern=SLUG_PATTERN)
    category_id: int | None = None
    cover_image_url: str | None = None
    author_name: str | None = None
    author_linkedin: str | None = None
    published: bool = False
    published_at: datetime | None = None


class BlogPostUpdateRequest(BaseModel):
    title_pt: str | None = Field(default=None, min_length=1, max_length=500)
    title_en: str | None = Field(default=None, min_length=1, max_length=500)
    content_pt: str | None = None
    content_en: str | None = None
    excerpt_pt: str | None = None
    excerpt_en: str | None = None
    slug: str | None = Field(default=None, min_length=1, max_length=500, pattern=SLUG_PATTERN)
    category_id: int | None = None
    cover_image_url: str | None = None
    author_name: str | None = None
    author_linkedin: str | None = None
    published: bool | None = None
    published_at: datetime | None = None


# --- Academy videos ---


class VideoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title_pt: str
    title_en: str
    description_pt: str | None = None
    description_en: str | None = None
    video_url: str
    thumbnail_url: str | None = None
    duration: int | None = None
    category_id: int | None = None
    published: bool
    views: int = 0
    created_at: datetime
    updated_at: datetime
    created_by: int
    average_rating: float = 0.0
    rating_count: int = 0


class VideoCreateRequest(BaseModel):
    title_pt: str = Field(min_length=1, max_length=500)
    title_en: str = Field(min_length=1, max_length=500)
    description_pt: str | None = None
    description_en: str | None = None
    video_url: str = Field(min_length=1, max_length=1000)
    thumbnail_url: str | None = None
    duration: int | None = Field(default=None, ge=0)
    category_id: int | None = None
    published: bool = False


class VideoUpdateRequest(BaseModel):
    title_pt: str | None = Field(default=None, min_length=1, max_length=500)
    title_en: str | None = Field(default=None, min_length=1, max_length=500)
    description_pt: str | None = None
    description_en: str | None = None
    video_url: str | None = Field(default=None, min_length=1, max_length=1000)
    thumbnail_url: str | None = None
    duration: int | None = Field(default=None, ge=0)
    category_id: int | None = None
    published: bool | None = None


# --- Pages, ratings, comments ---


class ContentPage(BaseModel, Generic[ItemT]):
    items: list[ItemT]
    total: int
    available: bool = True


class RatingSummaryResponse(BaseModel):
    average: float
    count: int
    available: bool = True


class RateRequest(BaseModel):
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)


class CommentCreateRequest(BaseModel):
    comment: str


class CommentResponse(BaseModel):
    id: int
    comment: str
    created_at: datetime
    user_id: int
    user_name: str | None = None


class SuccessResponse(BaseModel):
    success: bool = True


class CreatedResponse(BaseModel):
    success: bool = True
    id: int
