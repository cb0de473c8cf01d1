"""Request/response schemas for user endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    open_id: str
    name: str | None = None
    email: str | None = None
    role: str
    job_title: str | None = None
    company: str | None = None
    linkedin: str | None = None
    profile_completed: bool
    created_at: datetime
    last_signed_in: datetime


class ProfileUpdateRequest(BaseModel):
    job_title: str = Field(min_length=1, max_length=255)
    company: str | None = Field(default=None, max_length=255)
    linkedin: str | None = Field(default=None, max_length=500)


class AdminUserUpdateRequest(BaseModel):
    name: str | None = None
    email: str | None = Field(default=None, max_length=320)
    job_title: str | None = Field(default=None, max_length=255)
    company: str | None = Field(default=None, max_length=255)
    linkedin: str | None = Field(default=None, max_length=500)
    role: Literal["user", "admin"] | None = None


class TitleCount(BaseModel):
    title: str
    count: int


class CompanyCount(BaseModel):
    company: str
    count: int


class ActiveUser(BaseModel):
    id: int
    name: str
    email: str
    activity_count: int


class UserAnalyticsResponse(BaseModel):
    total_users: int
    profile_completion_rate: int
    registrations_by_month: dict[str, int]
    top_job_titles: list[TitleCount]
    top_companies: list[CompanyCount]
    most_active_users: list[ActiveUser]
