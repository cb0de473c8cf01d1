"""Pydantic request/response models for the event calendar."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

EventType = Literal["webinar", "workshop", "conference", "networking", "other"]


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title_pt: str
    title_en: str
    description_pt: str | None = None
    description_en: str | None = None
    event_type: EventType
    location: str | None = None
    image_url: str | None = None
    event_url: str | None = None
    event_date: datetime
    created_at: datetime
    created_by: int


class EventCreateRequest(BaseModel):
    title_pt: str = Field(min_length=1, max_length=255)
    title_en: str = Field(min_length=1, max_length=255)
    description_pt: str | None = None
    description_en: str | None = None
    event_type: EventType = "other"
    location: str | None = Field(default=None, max_length=500)
    image_url: str | None = Field(default=None, max_length=1000)
    event_url: str | None = Field(default=None, max_length=1000)
    event_date: datetime


class EventUpdateRequest(BaseModel):
    title_pt: str | None = Field(default=None, min_length=1, max_length=255)
    title_en: str | None = Field(default=None, min_length=1, max_length=255)
    description_pt: str | None = None
    description_en: str | None = None
    event_type: EventType | None = None
    location: str | None = Field(default=None, max_length=500)
    image_url: str | None = Field(default=None, max_length=1000)
    event_url: str | None = Field(default=None, max_length=1000)
    event_date: datetime | None = None
