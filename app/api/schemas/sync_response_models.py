"""Response models for the sync trigger."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.api.schemas.common import CamelModel
from app.db.models.post import PostStatus


class SyncedPostData(CamelModel):
    id: str
    telegram_id: int
    title: str
    status: PostStatus


class SyncSuccessResponse(CamelModel):
    success: bool = True
    message: str
    processed: int
    skipped: int
    errors: int
    posts: list[SyncedPostData]
    duration: int = Field(..., description="Run time in milliseconds", examples=[1843])
    timestamp: datetime


class SyncFailureResponse(CamelModel):
    success: bool = False
    error: str
    message: str
    duration: int | None = None
