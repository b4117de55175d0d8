"""Request models for the admin moderation endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from app.api.schemas.common import CamelModel
from app.db.models.post import PostStatus

StatusFilter = Literal["PENDING", "PUBLISHED", "REJECTED", "ALL"]


class UpdatePostStatusRequest(CamelModel):
    """Body of ``PATCH /api/admin/posts``."""

    id: str = Field(..., min_length=1, description="Post id")
    status: PostStatus = Field(..., description="PUBLISHED or REJECTED")
    published_at: datetime | None = Field(
        default=None, description="Publication time; defaults to now when publishing"
    )

    @field_validator("status")
    @classmethod
    def moderation_target_only(cls, value: PostStatus) -> PostStatus:
        if value == PostStatus.PENDING:
            raise ValueError("Status must be PUBLISHED or REJECTED")
        return value
