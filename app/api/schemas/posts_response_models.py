"""Response models for the admin moderation and public blog endpoints.

Field sets mirror what each audience may see: the admin listing includes
moderation fields (source message, status), the public views never expose
the original channel text.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.api.schemas.common import CamelModel, Pagination
from app.db.models.post import ImageSource, PostStatus


class AdminPostSummary(CamelModel):
    id: str
    telegram_message_id: int
    original_channel: str
    rewritten_title: str
    summary: str
    image_url: str | None
    tags: list[str]
    slug: str
    status: PostStatus
    views: int
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None
    meta_title: str | None
    meta_description: str | None


class AdminPostListResponse(CamelModel):
    success: bool = True
    data: list[AdminPostSummary]
    pagination: Pagination


class PostStatusData(CamelModel):
    id: str
    rewritten_title: str
    status: PostStatus
    published_at: datetime | None
    updated_at: datetime


class UpdatePostStatusResponse(CamelModel):
    success: bool = True
    message: str
    data: PostStatusData


class DeletedPostData(CamelModel):
    id: str


class DeletePostResponse(CamelModel):
    success: bool = True
    message: str = "Post deleted successfully"
    data: DeletedPostData


class BlogPostSummary(CamelModel):
    id: str
    rewritten_title: str
    summary: str
    image_url: str | None
    tags: list[str]
    slug: str
    views: int
    published_at: datetime | None
    meta_title: str | None
    meta_description: str | None
    created_at: datetime
    updated_at: datetime


class BlogPostDetail(BlogPostSummary):
    rewritten_content: str
    image_source: ImageSource
    original_channel: str


class BlogListMeta(CamelModel):
    tags: list[str] = Field(default_factory=list, description="Tag cloud, first page only")
    search: str | None = None
    tag_filter: str | None = None


class BlogListResponse(CamelModel):
    success: bool = True
    data: list[BlogPostSummary]
    pagination: Pagination
    meta: BlogListMeta


class BlogPostResponse(CamelModel):
    success: bool = True
    data: BlogPostDetail
