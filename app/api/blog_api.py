"""Public, unauthenticated read API of the blog."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.dependencies.services import get_blog_service
from app.api.openapi_responses import (
    POST_NOT_FOUND,
    RATE_LIMITED,
    VALIDATION_ERROR,
    error_responses,
)
from app.api.schemas.common import Pagination
from app.api.schemas.posts_response_models import (
    BlogListMeta,
    BlogListResponse,
    BlogPostDetail,
    BlogPostResponse,
    BlogPostSummary,
)
from app.core.errors import build_http_error
from app.core.rate_limit import DEFAULT_RATE_LIMIT, limit, rate_limit_ip_key
from app.services.blog_service import BlogService
from app.services.post_store import PostNotFoundError

router = APIRouter()


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


@router.get(
    "/posts",
    summary="List published posts or fetch one by slug",
    description=(
        "Without `slug`: published posts, newest first, with pagination and a tag cloud "
        "on the unfiltered first page. With `slug`: that single published post."
    ),
    response_model=BlogListResponse | BlogPostResponse,
    responses=error_responses(POST_NOT_FOUND, VALIDATION_ERROR, RATE_LIMITED),
)
@limit(DEFAULT_RATE_LIMIT, key_func=rate_limit_ip_key)
async def get_posts(
    request: Request,
    page: Annotated[int, Query(ge=1)] = 1,
    limit_: Annotated[int, Query(alias="limit", ge=1, le=50)] = 10,
    search: Annotated[str | None, Query(max_length=100)] = None,
    tag: Annotated[str | None, Query(max_length=50)] = None,
    slug: Annotated[str | None, Query(max_length=200)] = None,
    blog: BlogService = Depends(get_blog_service),
) -> BlogListResponse | BlogPostResponse:
    slug = _clean(slug)
    if slug:
        try:
            post = await blog.get_by_slug(slug)
        except PostNotFoundError as e:
            raise build_http_error(
                status_code=status.HTTP_404_NOT_FOUND, error=e.error_code, message="Post not found"
            ) from e
        return BlogPostResponse(data=BlogPostDetail.model_validate(post))

    search, tag = _clean(search), _clean(tag)
    posts, total, tags = await blog.list_published(page=page, limit=limit_, search=search, tag=tag)
    return BlogListResponse(
        data=[BlogPostSummary.model_validate(post) for post in posts],
        pagination=Pagination.build(page=page, limit=limit_, total=total, returned=len(posts)),
        meta=BlogListMeta(tags=tags, search=search, tag_filter=tag),
    )
