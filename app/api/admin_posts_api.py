from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from app.api.dependencies.current_user import require_admin
from app.api.dependencies.services import get_moderation_service
from app.api.openapi_responses import POST_NOT_FOUND, admin_responses
from app.api.schemas.common import Pagination
from app.api.schemas.posts_request_models import StatusFilter, UpdatePostStatusRequest
from app.api.schemas.posts_response_models import (
    AdminPostListResponse,
    AdminPostSummary,
    DeletedPostData,
    DeletePostResponse,
    PostStatusData,
    UpdatePostStatusResponse,
)
from app.core.errors import build_http_error
from app.core.rate_limit import DEFAULT_RATE_LIMIT, limit
from app.db.models.post import PostStatus
from app.db.models.user import User
from app.services.moderation_service import InvalidTransitionError, ModerationService
from app.services.post_store import PostNotFoundError, PostQuery, SortField, SortOrder

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(exc: PostNotFoundError) -> HTTPException:
    return build_http_error(
        status_code=status.HTTP_404_NOT_FOUND, error=exc.error_code, message=str(exc)
    )


@router.get(
    "",
    summary="List posts for moderation",
    description="All posts in any status, filtered, searched, sorted and paginated.",
    response_model=AdminPostListResponse,
    responses=admin_responses(),
)
@limit(DEFAULT_RATE_LIMIT)
async def list_posts(
    request: Request,
    status_filter: Annotated[StatusFilter, Query(alias="status")] = "ALL",
    page: Annotated[int, Query(ge=1)] = 1,
    limit_: Annotated[int, Query(alias="limit", ge=1, le=100)] = 20,
    search: Annotated[str | None, Query(max_length=200)] = None,
    sort_by: Annotated[SortField, Query(alias="sortBy")] = "createdAt",
    sort_order: Annotated[SortOrder, Query(alias="sortOrder")] = "desc",
    _admin: User = Depends(require_admin),
    moderation: ModerationService = Depends(get_moderation_service),
) -> AdminPostListResponse:
    result = await moderation.list_posts(
        PostQuery(
            status=None if status_filter == "ALL" else PostStatus(status_filter),
            search=(search.strip() or None) if search else None,
            page=page,
            limit=limit_,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    )
    return AdminPostListResponse(
        data=[AdminPostSummary.model_validate(post) for post in result.posts],
        pagination=Pagination.build(
            page=page, limit=limit_, total=result.total, returned=len(result.posts)
        ),
    )


@router.patch(
    "",
    summary="Publish or reject a post",
    description=(
        "PUBLISHED sets publishedAt (given value or now); REJECTED clears it. "
        "Posts can be re-published or rejected from any status."
    ),
    response_model=UpdatePostStatusResponse,
    responses=admin_responses(POST_NOT_FOUND),
)
@limit(DEFAULT_RATE_LIMIT)
async def update_post_status(
    request: Request,
    payload: UpdatePostStatusRequest,
    admin: User = Depends(require_admin),
    moderation: ModerationService = Depends(get_moderation_service),
) -> UpdatePostStatusResponse:
    try:
        post = await moderation.set_status(payload.id, payload.status, payload.published_at)
    except PostNotFoundError as e:
        raise _not_found(e) from e
    except InvalidTransitionError as e:
        raise build_http_error(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            error=e.error_code,
            message=str(e),
            details=[{"field": "status", "message": str(e)}],
        ) from e

    logger.info("Post %s set to %s by %s", post.id, post.status.value, admin.email)
    verb = "published" if post.status == PostStatus.PUBLISHED else "rejected"
    return UpdatePostStatusResponse(
        message=f"Post {verb} successfully",
        data=PostStatusData.model_validate(post),
    )


@router.delete(
    "",
    summary="Delete a post",
    description="Permanently remove a post in any status.",
    response_model=DeletePostResponse,
    responses=admin_responses(POST_NOT_FOUND),
)
@limit(DEFAULT_RATE_LIMIT)
async def delete_post(
    request: Request,
    post_id: Annotated[str, Query(alias="id", min_length=1)],
    admin: User = Depends(require_admin),
    moderation: ModerationService = Depends(get_moderation_service),
) -> DeletePostResponse:
    try:
        await moderation.delete_post(post_id)
    except PostNotFoundError as e:
        raise _not_found(e) from e

    logger.info("Post %s deleted by %s", post_id, admin.email)
    return DeletePostResponse(data=DeletedPostData(id=post_id))
