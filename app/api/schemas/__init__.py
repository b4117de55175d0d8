"""API request and response schemas.

Import request/response models from the submodules (e.g. posts_request_models,
sync_response_models) or from this package for a single entry point.
"""

from __future__ import annotations

from app.api.schemas.auth_request_models import LoginUserRequest, RegisterUserRequest
from app.api.schemas.auth_response_models import AccessTokenResponse, UserResponse
from app.api.schemas.chat_request_models import ChatMessageIn, ChatRequest
from app.api.schemas.chat_response_models import ChatResponse
from app.api.schemas.common import CamelModel, Pagination
from app.api.schemas.meta_response_models import HealthResponse
from app.api.schemas.posts_request_models import StatusFilter, UpdatePostStatusRequest
from app.api.schemas.posts_response_models import (
    AdminPostListResponse,
    AdminPostSummary,
    BlogListMeta,
    BlogListResponse,
    BlogPostDetail,
    BlogPostResponse,
    BlogPostSummary,
    DeletedPostData,
    DeletePostResponse,
    PostStatusData,
    UpdatePostStatusResponse,
)
from app.api.schemas.sync_response_models import (
    SyncedPostData,
    SyncFailureResponse,
    SyncSuccessResponse,
)

__all__ = [
    "AccessTokenResponse",
    "AdminPostListResponse",
    "AdminPostSummary",
    "BlogListMeta",
    "BlogListResponse",
    "BlogPostDetail",
    "BlogPostResponse",
    "BlogPostSummary",
    "CamelModel",
    "ChatMessageIn",
    "ChatRequest",
    "ChatResponse",
    "DeletePostResponse",
    "DeletedPostData",
    "HealthResponse",
    "LoginUserRequest",
    "Pagination",
    "PostStatusData",
    "RegisterUserRequest",
    "StatusFilter",
    "SyncFailureResponse",
    "SyncSuccessResponse",
    "SyncedPostData",
    "UpdatePostStatusRequest",
    "UpdatePostStatusResponse",
    "UserResponse",
]
