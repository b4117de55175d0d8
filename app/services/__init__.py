from app.services.auth_service import (
    AuthService,
    InvalidCredentialsError,
    UserAlreadyExistsError,
)
from app.services.blog_service import BlogService
from app.services.chat_service import ChatService
from app.services.moderation_service import InvalidTransitionError, ModerationService
from app.services.post_store import (
    DuplicateMessageError,
    DuplicatePostError,
    PostNotFoundError,
    PostStore,
    SqlAlchemyPostStore,
)
from app.services.sync_service import SyncResult, SyncService

__all__ = [
    "AuthService",
    "BlogService",
    "ChatService",
    "DuplicateMessageError",
    "DuplicatePostError",
    "InvalidCredentialsError",
    "InvalidTransitionError",
    "ModerationService",
    "PostNotFoundError",
    "PostStore",
    "SqlAlchemyPostStore",
    "SyncResult",
    "SyncService",
    "UserAlreadyExistsError",
]
