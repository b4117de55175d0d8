"""API-layer dependencies: request-scoped wiring (UoW, current user, services)."""

from app.api.dependencies.current_user import get_current_user, require_admin
from app.api.dependencies.services import (
    get_blog_service,
    get_chat_service,
    get_moderation_service,
    get_sync_service,
)
from app.api.dependencies.unit_of_work import UnitOfWork, get_uow

__all__ = [
    "UnitOfWork",
    "get_blog_service",
    "get_chat_service",
    "get_current_user",
    "get_moderation_service",
    "get_sync_service",
    "get_uow",
    "require_admin",
]
