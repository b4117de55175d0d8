"""Accessors for the app-wide service registry built in ``create_app``."""

from __future__ import annotations

from typing import cast

from fastapi import Request

from app.services.blog_service import BlogService
from app.services.chat_service import ChatService
from app.services.moderation_service import ModerationService
from app.services.sync_service import SyncService


def get_sync_service(request: Request) -> SyncService:
    return cast(SyncService, request.app.state.services["sync_service"])


def get_moderation_service(request: Request) -> ModerationService:
    return cast(ModerationService, request.app.state.services["moderation_service"])


def get_blog_service(request: Request) -> BlogService:
    return cast(BlogService, request.app.state.services["blog_service"])


def get_chat_service(request: Request) -> ChatService:
    return cast(ChatService, request.app.state.services["chat_service"])
