from __future__ import annotations

import logging
from datetime import UTC, datetime

from app.db.models.post import Post, PostStatus
from app.services.post_store import PostPage, PostQuery, PostStore

logger = logging.getLogger(__name__)


class InvalidTransitionError(ValueError):
    """Requested status is not a moderation target."""

    error_code = "validation_error"


class ModerationService:
    """Admin review of synced posts: list, publish, reject, delete.

    Any status can move to PUBLISHED or REJECTED, including re-publishing a
    rejected post or rejecting a published one. Nothing moves back to PENDING.
    """

    def __init__(self, store: PostStore) -> None:
        self._store = store

    async def list_posts(self, query: PostQuery) -> PostPage:
        return await self._store.query_posts(query)

    async def set_status(
        self, post_id: str, status: PostStatus, published_at: datetime | None = None
    ) -> Post:
        """Move a post to PUBLISHED or REJECTED.

        ``published_at`` only applies to PUBLISHED and defaults to now (UTC);
        REJECTED always clears it.

        Raises:
            InvalidTransitionError: If ``status`` is PENDING.
            PostNotFoundError: If ``post_id`` does not exist.
        """
        if status == PostStatus.PUBLISHED:
            effective_published_at = published_at or datetime.now(UTC)
        elif status == PostStatus.REJECTED:
            effective_published_at = None
        else:
            raise InvalidTransitionError(f"Cannot move a post to {status.value}")

        post = await self._store.update_status(post_id, status, effective_published_at)
        logger.info("Post %s moved to %s", post_id, status.value)
        return post

    async def delete_post(self, post_id: str) -> None:
        await self._store.delete_post(post_id)
        logger.info("Post %s deleted", post_id)
