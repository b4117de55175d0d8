"""Public read path of the blog: only PUBLISHED posts are ever visible here."""

from __future__ import annotations

import logging

from app.core.background import spawn_background
from app.db.models.post import Post, PostStatus
from app.services.post_store import PostNotFoundError, PostQuery, PostStore

logger = logging.getLogger(__name__)

TAG_CLOUD_SIZE = 20


class BlogService:
    def __init__(self, store: PostStore) -> None:
        self._store = store

    async def list_published(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        tag: str | None = None,
    ) -> tuple[list[Post], int, list[str]]:
        """Return one page of published posts, newest first, plus the tag cloud.

        The tag cloud (most frequent tags across all published posts) is only
        computed for the unfiltered first page; otherwise it is empty.
        """
        page_result = await self._store.query_posts(
            PostQuery(
                status=PostStatus.PUBLISHED,
                search=search or None,
                tag=tag or None,
                page=page,
                limit=limit,
                sort_by="publishedAt",
                sort_order="desc",
            )
        )

        tags: list[str] = []
        if page == 1 and not search and not tag:
            counts = await self._store.published_tag_counts()
            tags = [name for name, _count in counts.most_common(TAG_CLOUD_SIZE)]

        return page_result.posts, page_result.total, tags

    async def get_by_slug(self, slug: str) -> Post:
        """Return the published post for ``slug`` and count the view in the background.

        Raises:
            PostNotFoundError: If no published post has this slug.
        """
        post = await self._store.get_published_by_slug(slug)
        if post is None:
            raise PostNotFoundError(f"Post '{slug}' not found")
        spawn_background(self._store.increment_views(post.id), name=f"post-view-{post.id}")
        return post
