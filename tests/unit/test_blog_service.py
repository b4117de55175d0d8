"""Unit tests for the public blog read path."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from app.core.background import drain_background
from app.db.models.post import Post, PostStatus
from app.services.blog_service import TAG_CLOUD_SIZE, BlogService
from app.services.post_store import PostNotFoundError
from tests.fakes import InMemoryPostStore, make_post

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _published(slug: str, days_ago: int = 0, **kwargs: Any) -> Post:
    return make_post(
        slug=slug,
        status=PostStatus.PUBLISHED,
        published_at=NOW - timedelta(days=days_ago),
        **kwargs,
    )


@pytest.fixture
def blog(post_store: InMemoryPostStore) -> BlogService:
    return BlogService(post_store)


class TestListPublished:
    @pytest.mark.asyncio
    async def test_only_published_newest_first(
        self, blog: BlogService, post_store: InMemoryPostStore
    ) -> None:
        """Test pending and rejected posts never appear and order is by publish date."""
        # Arrange
        post_store.add(_published("old", days_ago=3))
        post_store.add(_published("new", days_ago=0))
        post_store.add(make_post(slug="draft"))
        post_store.add(make_post(slug="bad", status=PostStatus.REJECTED))

        # Act
        posts, total, _tags = await blog.list_published()

        # Assert
        assert [post.slug for post in posts] == ["new", "old"]
        assert total == 2

    @pytest.mark.asyncio
    async def test_pagination(self, blog: BlogService, post_store: InMemoryPostStore) -> None:
        for index in range(5):
            post_store.add(_published(f"post-{index}", days_ago=index))

        posts, total, tags = await blog.list_published(page=2, limit=2)

        assert [post.slug for post in posts] == ["post-2", "post-3"]
        assert total == 5
        assert tags == []

    @pytest.mark.asyncio
    async def test_search_matches_title_summary_and_tags(
        self, blog: BlogService, post_store: InMemoryPostStore
    ) -> None:
        """Test search: substring of title or summary, or a whole tag, ignoring case."""
        # Arrange
        post_store.add(_published("by-title", title="Боты для CRM"))
        post_store.add(_published("by-summary", summary="Интеграция с crm за день"))
        post_store.add(_published("by-tag", tags=["CRM"]))
        post_store.add(_published("unrelated", title="Погода", tags=["CRM-системы"]))

        # Act
        posts, total, _tags = await blog.list_published(search="crm")

        # Assert
        assert {post.slug for post in posts} == {"by-title", "by-summary", "by-tag"}
        assert total == 3

    @pytest.mark.asyncio
    async def test_tag_filter_is_exact(
        self, blog: BlogService, post_store: InMemoryPostStore
    ) -> None:
        post_store.add(_published("a", tags=["AI", "Продажи"]))
        post_store.add(_published("b", tags=["ai"]))

        posts, total, _tags = await blog.list_published(tag="AI")

        assert [post.slug for post in posts] == ["a"]
        assert total == 1

    @pytest.mark.asyncio
    async def test_tag_cloud_on_first_unfiltered_page(
        self, blog: BlogService, post_store: InMemoryPostStore
    ) -> None:
        """Test the tag cloud is ordered by frequency over published posts only."""
        # Arrange
        post_store.add(_published("a", tags=["AI", "CRM"]))
        post_store.add(_published("b", tags=["AI"]))
        post_store.add(make_post(slug="draft", tags=["Секрет"]))

        # Act
        _posts, _total, tags = await blog.list_published()

        # Assert
        assert tags == ["AI", "CRM"]

    @pytest.mark.asyncio
    async def test_tag_cloud_is_capped(
        self, blog: BlogService, post_store: InMemoryPostStore
    ) -> None:
        post_store.add(_published("a", tags=[f"tag-{index}" for index in range(30)]))

        _posts, _total, tags = await blog.list_published()

        assert len(tags) == TAG_CLOUD_SIZE

    @pytest.mark.asyncio
    async def test_no_tag_cloud_when_filtered(
        self, blog: BlogService, post_store: InMemoryPostStore
    ) -> None:
        post_store.add(_published("a", tags=["AI"]))

        _, _, with_search = await blog.list_published(search="заголовок")
        _, _, with_tag = await blog.list_published(tag="AI")

        assert with_search == []
        assert with_tag == []


class TestGetBySlug:
    @pytest.mark.asyncio
    async def test_returns_post_and_counts_view(
        self, blog: BlogService, post_store: InMemoryPostStore
    ) -> None:
        """Test the view is counted by a background task after the read returns."""
        # Arrange
        post = post_store.add(_published("hello"))

        # Act
        found = await blog.get_by_slug("hello")
        await drain_background()

        # Assert
        assert found.id == post.id
        assert post.views == 1

    @pytest.mark.asyncio
    async def test_unpublished_post_is_not_found(
        self, blog: BlogService, post_store: InMemoryPostStore
    ) -> None:
        post_store.add(make_post(slug="draft"))

        with pytest.raises(PostNotFoundError):
            await blog.get_by_slug("draft")

    @pytest.mark.asyncio
    async def test_view_counter_failure_does_not_break_read(
        self, blog: BlogService, post_store: InMemoryPostStore
    ) -> None:
        """Test a failing view counter is logged and the post is still returned."""
        post_store.add(_published("hello"))
        post_store.fail_increment = ConnectionError("database is down")

        found = await blog.get_by_slug("hello")
        await drain_background()

        assert found.slug == "hello"
