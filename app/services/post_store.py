"""Post persistence: the only shared state of the application.

Every operation is a single-row unit of work in its own session, so a failed
insert for one channel message never poisons the next one.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from sqlalchemy import ColumnElement, Select, delete, func, literal, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.models.post import CHANNEL_MESSAGE_CONSTRAINT, ImageSource, Post, PostStatus

logger = logging.getLogger(__name__)

SortField = Literal["createdAt", "updatedAt", "publishedAt", "views"]
SortOrder = Literal["asc", "desc"]

_SORT_COLUMNS = {
    "createdAt": Post.created_at,
    "updatedAt": Post.updated_at,
    "publishedAt": Post.published_at,
    "views": Post.views,
}


class PostStoreError(Exception):
    """Base error for post persistence failures."""

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class PostNotFoundError(PostStoreError):
    """Raised when the target post id or slug does not exist."""

    def __init__(self, message: str = "Post not found") -> None:
        super().__init__(message, "not_found")


class DuplicatePostError(PostStoreError):
    """Raised when an insert violates the slug or channel-message uniqueness constraint."""

    def __init__(self, message: str = "Post already exists") -> None:
        super().__init__(message, "duplicate_post")


class DuplicateMessageError(DuplicatePostError):
    """Raised when the channel message already has a post."""

    def __init__(self, message: str = "Channel message already ingested") -> None:
        super().__init__(message)
        self.error_code = "duplicate_message"


@dataclass(frozen=True)
class NewPost:
    """Fields the sync job supplies when creating a post; the store sets the rest."""

    telegram_message_id: int
    original_channel: str
    original_text: str
    rewritten_title: str
    rewritten_content: str
    summary: str
    tags: list[str]
    slug: str
    meta_title: str | None = None
    meta_description: str | None = None
    image_url: str | None = None
    image_source: ImageSource = ImageSource.NONE


@dataclass(frozen=True)
class PostQuery:
    """Filter, search and paging parameters shared by the admin and public listings."""

    status: PostStatus | None = None
    search: str | None = None
    tag: str | None = None
    page: int = 1
    limit: int = 20
    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class PostPage:
    posts: list[Post] = field(default_factory=list)
    total: int = 0


class PostStore(ABC):
    """Abstract post store consumed by the sync job, moderation and the public blog."""

    @abstractmethod
    async def list_telegram_message_ids(self, channel: str) -> set[int]:
        """Source message ids already ingested from ``channel``, in any status."""
        raise NotImplementedError

    @abstractmethod
    async def slug_exists(self, slug: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def create_post(self, new_post: NewPost) -> Post:
        """Insert a PENDING post.

        Raises:
            DuplicateMessageError: If the channel message already has a post.
            DuplicatePostError: If the slug is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_post(self, post_id: str) -> Post | None:
        raise NotImplementedError

    @abstractmethod
    async def get_published_by_slug(self, slug: str) -> Post | None:
        raise NotImplementedError

    @abstractmethod
    async def update_status(
        self, post_id: str, status: PostStatus, published_at: datetime | None
    ) -> Post:
        """Set status and published_at together. Raises PostNotFoundError."""
        raise NotImplementedError

    @abstractmethod
    async def delete_post(self, post_id: str) -> None:
        """Permanently remove a post. Raises PostNotFoundError."""
        raise NotImplementedError

    @abstractmethod
    async def query_posts(self, query: PostQuery) -> PostPage:
        raise NotImplementedError

    @abstractmethod
    async def published_tag_counts(self) -> Counter[str]:
        raise NotImplementedError

    @abstractmethod
    async def increment_views(self, post_id: str) -> None:
        raise NotImplementedError


def _search_clause(search: str) -> ColumnElement[bool]:
    tag_values = func.unnest(Post.tags).table_valued("value").render_derived(name="tag")
    tag_match = (
        select(literal(1))
        .select_from(tag_values)
        .where(func.lower(tag_values.c.value) == search.lower())
        .exists()
    )
    return or_(
        Post.rewritten_title.icontains(search, autoescape=True),
        Post.summary.icontains(search, autoescape=True),
        tag_match,
    )


def _apply_filters(statement: Select[Any], query: PostQuery) -> Select[Any]:
    if query.status is not None:
        statement = statement.where(Post.status == query.status)
    if query.search:
        statement = statement.where(_search_clause(query.search))
    if query.tag:
        statement = statement.where(Post.tags.any(query.tag))
    return statement


class SqlAlchemyPostStore(PostStore):
    """PostgreSQL implementation backed by an async session maker."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def list_telegram_message_ids(self, channel: str) -> set[int]:
        async with self._session_maker() as session:
            result = await session.execute(
                select(Post.telegram_message_id).where(Post.original_channel == channel)
            )
            return set(result.scalars().all())

    async def slug_exists(self, slug: str) -> bool:
        async with self._session_maker() as session:
            result = await session.execute(select(Post.id).where(Post.slug == slug).limit(1))
            return result.scalar_one_or_none() is not None

    async def create_post(self, new_post: NewPost) -> Post:
        post = Post(
            telegram_message_id=new_post.telegram_message_id,
            original_channel=new_post.original_channel,
            original_text=new_post.original_text,
            rewritten_title=new_post.rewritten_title,
            rewritten_content=new_post.rewritten_content,
            summary=new_post.summary,
            tags=list(new_post.tags),
            slug=new_post.slug,
            meta_title=new_post.meta_title,
            meta_description=new_post.meta_description,
            image_url=new_post.image_url,
            image_source=new_post.image_source,
            status=PostStatus.PENDING,
            published_at=None,
            views=0,
        )
        async with self._session_maker() as session:
            session.add(post)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.info(
                    "Rejected duplicate post for message %s (slug %s)",
                    new_post.telegram_message_id,
                    new_post.slug,
                )
                if CHANNEL_MESSAGE_CONSTRAINT in str(e.orig):
                    raise DuplicateMessageError(
                        f"Message {new_post.telegram_message_id} from {new_post.original_channel} "
                        "already has a post"
                    ) from e
                raise DuplicatePostError(f"Slug '{new_post.slug}' is already taken") from e
            await session.refresh(post)
            return post

    async def get_post(self, post_id: str) -> Post | None:
        async with self._session_maker() as session:
            return await session.get(Post, post_id)

    async def get_published_by_slug(self, slug: str) -> Post | None:
        async with self._session_maker() as session:
            result = await session.execute(
                select(Post).where(Post.slug == slug, Post.status == PostStatus.PUBLISHED)
            )
            return result.scalar_one_or_none()

    async def update_status(
        self, post_id: str, status: PostStatus, published_at: datetime | None
    ) -> Post:
        async with self._session_maker() as session:
            result = await session.execute(
                update(Post)
                .where(Post.id == post_id)
                .values(status=status, published_at=published_at)
                .returning(Post)
            )
            post = result.scalar_one_or_none()
            if post is None:
                await session.rollback()
                raise PostNotFoundError()
            await session.commit()
            return post

    async def delete_post(self, post_id: str) -> None:
        async with self._session_maker() as session:
            result = await session.execute(
                delete(Post).where(Post.id == post_id).returning(Post.id)
            )
            if result.scalar_one_or_none() is None:
                await session.rollback()
                raise PostNotFoundError()
            await session.commit()

    async def query_posts(self, query: PostQuery) -> PostPage:
        column = _SORT_COLUMNS[query.sort_by]
        order = column.asc() if query.sort_order == "asc" else column.desc()
        statement = _apply_filters(select(Post), query)
        count_statement = select(func.count()).select_from(statement.subquery())
        async with self._session_maker() as session:
            total = (await session.execute(count_statement)).scalar_one()
            result = await session.execute(
                statement.order_by(order.nulls_last(), Post.id)
                .offset(query.offset)
                .limit(query.limit)
            )
            return PostPage(posts=list(result.scalars().all()), total=total)

    async def published_tag_counts(self) -> Counter[str]:
        async with self._session_maker() as session:
            result = await session.execute(
                select(Post.tags).where(Post.status == PostStatus.PUBLISHED)
            )
            counts: Counter[str] = Counter()
            for tags in result.scalars():
                counts.update(tags or [])
            return counts

    async def increment_views(self, post_id: str) -> None:
        async with self._session_maker() as session:
            await session.execute(
                update(Post)
                .where(Post.id == post_id)
                .values(views=Post.views + 1)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
