"""Channel -> blog ingestion job.

One run fetches the latest channel posts, drops the ones already ingested,
and turns each remaining post into a PENDING blog post: rewrite, image,
slug, insert. Messages are processed one at a time; a failure in one
message is counted and logged and the run moves on to the next.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

from app.db.models.post import ImageSource, PostStatus
from app.integrations.telegram import TelegramError, TelegramMessage
from app.integrations.unsplash import Orientation
from app.llm.rewriter import RewriteError
from app.llm.schemas import RewriteResult
from app.services.post_store import (
    DuplicateMessageError,
    DuplicatePostError,
    NewPost,
    PostStore,
)
from app.services.slug import resolve_unique_slug, slugify

logger = logging.getLogger(__name__)

FALLBACK_IMAGE_KEYWORDS = ("technology", "ai")
IMAGE_KEYWORD_TAGS = 3


class ChannelFetcher(Protocol):
    async def fetch_channel_messages(
        self, channel: str, limit: int = 20
    ) -> list[TelegramMessage]: ...


class Rewriter(Protocol):
    async def rewrite(self, raw_text: str, source_label: str) -> RewriteResult: ...


class ImageFinder(Protocol):
    async def find_image(
        self, keywords: Sequence[str], orientation: Orientation | None = "landscape"
    ) -> str | None: ...


@dataclass(frozen=True)
class SyncedPost:
    id: str
    telegram_id: int
    title: str
    status: PostStatus


@dataclass
class SyncResult:
    success: bool = True
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    posts: list[SyncedPost] = field(default_factory=list)
    duration_ms: int = 0
    finished_at: datetime | None = None
    error: str | None = None
    message: str | None = None


class _Outcome(Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


class SyncService:
    """Runs the ingestion job against injected collaborators."""

    def __init__(
        self,
        *,
        fetcher: ChannelFetcher,
        rewriter: Rewriter,
        image_finder: ImageFinder,
        store: PostStore,
        channel: str,
        fetch_limit: int = 20,
        min_message_length: int = 50,
        slug_max_attempts: int = 50,
    ) -> None:
        self._fetcher = fetcher
        self._rewriter = rewriter
        self._image_finder = image_finder
        self._store = store
        self.channel = channel
        self.fetch_limit = fetch_limit
        self.min_message_length = min_message_length
        self.slug_max_attempts = slug_max_attempts
        # Guards against overlapping runs within this process only.
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run_sync(self) -> SyncResult:
        """Run one sync pass. Never raises; fatal problems become a failed result."""
        started = time.monotonic()
        if self._lock.locked():
            logger.warning("Sync requested while a previous run is still in progress")
            return self._finish(
                SyncResult(
                    success=False,
                    error="sync_in_progress",
                    message="A sync run is already in progress",
                ),
                started,
            )

        async with self._lock:
            try:
                result = await self._run()
            except TelegramError as e:
                logger.error("Sync aborted: channel fetch failed: %s", e)
                result = SyncResult(success=False, error=e.error_code, message=str(e))
            except Exception as e:
                logger.exception("Sync aborted by unexpected error")
                result = SyncResult(success=False, error="sync_failed", message=str(e))
        return self._finish(result, started)

    @staticmethod
    def _finish(result: SyncResult, started: float) -> SyncResult:
        result.duration_ms = int((time.monotonic() - started) * 1000)
        result.finished_at = datetime.now(UTC)
        return result

    async def _run(self) -> SyncResult:
        logger.info("Fetching up to %d messages from %s", self.fetch_limit, self.channel)
        messages = await self._fetcher.fetch_channel_messages(self.channel, self.fetch_limit)
        result = SyncResult()
        if not messages:
            logger.info("No messages found in %s", self.channel)
            result.message = "No new messages to process"
            return result

        ingested = await self._store.list_telegram_message_ids(self.channel)
        new_messages = [message for message in messages if message.id not in ingested]
        result.skipped = len(messages) - len(new_messages)
        logger.info(
            "Found %d messages, %d new, %d already ingested",
            len(messages),
            len(new_messages),
            result.skipped,
        )

        for message in new_messages:
            outcome = await self._process_message(message, result)
            if outcome is _Outcome.SKIPPED:
                result.skipped += 1
            elif outcome is _Outcome.FAILED:
                result.errors += 1

        result.message = "Telegram sync completed"
        logger.info(
            "Sync finished: processed=%d skipped=%d errors=%d",
            result.processed,
            result.skipped,
            result.errors,
        )
        return result

    async def _process_message(self, message: TelegramMessage, result: SyncResult) -> _Outcome:
        text = message.text.strip()
        if len(text) < self.min_message_length:
            logger.info("Skipping message %s: too short (%d chars)", message.id, len(text))
            return _Outcome.SKIPPED

        stage = "rewrite"
        try:
            try:
                rewritten = await self._rewriter.rewrite(message.text, self.channel)
            except RewriteError as e:
                logger.error(
                    "Failed to rewrite message %s [%s]: %s", message.id, e.error_code, e
                )
                return _Outcome.FAILED

            stage = "image"
            keywords = [*rewritten.tags[:IMAGE_KEYWORD_TAGS], *FALLBACK_IMAGE_KEYWORDS]
            image_url = await self._image_finder.find_image(keywords, "landscape")

            stage = "slug"
            slug = await resolve_unique_slug(
                self._store, slugify(rewritten.title), self.slug_max_attempts
            )

            stage = "persist"
            post = await self._store.create_post(
                NewPost(
                    telegram_message_id=message.id,
                    original_channel=self.channel,
                    original_text=message.text,
                    rewritten_title=rewritten.title,
                    rewritten_content=rewritten.content,
                    summary=rewritten.summary,
                    tags=rewritten.tags,
                    slug=slug,
                    meta_title=rewritten.meta_title,
                    meta_description=rewritten.meta_description,
                    image_url=image_url,
                    image_source=ImageSource.UNSPLASH if image_url else ImageSource.AI_GENERATED,
                )
            )
        except DuplicateMessageError:
            logger.warning("Message %s was ingested by a concurrent run; skipping", message.id)
            return _Outcome.SKIPPED
        except DuplicatePostError as e:
            logger.error("Failed to store message %s: %s", message.id, e)
            return _Outcome.FAILED
        except Exception:
            logger.exception("Error processing message %s at stage %s", message.id, stage)
            return _Outcome.FAILED

        logger.info("Created post %s from message %s", post.id, message.id)
        result.processed += 1
        result.posts.append(
            SyncedPost(
                id=post.id, telegram_id=message.id, title=post.rewritten_title, status=post.status
            )
        )
        return _Outcome.CREATED
