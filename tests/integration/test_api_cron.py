"""Integration tests for the sync trigger endpoint.

The app runs with its real routing, auth check and error handlers; the sync
job's collaborators are in-memory fakes.
"""

from __future__ import annotations

import asyncio

import pytest
from fastapi import status
from httpx import AsyncClient

from app.api.schemas import SyncFailureResponse, SyncSuccessResponse
from app.core import config
from app.db.models.post import PostStatus
from app.integrations.telegram import TelegramAPIError
from app.services.sync_service import SyncService
from tests.fakes import (
    CRON_HEADERS,
    FakeChannelFetcher,
    FakeRewriter,
    InMemoryPostStore,
    make_message,
    make_post,
)

SYNC_URL = "/api/cron/sync-telegram"


class TestCronAuth:
    """The trigger is guarded by the shared cron secret."""

    @pytest.mark.asyncio
    async def test_missing_secret_header(self, http_client: AsyncClient) -> None:
        """Test that a request without a bearer secret is rejected."""
        # Act
        response = await http_client.post(SYNC_URL)

        # Assert
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        payload = response.json()
        assert payload["error"] == "unauthorized"
        assert payload["message"] == "Invalid or missing cron secret"

    @pytest.mark.asyncio
    async def test_wrong_secret(
        self, http_client: AsyncClient, fetcher: FakeChannelFetcher
    ) -> None:
        """Test that a wrong secret never starts a run."""
        response = await http_client.post(
            SYNC_URL, headers={"Authorization": "Bearer wrong-secret"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_non_bearer_scheme(self, http_client: AsyncClient) -> None:
        response = await http_client.post(
            SYNC_URL, headers={"Authorization": "Basic test-cron-secret"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_unconfigured_secret(
        self, http_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that a server without CRON_SECRET refuses every trigger."""
        monkeypatch.setattr(config.settings, "cron_secret", None)

        response = await http_client.post(SYNC_URL, headers=CRON_HEADERS)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        parsed = SyncFailureResponse.model_validate(response.json())
        assert parsed.success is False
        assert parsed.error == "configuration_error"
        assert parsed.message == "Server configuration error"


class TestCronSync:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "POST"])
    async def test_sync_creates_pending_posts(
        self,
        method: str,
        http_client: AsyncClient,
        fetcher: FakeChannelFetcher,
        post_store: InMemoryPostStore,
    ) -> None:
        """Test that both verbs run the sync and report the created posts."""
        # Arrange
        fetcher.messages = [make_message(1), make_message(2)]

        # Act
        response = await http_client.request(method, SYNC_URL, headers=CRON_HEADERS)

        # Assert
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        parsed = SyncSuccessResponse.model_validate(body)
        assert parsed.success is True
        assert parsed.processed == 2
        assert parsed.skipped == 0
        assert parsed.errors == 0
        assert isinstance(body["duration"], int)
        assert "timestamp" in body
        assert {post["telegramId"] for post in body["posts"]} == {1, 2}
        assert all(post["status"] == "PENDING" for post in body["posts"])
        assert len(post_store.posts) == 2

    @pytest.mark.asyncio
    async def test_mixed_batch_counts(
        self,
        http_client: AsyncClient,
        fetcher: FakeChannelFetcher,
        rewriter: FakeRewriter,
        post_store: InMemoryPostStore,
    ) -> None:
        """Test ingested, new and failing messages are each counted once."""
        # Arrange
        post_store.add(make_post(slug="already", telegram_message_id=101))
        failing = make_message(103)
        fetcher.messages = [make_message(101), make_message(102), failing]
        rewriter.fail_on(failing.text)

        # Act
        response = await http_client.post(SYNC_URL, headers=CRON_HEADERS)

        # Assert
        body = response.json()
        assert response.status_code == status.HTTP_200_OK
        assert (body["processed"], body["skipped"], body["errors"]) == (1, 1, 1)
        assert [post["telegramId"] for post in body["posts"]] == [102]
        created = next(p for p in post_store.posts.values() if p.telegram_message_id == 102)
        assert created.status == PostStatus.PENDING

    @pytest.mark.asyncio
    async def test_empty_channel(self, http_client: AsyncClient) -> None:
        response = await http_client.get(SYNC_URL, headers=CRON_HEADERS)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["processed"] == 0
        assert body["message"] == "No new messages to process"

    @pytest.mark.asyncio
    async def test_fetch_failure_is_500(
        self, http_client: AsyncClient, fetcher: FakeChannelFetcher
    ) -> None:
        """Test that a fatal fetch failure is reported with its error code."""
        fetcher.error = TelegramAPIError("Telegram API error: 502 Bad Gateway", status_code=502)

        response = await http_client.post(SYNC_URL, headers=CRON_HEADERS)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        parsed = SyncFailureResponse.model_validate(response.json())
        assert parsed.error == "telegram_api_error"
        assert parsed.duration is not None

    @pytest.mark.asyncio
    async def test_overlapping_trigger_is_409(
        self,
        http_client: AsyncClient,
        sync_service: SyncService,
        fetcher: FakeChannelFetcher,
    ) -> None:
        """Test a trigger arriving during a run is refused with 409."""
        # Arrange
        release = asyncio.Event()
        original_fetch = fetcher.fetch_channel_messages

        async def slow_fetch(channel: str, limit: int = 20) -> list:
            await release.wait()
            return await original_fetch(channel, limit)

        fetcher.fetch_channel_messages = slow_fetch  # type: ignore[method-assign]
        running = asyncio.create_task(sync_service.run_sync())
        await asyncio.sleep(0)

        # Act
        response = await http_client.post(SYNC_URL, headers=CRON_HEADERS)
        release.set()
        await running

        # Assert
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "sync_in_progress"
