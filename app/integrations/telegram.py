"""Telegram Bot API client for reading the source channel.

The bot must be an administrator of the channel, otherwise ``getUpdates``
never sees its posts.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.core.config import settings

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"
MAX_UPDATES_PER_CALL = 100


class TelegramError(Exception):
    """Base error for channel fetch failures."""

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class TelegramConfigError(TelegramError):
    def __init__(self, message: str = "TELEGRAM_BOT_TOKEN environment variable is not set") -> None:
        super().__init__(message, "configuration_error")


class TelegramAPIError(TelegramError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, "telegram_api_error")
        self.status_code = status_code


class _Chat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    username: str | None = None
    title: str | None = None


class _PhotoSize(BaseModel):
    model_config = ConfigDict(extra="ignore")

    file_id: str
    width: int = 0
    height: int = 0


class _ChannelPost(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message_id: int
    chat: _Chat
    date: int
    text: str | None = None
    caption: str | None = None
    media_group_id: str | None = None
    photo: list[_PhotoSize] = Field(default_factory=list)


class _Update(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int
    channel_post: _ChannelPost | None = None
    message: _ChannelPost | None = None

    @property
    def post(self) -> _ChannelPost | None:
        return self.channel_post or self.message


class TelegramMessage(BaseModel):
    """A channel post reduced to what the sync job needs."""

    id: int
    text: str
    date: datetime
    channel: str
    media_group_id: str | None = None
    photo_file_id: str | None = None


def normalize_channel_id(channel: str) -> str:
    return channel if channel.startswith("@") else f"@{channel}"


def _matches_channel(post: _ChannelPost, channel: str) -> bool:
    username = f"@{post.chat.username}" if post.chat.username else None
    return username == channel or str(post.chat.id) == channel.removeprefix("@")


def _to_message(post: _ChannelPost, channel: str) -> TelegramMessage:
    # Largest size is last in Telegram's photo array.
    photo_file_id = post.photo[-1].file_id if post.photo else None
    return TelegramMessage(
        id=post.message_id,
        text=post.text or post.caption or "",
        date=datetime.fromtimestamp(post.date, tz=UTC),
        channel=channel,
        media_group_id=post.media_group_id,
        photo_file_id=photo_file_id,
    )


class TelegramChannelFetcher:
    """Pulls the most recent posts of one channel through ``getUpdates``."""

    def __init__(
        self,
        bot_token: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bot_token = bot_token if bot_token is not None else settings.telegram_bot_token
        self._timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{TELEGRAM_API_URL}/bot{self._bot_token}",
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _call(self, method: str, payload: dict[str, Any] | None = None) -> Any:
        if not self._bot_token:
            raise TelegramConfigError()
        try:
            async with self._client() as client:
                response = await client.post(f"/{method}", json=payload or {})
        except httpx.TimeoutException as e:
            raise TelegramAPIError(f"Telegram API {method} timed out") from e
        except httpx.HTTPError as e:
            raise TelegramAPIError(f"Telegram API {method} request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code != httpx.codes.OK:
            description = data.get("description") if isinstance(data, dict) else None
            message = f"Telegram API error: {response.status_code} {response.reason_phrase}"
            if description:
                message += f" - {description}"
            raise TelegramAPIError(message, status_code=response.status_code)

        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise TelegramAPIError(f"Telegram API error: {description or 'Unknown error'}")
        return data.get("result")

    async def fetch_channel_messages(self, channel: str, limit: int = 20) -> list[TelegramMessage]:
        """Return up to ``limit`` most recent posts of ``channel`` in API order.

        Raises:
            TelegramConfigError: If no bot token is configured.
            TelegramAPIError: On transport failure, non-200 status or ``ok: false``.
        """
        normalized = normalize_channel_id(channel)
        result = await self._call(
            "getUpdates",
            {
                # Updates from other chats are mixed in; over-fetch before filtering.
                "limit": min(limit * 2, MAX_UPDATES_PER_CALL),
                "allowed_updates": ["channel_post", "message"],
            },
        )

        messages: list[TelegramMessage] = []
        for raw in result or []:
            try:
                update = _Update.model_validate(raw)
            except ValidationError:
                logger.warning("Skipping malformed Telegram update: %r", raw)
                continue
            post = update.post
            if post is None or not _matches_channel(post, normalized):
                continue
            messages.append(_to_message(post, normalized))

        return messages[-limit:] if limit > 0 else []
