"""Sales assistant for the landing-page chat widget."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from app.llm.client import ChatMessage, FallbackCompletionClient, LLMServiceError
from app.llm.prompts import CHAT_FALLBACK_REPLY, CHAT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 500


@dataclass(frozen=True)
class ChatReply:
    message: str
    fallback: bool = False


class ChatService:
    def __init__(self, completion_client: FallbackCompletionClient) -> None:
        self._completion_client = completion_client

    async def reply(self, history: Sequence[ChatMessage]) -> ChatReply:
        """Answer the visitor's last message.

        Any model failure degrades to a canned hand-off reply flagged
        ``fallback=True``; the widget never sees an error.
        """
        messages: list[ChatMessage] = [
            {"role": "system", "content": CHAT_SYSTEM_PROMPT},
            *history,
        ]
        try:
            content = await self._completion_client.complete(
                messages, temperature=CHAT_TEMPERATURE, max_tokens=CHAT_MAX_TOKENS
            )
        except LLMServiceError as exc:
            logger.warning("Chat completion failed (%s), sending fallback reply", exc.error_code)
            return ChatReply(message=CHAT_FALLBACK_REPLY, fallback=True)
        if not content.strip():
            return ChatReply(message=CHAT_FALLBACK_REPLY, fallback=True)
        return ChatReply(message=content.strip())
