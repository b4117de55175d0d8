"""Request models for the sales chat widget."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.prompt_sanitizer import MAX_CHAT_MESSAGE_CHARS, sanitize_chat_message

MAX_CHAT_HISTORY = 20


class ChatMessageIn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1, max_length=MAX_CHAT_MESSAGE_CHARS)

    @field_validator("content")
    @classmethod
    def sanitize_content(cls, value: str) -> str:
        return sanitize_chat_message(value)


class ChatRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{"messages": [{"role": "user", "content": "Сколько стоит бот?"}]}]
        }
    )

    messages: list[ChatMessageIn] = Field(..., min_length=1, max_length=MAX_CHAT_HISTORY)
