from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TypedDict

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)
from openai.types.chat import ChatCompletion

from app.core.config import settings

logger = logging.getLogger(__name__)


class ChatMessage(TypedDict):
    role: str
    content: str


class LLMServiceError(Exception):
    """Base error raised when the LLM service cannot fulfill a request."""

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class LLMConfigurationError(LLMServiceError):
    """No API key configured for the completion provider."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_not_configured")


class LLMUnavailableError(LLMServiceError):
    """LLM is unavailable (timeout, rate limit, or upstream outage)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_unavailable")


class LLMAuthenticationError(LLMServiceError):
    """LLM authentication failed (service credentials invalid)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_auth_failed")


class LLMInvalidResponseError(LLMServiceError):
    """LLM returned an invalid or unexpected response."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_response_invalid")


class CompletionProvider(ABC):
    """A chat-completion backend. One implementation is selected at startup."""

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """Return the assistant text for ``messages``. Raises LLMServiceError."""
        raise NotImplementedError


class OpenRouterProvider(CompletionProvider):
    """OpenRouter via its OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._api_key = api_key or settings.openrouter_api_key
        self.client: AsyncOpenAI | None = None
        if self._api_key:
            self.client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=base_url or settings.openrouter_base_url,
                timeout=timeout or settings.llm_timeout_seconds,
                max_retries=0,
                default_headers={
                    "HTTP-Referer": settings.site_url,
                    "X-Title": "ChatBot24 Content Generator",
                },
            )

    def _handle_errors(self, error: Exception) -> LLMServiceError:
        """Log error with appropriate message based on error type."""
        if isinstance(error, LLMServiceError):
            return error
        if isinstance(error, APITimeoutError):
            logger.error(f"OpenRouter request timed out. Error: {error}")
            return LLMUnavailableError("LLM request timed out. Try again.")
        elif isinstance(error, APIConnectionError):
            logger.error(f"OpenRouter connection failed. Error: {error}")
            return LLMUnavailableError("LLM service unreachable. Try again shortly.")
        elif isinstance(error, RateLimitError):
            logger.error(f"OpenRouter rate limit exceeded. Error: {error}")
            return LLMUnavailableError("LLM rate limit exceeded. Try again later.")
        elif isinstance(error, AuthenticationError):
            logger.error(f"OpenRouter authentication failed. Error: {error}")
            return LLMAuthenticationError("LLM authentication failed.")
        elif isinstance(error, APIError):
            logger.error(f"OpenRouter API error. Error: {error}")
            return LLMUnavailableError("LLM service error. Try again later.")
        elif isinstance(error, (IndexError, AttributeError)):
            logger.error(f"Unexpected response structure from OpenRouter. Error: {error}")
            return LLMInvalidResponseError("LLM returned an unexpected response.")
        elif isinstance(error, ValueError):
            logger.error(f"Invalid value encountered. Error: {error}")
            return LLMInvalidResponseError(str(error))
        else:
            logger.error(f"Unexpected error calling OpenRouter. Error: {error}")
            return LLMServiceError("LLM request failed. Try again later.", "llm_error")

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        if self.client is None:
            raise LLMConfigurationError("OPENROUTER_API_KEY is not set")
        try:
            kwargs: dict[str, object] = {
                "model": model,
                "messages": list(messages),
                "temperature": temperature,
            }
            if max_tokens is not None:
                kwargs["max_tokens"] = max_tokens
            if json_mode:
                kwargs["response_format"] = {"type": "json_object"}
            response: ChatCompletion = await self.client.chat.completions.create(  # type: ignore[call-overload]
                **kwargs
            )

            content = response.choices[0].message.content
            if not content:
                raise ValueError("Empty response from OpenRouter")
            return content

        except Exception as e:
            raise self._handle_errors(e) from e


class FallbackCompletionClient:
    """Try each model in order until one answers.

    Authentication and configuration failures are raised at once without
    trying the remaining models.
    """

    def __init__(self, provider: CompletionProvider, models: Sequence[str]) -> None:
        if not models:
            raise ValueError("At least one model is required")
        self._provider = provider
        self.models = list(models)

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        last_error: LLMServiceError | None = None
        for model in self.models:
            try:
                return await self._provider.complete(
                    messages,
                    model=model,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    json_mode=json_mode,
                )
            except (LLMAuthenticationError, LLMConfigurationError):
                raise
            except LLMServiceError as exc:
                logger.warning("Model %s failed (%s), trying next", model, exc.error_code)
                last_error = exc
        assert last_error is not None
        raise last_error

