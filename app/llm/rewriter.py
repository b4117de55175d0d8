"""Channel post -> SEO article rewriting."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from app.llm.client import FallbackCompletionClient, LLMServiceError
from app.llm.prompts import REWRITE_SYSTEM_PROMPT, get_rewrite_prompt
from app.llm.schemas import RewriteResult

logger = logging.getLogger(__name__)

REWRITE_TEMPERATURE = 0.7
REWRITE_MAX_TOKENS = 2000

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


class RewriteError(Exception):
    """The rewrite could not produce a complete article."""

    def __init__(self, message: str, error_code: str = "rewrite_failed") -> None:
        super().__init__(message)
        self.error_code = error_code


def extract_json_payload(content: str) -> dict[str, Any]:
    """Parse the model answer, tolerating a fenced code block around the JSON.

    Raises:
        RewriteError: If neither the raw text nor a fenced block holds a JSON object.
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        match = _FENCED_BLOCK.search(content)
        if match is None:
            raise RewriteError(
                "Failed to parse AI response as JSON", "llm_response_invalid"
            ) from None
        try:
            parsed = json.loads(match.group(1))
        except json.JSONDecodeError as e:
            raise RewriteError(
                "Failed to parse fenced AI response as JSON", "llm_response_invalid"
            ) from e

    if not isinstance(parsed, dict):
        raise RewriteError("AI response is not a JSON object", "llm_response_invalid")
    return parsed


def parse_rewrite_response(content: str) -> RewriteResult:
    payload = extract_json_payload(content)
    try:
        return RewriteResult.model_validate(payload)
    except ValidationError as e:
        missing = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise RewriteError(
            f"Missing or invalid required field(s): {', '.join(missing)}", "llm_response_invalid"
        ) from e


class ContentRewriter:
    """Rewrites raw channel text into a structured article via the completion client."""

    def __init__(self, completion_client: FallbackCompletionClient) -> None:
        self._completion_client = completion_client

    async def rewrite(self, raw_text: str, source_label: str) -> RewriteResult:
        """Return the six-field article for ``raw_text``.

        Raises:
            RewriteError: On any upstream failure (status, timeout, empty body) or
                when the answer cannot be parsed into all required fields.
        """
        try:
            content = await self._completion_client.complete(
                [
                    {"role": "system", "content": REWRITE_SYSTEM_PROMPT},
                    {"role": "user", "content": get_rewrite_prompt(raw_text, source_label)},
                ],
                temperature=REWRITE_TEMPERATURE,
                max_tokens=REWRITE_MAX_TOKENS,
                json_mode=True,
            )
        except LLMServiceError as exc:
            raise RewriteError(str(exc), exc.error_code) from exc

        return parse_rewrite_response(content)
