from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

MAX_CHAT_MESSAGE_CHARS = 2000

# Tab, LF and CR are allowed; visitors paste multi-line questions.
_CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_INJECTION_PATTERNS = [
    re.compile(r"ignore (all|previous|prior) instructions", re.IGNORECASE),
    re.compile(r"игнорируй (все|предыдущие) инструкции", re.IGNORECASE),
    re.compile(r"system prompt", re.IGNORECASE),
    re.compile(r"системн\w* промпт", re.IGNORECASE),
    re.compile(r"jailbreak", re.IGNORECASE),
]
_BLANK_LINES_PATTERN = re.compile(r"\n{3,}")


class PromptValidationError(ValueError):
    """Raised when a chat message is rejected before reaching the model."""

    error_code: str = "invalid_prompt"


def sanitize_chat_message(content: str) -> str:
    """Validate one visitor message and return it normalized for the model."""
    if _CONTROL_CHARS_PATTERN.search(content):
        raise PromptValidationError("Message contains unsupported control characters.")
    for pattern in _INJECTION_PATTERNS:
        if pattern.search(content):
            raise PromptValidationError("Message contains disallowed instruction patterns.")

    sanitized = _BLANK_LINES_PATTERN.sub("\n\n", content.replace("\r\n", "\n")).strip()
    if not sanitized:
        raise PromptValidationError("Message must not be empty.")
    if len(sanitized) > MAX_CHAT_MESSAGE_CHARS:
        raise PromptValidationError(
            f"Message must not exceed {MAX_CHAT_MESSAGE_CHARS} characters."
        )

    if sanitized != content:
        logger.debug(
            "Normalized chat message",
            extra={"original_length": len(content), "sanitized_length": len(sanitized)},
        )
    return sanitized
