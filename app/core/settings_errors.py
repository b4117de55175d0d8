"""Startup configuration errors.

Kept apart from ``app.core.config`` so callers can catch them even when
importing the config module itself fails.
"""

from __future__ import annotations


class MissingRequiredSettingsError(Exception):
    """Raised when required settings are missing."""

    def __init__(self, missing_fields: list[str]) -> None:
        self.missing_fields = missing_fields
        super().__init__(f"Missing required environment variables: {', '.join(missing_fields)}")


class InvalidSettingsError(Exception):
    """Raised when settings are present but fail validation."""

    def __init__(self, invalid_fields: list[tuple[str, str]]) -> None:
        self.invalid_fields = invalid_fields
        summary = ", ".join(f"{field}: {message}" for field, message in invalid_fields)
        super().__init__(f"Invalid environment variables: {summary}")
