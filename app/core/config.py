from __future__ import annotations

import re
from typing import Annotated

from pydantic import Field, PostgresDsn, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from app.core.settings_errors import InvalidSettingsError, MissingRequiredSettingsError

__all__ = [
    "InvalidSettingsError",
    "MissingRequiredSettingsError",
    "Settings",
    "settings",
    "validate_settings",
]


CommaSeparated = Annotated[list[str], NoDecode]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Required environment variables
    postgres_user: str = Field(..., description="Postgres user (required)")
    postgres_password: str = Field(..., description="Postgres password (required)")
    postgres_host: str = Field(..., description="Postgres host (required)")
    postgres_port: int = Field(..., description="Postgres port (required)")
    postgres_db: str = Field(..., description="Postgres database name (required)")
    jwt_secret_key: str = Field(..., description="JWT secret key for token signing (required)")
    jwt_access_token_expire_minutes: int = Field(
        ..., description="JWT token expiration in minutes (required)"
    )

    # Upstream credentials. Each one is only needed by the operation that uses it,
    # so a missing value is reported by that operation rather than at startup.
    telegram_bot_token: str | None = Field(default=None, description="Telegram Bot API token")
    telegram_channel_id: str = Field(
        default="@ml_digest_daily", description="Source channel username or numeric id"
    )
    openrouter_api_key: str | None = Field(default=None, description="OpenRouter API key")
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    unsplash_access_key: str | None = Field(default=None, description="Unsplash access key")
    cron_secret: str | None = Field(default=None, description="Bearer secret for the sync job")
    admin_emails: CommaSeparated = Field(
        default_factory=list, description="Emails granted the ADMIN role on registration"
    )

    # Redis is optional; rate limits fall back to in-memory storage without it.
    redis_host: str | None = None
    redis_port: int = 6379
    redis_db: int = 0

    # Database/Redis urls built from components
    database_url: PostgresDsn | None = Field(
        default=None,
        description="Database connection URL",
    )
    rate_limit_storage_url: str | None = Field(
        default=None,
        description="Rate limit storage URL",
    )

    @model_validator(mode="after")
    def build_derived_urls(self) -> Settings:
        """Build URLs from components when missing."""
        if self.database_url is None:
            self.database_url = PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.postgres_user,
                password=self.postgres_password,
                host=self.postgres_host,
                port=self.postgres_port,
                path=self.postgres_db,
            )
        if self.rate_limit_storage_url is None:
            if self.redis_host:
                self.rate_limit_storage_url = (
                    f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"
                )
            else:
                self.rate_limit_storage_url = "memory://"
        return self

    # Optional environment variables (defaults provided)
    app_name: str = "chatbot24-blog-api"
    environment: str = "local"
    log_level: str = "INFO"
    jwt_algorithm: str = "HS256"
    site_url: str = "http://localhost:3000"

    rewrite_models: CommaSeparated = Field(
        default_factory=lambda: [
            "mistralai/mistral-7b-instruct:free",
            "meta-llama/llama-3.1-8b-instruct:free",
        ]
    )
    chat_models: CommaSeparated = Field(
        default_factory=lambda: [
            "mistralai/mistral-7b-instruct:free",
            "google/gemma-2-9b-it:free",
        ]
    )

    sync_fetch_limit: int = Field(default=20, ge=1, le=100)
    sync_min_message_length: int = Field(default=50, ge=0)
    slug_max_attempts: int = Field(default=50, ge=1)
    llm_timeout_seconds: float = Field(default=60.0, gt=0)
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    image_search_timeout_seconds: float = Field(default=8.0, gt=0)

    @field_validator("admin_emails", "rewrite_models", "chat_models", mode="before")
    @classmethod
    def split_comma_separated(cls, value: object) -> object:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("admin_emails")
    @classmethod
    def normalize_admin_emails(cls, value: list[str]) -> list[str]:
        return [email.casefold() for email in value]

    @staticmethod
    def _is_strong_jwt_secret(secret: str) -> bool:
        if len(secret) < 32:
            return False
        has_lower = re.search(r"[a-z]", secret) is not None
        has_upper = re.search(r"[A-Z]", secret) is not None
        has_digit = re.search(r"\d", secret) is not None
        has_symbol = re.search(r"[^\w\s]", secret) is not None
        return has_lower and has_upper and has_digit and has_symbol

    @model_validator(mode="after")
    def validate_jwt_secret_strength(self) -> Settings:
        if self.environment == "test":
            return self
        if not self._is_strong_jwt_secret(self.jwt_secret_key):
            raise ValueError(
                "JWT secret key must be at least 32 characters and include upper, lower, "
                "number, and symbol characters."
            )
        return self


def validate_settings() -> Settings:
    """Validate settings and raise exception for missing required fields.

    Raises:
        MissingRequiredSettingsError: If required environment variables are missing
        InvalidSettingsError: If values are present but fail validation
        ValidationError: For other validation errors
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        missing_fields: list[str] = []
        for error in e.errors():
            if error["type"] == "missing":
                field_name = error["loc"][0] if error["loc"] else "unknown"
                missing_fields.append(str(field_name).upper())

        if missing_fields:
            raise MissingRequiredSettingsError(missing_fields) from e

        invalid_fields: list[tuple[str, str]] = []
        for error in e.errors():
            field_path = ".".join(str(part) for part in error.get("loc", []))
            message = error.get("msg", "Invalid value")
            invalid_fields.append((field_path or "unknown", message))

        if invalid_fields:
            raise InvalidSettingsError(invalid_fields) from e

        # Re-raise if it's a different validation error
        raise


# Validate settings at import time.
# Exceptions will propagate to the importing module (e.g., app/main.py)
settings = validate_settings()
