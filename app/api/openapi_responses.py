"""OpenAPI ``responses=`` fragments for the error envelope."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import status

from app.core.errors import ErrorResponse


@dataclass(frozen=True)
class ErrorExample:
    status_code: int
    error: str
    message: str
    description: str
    summary: str | None = None
    details: Any | None = None
    example_name: str | None = None


def error_responses(*examples: ErrorExample) -> dict[int | str, dict[str, Any]]:
    """Group examples by status code into FastAPI ``responses`` entries."""
    responses: dict[int | str, dict[str, Any]] = {}
    for example in examples:
        response = responses.setdefault(
            example.status_code,
            {
                "model": ErrorResponse,
                "description": example.description,
                "content": {"application/json": {"examples": {}}},
            },
        )
        payload: dict[str, Any] = {"error": example.error, "message": example.message}
        if example.details is not None:
            payload["details"] = example.details
        response["content"]["application/json"]["examples"][
            example.example_name or example.error
        ] = {"summary": example.summary or example.description, "value": payload}
    return responses


RATE_LIMITED = ErrorExample(
    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    error="rate_limited",
    message="Too many requests",
    description="Rate limit exceeded",
)
UNAUTHORIZED = ErrorExample(
    status_code=status.HTTP_401_UNAUTHORIZED,
    error="unauthorized",
    message="Could not validate credentials",
    description="Missing or invalid token",
)
FORBIDDEN = ErrorExample(
    status_code=status.HTTP_403_FORBIDDEN,
    error="forbidden",
    message="Admin access required",
    description="Authenticated user is not an administrator",
)
POST_NOT_FOUND = ErrorExample(
    status_code=status.HTTP_404_NOT_FOUND,
    error="not_found",
    message="Post not found",
    description="No post with this id or slug",
)
VALIDATION_ERROR = ErrorExample(
    status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
    error="validation_error",
    message="Request validation failed",
    description="Invalid request parameters",
    details=[{"field": "limit", "message": "Input should be less than or equal to 50"}],
)


def rate_limited_response() -> dict[int | str, dict[str, Any]]:
    return error_responses(RATE_LIMITED)


def admin_responses(*extra: ErrorExample) -> dict[int | str, dict[str, Any]]:
    return error_responses(UNAUTHORIZED, FORBIDDEN, *extra, VALIDATION_ERROR, RATE_LIMITED)
