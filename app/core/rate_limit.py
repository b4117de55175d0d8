"""Request rate limits (slowapi).

Admin endpoints are keyed by the token subject; public, cron and auth
endpoints are keyed by client IP.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Final, ParamSpec, TypeVar, cast

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.auth import verify_token
from app.core.config import settings

DEFAULT_RATE_LIMIT: Final[str] = "120/minute"
HEALTH_RATE_LIMIT: Final[str] = "300/minute"
AUTH_REGISTER_RATE_LIMIT: Final[str] = "5/minute"
AUTH_LOGIN_RATE_LIMIT: Final[str] = "10/minute"
SYNC_TRIGGER_RATE_LIMIT: Final[str] = "10/minute"
CHAT_RATE_LIMIT: Final[str] = "20/minute"

P = ParamSpec("P")
R = TypeVar("R")
KeyFunc = Callable[[Request], str]


def get_bearer_token(request: Request) -> str | None:
    """Token from ``Authorization: Bearer <token>``, or None for any other header shape."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def rate_limit_ip_key(request: Request) -> str:
    return f"ip:{get_remote_address(request)}"


def rate_limit_user_or_ip_key(request: Request) -> str:
    token = get_bearer_token(request)
    payload = verify_token(token) if token else None
    subject = payload.get("sub") if payload else None
    if isinstance(subject, str) and subject:
        return f"user:{subject}"
    return rate_limit_ip_key(request)


limiter = Limiter(
    key_func=rate_limit_user_or_ip_key,
    default_limits=[DEFAULT_RATE_LIMIT],
    storage_uri=settings.rate_limit_storage_url,
    # Redis outages degrade to per-process counters instead of failing requests.
    in_memory_fallback_enabled=True,
    in_memory_fallback=[DEFAULT_RATE_LIMIT],
    enabled=settings.environment != "test",
)


def limit(
    limit_value: str, *, key_func: KeyFunc | None = None
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Typed wrapper for ``limiter.limit``; ``key_func`` defaults to user-or-IP."""
    decorator = cast(
        Callable[..., Callable[[Callable[P, R]], Callable[P, R]]],
        limiter.limit,
    )
    return decorator(limit_value, key_func=key_func)
