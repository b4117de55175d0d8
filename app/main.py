from __future__ import annotations

import logging
import sys
import types
from importlib.metadata import PackageNotFoundError, version
from typing import Any, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ExceptionHandler

from app.core.settings_errors import InvalidSettingsError, MissingRequiredSettingsError

# Settings are validated at import; report problems and exit before anything else loads.
try:
    from app.core.config import settings
except MissingRequiredSettingsError as e:
    print("ERROR: Missing required environment variables:", file=sys.stderr)
    for field in e.missing_fields:
        print(f"  - {field}", file=sys.stderr)
    print("\nPlease set these in your .env file (see env.example for reference)", file=sys.stderr)
    sys.exit(1)
except InvalidSettingsError as e:
    print("ERROR: Invalid environment variable values:", file=sys.stderr)
    for field, message in e.invalid_fields:
        print(f"  - {field}: {message}", file=sys.stderr)
    print(
        "\nPlease update these in your .env file (see env.example for reference)",
        file=sys.stderr,
    )
    sys.exit(1)

from app.api.router import router as api_router  # noqa: E402
from app.core.errors import (  # noqa: E402
    http_exception_handler,
    rate_limit_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from app.core.lifespan import lifespan  # noqa: E402
from app.core.logging import configure_logging  # noqa: E402
from app.core.rate_limit import limiter  # noqa: E402
from app.db.session import get_session_maker  # noqa: E402
from app.integrations.telegram import TelegramChannelFetcher  # noqa: E402
from app.integrations.unsplash import UnsplashImageFinder  # noqa: E402
from app.llm.client import FallbackCompletionClient, OpenRouterProvider  # noqa: E402
from app.llm.rewriter import ContentRewriter  # noqa: E402
from app.services.auth_service import auth_service_factory_provider  # noqa: E402
from app.services.blog_service import BlogService  # noqa: E402
from app.services.chat_service import ChatService  # noqa: E402
from app.services.moderation_service import ModerationService  # noqa: E402
from app.services.post_store import SqlAlchemyPostStore  # noqa: E402
from app.services.sync_service import SyncService  # noqa: E402


def build_services() -> dict[str, Any]:
    """Wire the app-wide service registry. Nothing here touches the network."""
    provider = OpenRouterProvider()
    store = SqlAlchemyPostStore(get_session_maker())
    return {
        "auth_service": auth_service_factory_provider(settings.admin_emails),
        "sync_service": SyncService(
            fetcher=TelegramChannelFetcher(),
            rewriter=ContentRewriter(FallbackCompletionClient(provider, settings.rewrite_models)),
            image_finder=UnsplashImageFinder(),
            store=store,
            channel=settings.telegram_channel_id,
            fetch_limit=settings.sync_fetch_limit,
            min_message_length=settings.sync_min_message_length,
            slug_max_attempts=settings.slug_max_attempts,
        ),
        "moderation_service": ModerationService(store),
        "blog_service": BlogService(store),
        "chat_service": ChatService(FallbackCompletionClient(provider, settings.chat_models)),
    }


def create_app() -> FastAPI:
    configure_logging()

    try:
        api_version = version("chatbot24-blog-api")
    except PackageNotFoundError:
        api_version = "0.1.0"
        logging.warning("chatbot24-blog-api package not found, using fallback version 0.1.0")

    app = FastAPI(
        title=settings.app_name,
        version=api_version,
        debug=settings.environment == "local",
        lifespan=lifespan,
    )
    app.add_exception_handler(
        StarletteHTTPException, cast(ExceptionHandler, http_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, request_validation_exception_handler)
    )
    app.add_exception_handler(
        RateLimitExceeded, cast(ExceptionHandler, rate_limit_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, unhandled_exception_handler))
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.include_router(api_router, prefix="/api")

    app.state.services = types.MappingProxyType(build_services())
    return app


app = create_app()
