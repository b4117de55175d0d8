from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter, Request

from app.api.admin_posts_api import router as admin_posts_router
from app.api.auth_api import router as auth_router
from app.api.blog_api import router as blog_router
from app.api.chat_api import router as chat_router
from app.api.cron_api import router as cron_router
from app.api.openapi_responses import rate_limited_response
from app.api.schemas.meta_response_models import HealthResponse
from app.core.rate_limit import HEALTH_RATE_LIMIT, limit, rate_limit_ip_key

router = APIRouter()


def _api_version() -> str | None:
    try:
        return version("chatbot24-blog-api")
    except PackageNotFoundError:
        return None


@router.get(
    "/health",
    tags=["meta"],
    summary="Health check",
    response_model=HealthResponse,
    responses=rate_limited_response(),
)
@limit(HEALTH_RATE_LIMIT, key_func=rate_limit_ip_key)
def health(request: Request) -> HealthResponse:
    """Check the health of the application."""
    return HealthResponse(status="ok", version=_api_version())


router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(cron_router, prefix="/cron", tags=["cron"])
router.include_router(admin_posts_router, prefix="/admin/posts", tags=["admin"])
router.include_router(blog_router, prefix="/blog", tags=["blog"])
router.include_router(chat_router, prefix="/chat", tags=["chat"])
