"""Scheduled trigger for the Telegram -> blog sync job."""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.dependencies.services import get_sync_service
from app.api.openapi_responses import RATE_LIMITED, ErrorExample, error_responses
from app.api.schemas.sync_response_models import (
    SyncedPostData,
    SyncFailureResponse,
    SyncSuccessResponse,
)
from app.core import config
from app.core.errors import build_http_error
from app.core.rate_limit import (
    SYNC_TRIGGER_RATE_LIMIT,
    get_bearer_token,
    limit,
    rate_limit_ip_key,
)
from app.services.sync_service import SyncResult, SyncService

logger = logging.getLogger(__name__)

router = APIRouter()

_SYNC_RESPONSES = {
    **error_responses(
        ErrorExample(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="unauthorized",
            message="Invalid or missing cron secret",
            description="Bearer secret does not match CRON_SECRET",
        ),
        RATE_LIMITED,
    ),
    status.HTTP_409_CONFLICT: {
        "model": SyncFailureResponse,
        "description": "Another sync run is in progress",
    },
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "model": SyncFailureResponse,
        "description": "Misconfiguration or fatal sync failure",
    },
}


def _failure(status_code: int, body: SyncFailureResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=body.model_dump(by_alias=True, mode="json")
    )


def _to_response(result: SyncResult) -> SyncSuccessResponse | JSONResponse:
    if result.success:
        return SyncSuccessResponse(
            message=result.message or "Telegram sync completed",
            processed=result.processed,
            skipped=result.skipped,
            errors=result.errors,
            posts=[
                SyncedPostData(
                    id=post.id, telegram_id=post.telegram_id, title=post.title, status=post.status
                )
                for post in result.posts
            ],
            duration=result.duration_ms,
            timestamp=result.finished_at,
        )

    status_code = (
        status.HTTP_409_CONFLICT
        if result.error == "sync_in_progress"
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return _failure(
        status_code,
        SyncFailureResponse(
            error=result.error or "sync_failed",
            message=result.message or "Sync failed",
            duration=result.duration_ms,
        ),
    )


@router.api_route(
    "/sync-telegram",
    methods=["GET", "POST"],
    summary="Run Telegram sync",
    description=(
        "Fetch recent channel posts, rewrite new ones and store them as PENDING. "
        "Requires `Authorization: Bearer <CRON_SECRET>`."
    ),
    response_model=SyncSuccessResponse,
    responses=_SYNC_RESPONSES,
)
@limit(SYNC_TRIGGER_RATE_LIMIT, key_func=rate_limit_ip_key)
async def sync_telegram(
    request: Request,
    sync_service: SyncService = Depends(get_sync_service),
) -> SyncSuccessResponse | JSONResponse:
    expected = config.settings.cron_secret
    if not expected:
        logger.error("CRON_SECRET is not configured; refusing to run sync")
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            SyncFailureResponse(
                error="configuration_error", message="Server configuration error"
            ),
        )

    token = get_bearer_token(request)
    if token is None or not secrets.compare_digest(token.encode(), expected.encode()):
        logger.warning("Unauthorized sync trigger attempt")
        raise build_http_error(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="unauthorized",
            message="Invalid or missing cron secret",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("Sync triggered via %s", request.method)
    result = await sync_service.run_sync()
    return _to_response(result)
