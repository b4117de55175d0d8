"""Dependencies that resolve the caller from the bearer token."""

from __future__ import annotations

import logging

from fastapi import Depends, status

from app.api.dependencies.unit_of_work import UnitOfWork, get_uow
from app.core.auth import oauth2_scheme, verify_token
from app.core.errors import build_http_error
from app.db.models.user import User

logger = logging.getLogger(__name__)


async def get_current_user(
    token: str = Depends(oauth2_scheme), uow: UnitOfWork = Depends(get_uow)
) -> User:
    credentials_exception = build_http_error(
        status_code=status.HTTP_401_UNAUTHORIZED,
        error="unauthorized",
        message="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = verify_token(token)
    if payload is None:
        raise credentials_exception

    user_id_value = payload.get("sub")
    if not isinstance(user_id_value, str):
        raise credentials_exception

    try:
        user_id = int(user_id_value)
    except ValueError:
        raise credentials_exception from None

    user = await uow.auth_service.get_user_by_id(user_id)
    if user is None:
        raise credentials_exception
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Gate for moderation endpoints: authenticated and role ADMIN."""
    if not current_user.is_admin:
        logger.warning("User %s denied admin access", current_user.id)
        raise build_http_error(
            status_code=status.HTTP_403_FORBIDDEN,
            error="forbidden",
            message="Admin access required",
        )
    return current_user
