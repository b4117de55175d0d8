"""Unit of Work: one transaction per request, session-scoped services from registry."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, cast

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session_maker
from app.services.auth_service import AuthService


class UnitOfWork:
    """Holds the request's session and builds session-scoped services on first use."""

    def __init__(self, session: AsyncSession, services: Any) -> None:
        self._session = session
        self._services = services
        self._auth_service: AuthService | None = None

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def auth_service(self) -> AuthService:
        if self._auth_service is None:
            factory = self._services["auth_service"]
            self._auth_service = cast(AuthService, factory(self._session))
        return self._auth_service


async def get_uow(request: Request) -> AsyncIterator[UnitOfWork]:
    """Per-request dependency: one session, commit on success, rollback on exception."""
    session_maker = get_session_maker()
    async with session_maker() as session:
        try:
            yield UnitOfWork(session, request.app.state.services)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
