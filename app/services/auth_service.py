"""Admin account service: registration, login and token subject lookup."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_password_hash, verify_password
from app.db.models.user import User, UserRole

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base error for authentication-related failures."""

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class UserAlreadyExistsError(AuthenticationError):
    def __init__(self, message: str = "Email already registered") -> None:
        super().__init__(message, "user_exists")


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, message: str = "Incorrect email or password") -> None:
        super().__init__(message, "invalid_credentials")


class PasswordTooLongError(AuthenticationError):
    """Raised when password exceeds the bcrypt limit of 72 bytes."""

    def __init__(
        self, message: str = "Password must not exceed 72 bytes when UTF-8 encoded"
    ) -> None:
        super().__init__(message, "password_too_long")


class AuthService:
    """Session-scoped user operations. The caller owns the transaction."""

    def __init__(self, session: AsyncSession, admin_emails: Iterable[str] = ()) -> None:
        self._session = session
        self._admin_emails = frozenset(email.casefold() for email in admin_emails)

    def role_for(self, email: str) -> UserRole:
        return UserRole.ADMIN if email.casefold() in self._admin_emails else UserRole.USER

    async def register_user(self, email: str, password: str) -> User:
        """Register a new account.

        The account is an administrator only when its email is listed in
        ``ADMIN_EMAILS``.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
            PasswordTooLongError: If the password exceeds 72 bytes when UTF-8 encoded.
        """
        result = await self._session.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none() is not None:
            raise UserAlreadyExistsError()

        try:
            hashed_password = get_password_hash(password)
        except ValueError as e:
            raise PasswordTooLongError() from e

        role = self.role_for(email)
        try:
            result = await self._session.execute(
                insert(User)
                .values(email=email, hashed_password=hashed_password, role=role)
                .returning(User)
            )
            new_user = result.scalar_one()
        except IntegrityError as e:
            # Lost a registration race on the unique email index.
            raise UserAlreadyExistsError() from e

        logger.info("Registered user %s with role %s", new_user.id, role.value)
        return new_user

    async def authenticate_user(self, email: str, password: str) -> User:
        """Return the user for valid credentials.

        Raises:
            InvalidCredentialsError: If email or password is incorrect.
            PasswordTooLongError: If the password exceeds 72 bytes when UTF-8 encoded.
        """
        result = await self._session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidCredentialsError()

        try:
            password_valid = verify_password(password, user.hashed_password)
        except ValueError as e:
            raise PasswordTooLongError() from e

        if not password_valid:
            raise InvalidCredentialsError()
        return user

    async def get_user_by_id(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)


def auth_service_factory_provider(
    admin_emails: Iterable[str] = (),
) -> Callable[[AsyncSession], AuthService]:
    """Registry entry: builds a session-scoped AuthService per unit of work."""
    emails = tuple(admin_emails)

    def factory(session: AsyncSession) -> AuthService:
        return AuthService(session, emails)

    return factory
