"""Admin panel accounts: registration, login and the current user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from app.api.dependencies.current_user import get_current_user
from app.api.dependencies.unit_of_work import UnitOfWork, get_uow
from app.api.openapi_responses import (
    RATE_LIMITED,
    UNAUTHORIZED,
    ErrorExample,
    error_responses,
)
from app.api.schemas.auth_request_models import LoginUserRequest, RegisterUserRequest
from app.api.schemas.auth_response_models import AccessTokenResponse, UserResponse
from app.core.auth import create_access_token
from app.core.errors import build_http_error
from app.core.rate_limit import (
    AUTH_LOGIN_RATE_LIMIT,
    AUTH_REGISTER_RATE_LIMIT,
    limit,
    rate_limit_ip_key,
)
from app.db.models.user import User
from app.services.auth_service import (
    AuthenticationError,
    InvalidCredentialsError,
    PasswordTooLongError,
    UserAlreadyExistsError,
)

router = APIRouter()

_PASSWORD_TOO_LONG = ErrorExample(
    status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
    error="password_too_long",
    message="Password must not exceed 72 bytes when UTF-8 encoded",
    description="Invalid input",
)


def _status_for(error: AuthenticationError) -> int:
    if isinstance(error, InvalidCredentialsError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(error, PasswordTooLongError):
        return status.HTTP_422_UNPROCESSABLE_CONTENT
    if isinstance(error, UserAlreadyExistsError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


@router.post(
    "/register",
    summary="Register user",
    description="Create an account. Emails listed in ADMIN_EMAILS receive the ADMIN role.",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(
        ErrorExample(
            status_code=status.HTTP_409_CONFLICT,
            error="user_exists",
            message="Email already registered",
            description="Email already registered",
        ),
        _PASSWORD_TOO_LONG,
        RATE_LIMITED,
    ),
)
@limit(AUTH_REGISTER_RATE_LIMIT, key_func=rate_limit_ip_key)
async def register(
    request: Request,
    user_data: RegisterUserRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> UserResponse:
    try:
        new_user = await uow.auth_service.register_user(user_data.email, user_data.password)
    except AuthenticationError as e:
        raise build_http_error(
            status_code=_status_for(e), error=e.error_code, message=str(e)
        ) from e
    return UserResponse.model_validate(new_user)


@router.post(
    "/login",
    summary="Log in",
    description="Authenticate credentials and return a bearer access token.",
    response_model=AccessTokenResponse,
    responses=error_responses(
        ErrorExample(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="invalid_credentials",
            message="Incorrect email or password",
            description="Invalid credentials",
        ),
        _PASSWORD_TOO_LONG,
        RATE_LIMITED,
    ),
)
@limit(AUTH_LOGIN_RATE_LIMIT, key_func=rate_limit_ip_key)
async def login(
    request: Request,
    credentials: LoginUserRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> AccessTokenResponse:
    try:
        user = await uow.auth_service.authenticate_user(credentials.email, credentials.password)
    except AuthenticationError as e:
        status_code = _status_for(e)
        raise build_http_error(
            status_code=status_code,
            error=e.error_code,
            message=str(e),
            headers=(
                {"WWW-Authenticate": "Bearer"}
                if status_code == status.HTTP_401_UNAUTHORIZED
                else None
            ),
        ) from e

    return AccessTokenResponse(access_token=create_access_token(data={"sub": str(user.id)}))


@router.get(
    "/me",
    summary="Get current user",
    response_model=UserResponse,
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
