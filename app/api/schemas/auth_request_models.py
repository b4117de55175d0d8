"""Request models for admin account endpoints."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.auth import MAX_PASSWORD_BYTES


def _validate_password_bytes(password: str) -> str:
    # 50 characters can still exceed bcrypt's byte limit with multi-byte UTF-8.
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must not exceed {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return password


class RegisterUserRequest(BaseModel):
    email: EmailStr = Field(..., max_length=320, description="Valid email address")
    password: str = Field(
        ..., min_length=8, max_length=50, description="Password between 8 and 50 characters"
    )

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _validate_password_bytes(v)


class LoginUserRequest(BaseModel):
    email: EmailStr = Field(..., max_length=320, description="Valid email address")
    password: str = Field(..., min_length=1, max_length=50)

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _validate_password_bytes(v)
