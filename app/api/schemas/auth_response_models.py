"""Response models for admin account endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from app.db.models.user import UserRole


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: UserRole
