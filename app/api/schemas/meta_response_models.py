"""Response models for meta API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"examples": [{"status": "ok", "version": "0.1.0"}]}
    )

    status: str = Field(..., description="Service status", examples=["ok"])
    version: str | None = Field(default=None, description="Deployed API version")
