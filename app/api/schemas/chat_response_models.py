"""Response models for the sales chat widget."""

from __future__ import annotations

from pydantic import BaseModel


class ChatResponse(BaseModel):
    success: bool = True
    message: str
    fallback: bool = False
