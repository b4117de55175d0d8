from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RewriteResult(BaseModel):
    """Structured article produced by the rewrite model.

    All six fields are mandatory and must be non-empty. ``tags`` is the one
    lenient field: anything that is not a list becomes an empty list.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    tags: list[str]
    meta_title: str = Field(..., min_length=1)
    meta_description: str = Field(..., min_length=1)

    @field_validator("title", "summary", "content", "meta_title", "meta_description", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value: Any) -> list[str]:
        """Trim whitespace, drop empty values, and de-duplicate tags."""
        if value is None:
            raise ValueError("tags is required")
        if not isinstance(value, list):
            return []
        normalized: list[str] = []
        seen: set[str] = set()
        for item in value:
            if not isinstance(item, str):
                continue
            cleaned = item.strip()
            if not cleaned:
                continue
            normalized_key = cleaned.casefold()
            if normalized_key in seen:
                continue
            seen.add(normalized_key)
            normalized.append(cleaned)
        return normalized
