from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Enum,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class PostStatus(str, enum.Enum):
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    REJECTED = "REJECTED"


CHANNEL_MESSAGE_CONSTRAINT = "uq_posts_channel_message"


class ImageSource(str, enum.Enum):
    UNSPLASH = "UNSPLASH"
    AI_GENERATED = "AI_GENERATED"
    NONE = "NONE"


def _new_post_id() -> str:
    return uuid.uuid4().hex


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        # Idempotency key for channel ingestion; the sync job relies on this
        # constraint rather than on its own read-then-insert check.
        UniqueConstraint(
            "original_channel", "telegram_message_id", name=CHANNEL_MESSAGE_CONSTRAINT
        ),
        CheckConstraint(
            "(status = 'PUBLISHED') = (published_at IS NOT NULL)",
            name="ck_posts_published_at_matches_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_post_id)
    telegram_message_id: Mapped[int] = mapped_column(BigInteger, index=True)
    original_channel: Mapped[str] = mapped_column(String(100))
    original_text: Mapped[str] = mapped_column(Text)

    rewritten_title: Mapped[str] = mapped_column(String(300))
    rewritten_content: Mapped[str] = mapped_column(Text)
    summary: Mapped[str] = mapped_column(Text)
    tags: Mapped[list[str]] = mapped_column(ARRAY(String(100)), default=list)
    meta_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(String(400), nullable=True)

    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    image_source: Mapped[ImageSource] = mapped_column(
        Enum(ImageSource, name="image_source"), default=ImageSource.NONE
    )

    slug: Mapped[str] = mapped_column(String(120), unique=True, index=True)
    status: Mapped[PostStatus] = mapped_column(
        Enum(PostStatus, name="post_status"), default=PostStatus.PENDING, index=True
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    views: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
