"""Hashtag pack model - a saved, reusable set of hashtags."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from database import Base, utcnow
from models.content import Platform, PlatformType, StringList


class HashtagPack(Base):
    """Hashtag pack private to the user who saved it."""

    __tablename__ = "hashtag_packs"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    hashtags: Mapped[list] = mapped_column(StringList, nullable=False)
    purpose: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    platform: Mapped[Optional[Platform]] = mapped_column(PlatformType, nullable=True)
    usage_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<HashtagPack {self.name} ({len(self.hashtags)} tags)>"
