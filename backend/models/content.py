"""Content item model - a unit of plannable/publishable social content.

Status lifecycle:

    draft -> review -> approved | rejected
    rejected -> draft | review
    review -> draft
    approved -> scheduled | review
    scheduled -> published | approved
    published is terminal
"""

import enum
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base, utcnow

# JSONB on Postgres, plain JSON elsewhere
StringList = JSON().with_variant(JSONB(), "postgresql")


class Platform(str, enum.Enum):
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    LINKEDIN = "linkedin"
    TWITTER = "twitter"


class ContentType(str, enum.Enum):
    VIDEO = "video"
    IMAGE = "image"
    CAROUSEL = "carousel"
    STORY = "story"
    POST = "post"


class ContentStatus(str, enum.Enum):
    DRAFT = "draft"
    REVIEW = "review"
    APPROVED = "approved"
    REJECTED = "rejected"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"


class CommentType(str, enum.Enum):
    COMMENT = "comment"
    APPROVAL = "approval"
    REJECTION = "rejection"
    REVISION = "revision"


STATUS_TRANSITIONS: dict[ContentStatus, frozenset[ContentStatus]] = {
    ContentStatus.DRAFT: frozenset({ContentStatus.REVIEW}),
    ContentStatus.REVIEW: frozenset({ContentStatus.APPROVED, ContentStatus.REJECTED, ContentStatus.DRAFT}),
    ContentStatus.REJECTED: frozenset({ContentStatus.DRAFT, ContentStatus.REVIEW}),
    ContentStatus.APPROVED: frozenset({ContentStatus.SCHEDULED, ContentStatus.REVIEW}),
    ContentStatus.SCHEDULED: frozenset({ContentStatus.PUBLISHED, ContentStatus.APPROVED}),
    ContentStatus.PUBLISHED: frozenset(),
}


def can_transition(current: ContentStatus, target: ContentStatus) -> bool:
    """Whether a content item may move from `current` to `target`."""
    if current == target:
        return True
    return target in STATUS_TRANSITIONS[current]


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


# Shared by content items, hashtag packs and social accounts
PlatformType = Enum(Platform, name="platform", values_callable=_enum_values)


class ContentItem(Base):
    """Content item owned by its creator, optionally produced for a client."""

    __tablename__ = "content_items"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4())
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    platform: Mapped[Platform] = mapped_column(PlatformType, nullable=False)
    content_type: Mapped[ContentType] = mapped_column(
        Enum(ContentType, name="contenttype", values_callable=_enum_values),
        nullable=False
    )
    status: Mapped[ContentStatus] = mapped_column(
        Enum(ContentStatus, name="contentstatus", values_callable=_enum_values),
        default=ContentStatus.DRAFT,
        nullable=False,
        index=True
    )
    scheduled_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    published_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    client_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )
    creator_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    script: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hashtags: Mapped[Optional[list]] = mapped_column(StringList, nullable=True)  # ["#tag1", "#tag2"]

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )

    # Relationships
    client: Mapped[Optional["Client"]] = relationship("Client", foreign_keys=[client_id])
    comments: Mapped[list["ContentComment"]] = relationship(
        "ContentComment",
        back_populates="content_item",
        cascade="all, delete-orphan",
        order_by="ContentComment.created_at"
    )

    def __repr__(self) -> str:
        return f"<ContentItem {self.id}: {self.title} ({self.status.value})>"


class ContentComment(Base):
    """Review comment on a content item. Approvals and rejections move its status."""

    __tablename__ = "content_comments"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4())
    )
    content_item_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("content_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[CommentType] = mapped_column(
        Enum(CommentType, name="commenttype", values_callable=_enum_values),
        default=CommentType.COMMENT,
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    content_item: Mapped["ContentItem"] = relationship("ContentItem", back_populates="comments")

    def __repr__(self) -> str:
        return f"<ContentComment {self.id} on {self.content_item_id} ({self.type.value})>"


# Import at bottom to avoid circular imports
from models.client import Client
