"""Social account model - a connected platform account and its tokens."""

import enum
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base, utcnow
from models.content import Platform, PlatformType, _enum_values
from models.notification import JsonObject


class SocialAccountStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    ERROR = "error"


class SocialAccount(Base):
    """Platform account connected by a user, optionally on behalf of a client.

    Tokens are stored for the platform integrations and never leave the API.
    """

    __tablename__ = "social_accounts"
    __table_args__ = (
        UniqueConstraint("user_id", "platform", "account_id", name="uq_social_account"),
    )

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
    client_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )
    platform: Mapped[Platform] = mapped_column(PlatformType, nullable=False)
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    token_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    account_data: Mapped[dict] = mapped_column(JsonObject, default=dict)
    status: Mapped[SocialAccountStatus] = mapped_column(
        Enum(SocialAccountStatus, name="socialaccountstatus", values_callable=_enum_values),
        default=SocialAccountStatus.ACTIVE,
        nullable=False
    )
    last_sync: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )

    client: Mapped[Optional["Client"]] = relationship("Client", foreign_keys=[client_id])

    def __repr__(self) -> str:
        return f"<SocialAccount {self.platform.value}:{self.username}>"
