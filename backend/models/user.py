"""User model."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from database import Base, utcnow


class UserRole(str, enum.Enum):
    """Account roles. Flat: no role implies another."""
    ADMIN = "admin"        # Platform administrator
    AGENCY = "agency"      # Manages workspaces of clients
    CREATOR = "creator"    # Independent content creator
    CLIENT = "client"      # End customer with a self-service login


class UserStatus(str, enum.Enum):
    """Account status. Only ACTIVE accounts may authenticate."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class User(Base):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4())
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, values_callable=lambda enum: [e.value for e in enum]),
        default=UserRole.CREATOR,
        nullable=False
    )
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus, values_callable=lambda enum: [e.value for e in enum]),
        default=UserStatus.ACTIVE,
        nullable=False
    )

    # Profile fields
    avatar_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(50), nullable=True, default="UTC")

    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"
