"""Database models."""

from database import Base

# Accounts and tenancy
from models.user import User, UserRole, UserStatus
from models.workspace import Workspace, WorkspaceMember, MemberRole, MemberStatus
from models.client import Client, ClientStatus

# Content models
from models.content import (
    CommentType,
    ContentComment,
    ContentItem,
    ContentStatus,
    ContentType,
    Platform,
)
from models.hashtag_pack import HashtagPack

# Platform accounts and messaging
from models.social_account import SocialAccount, SocialAccountStatus
from models.notification import Notification

__all__ = [
    # Base
    "Base",
    # Accounts and tenancy
    "User",
    "UserRole",
    "UserStatus",
    "Workspace",
    "WorkspaceMember",
    "MemberRole",
    "MemberStatus",
    "Client",
    "ClientStatus",
    # Content
    "ContentItem",
    "ContentComment",
    "ContentStatus",
    "ContentType",
    "CommentType",
    "Platform",
    "HashtagPack",
    # Platform accounts and messaging
    "SocialAccount",
    "SocialAccountStatus",
    "Notification",
]
