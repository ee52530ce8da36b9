"""Initial schema: accounts, workspaces, clients, content and hashtag packs.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18
"""

from typing import Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, None] = None
depends_on: Union[str, None] = None

user_role = sa.Enum("admin", "agency", "creator", "client", name="userrole")
user_status = sa.Enum("active", "inactive", "suspended", name="userstatus")
member_role = sa.Enum("admin", "member", "viewer", name="memberrole")
member_status = sa.Enum("active", "inactive", "pending", name="memberstatus")
client_status = sa.Enum("active", "inactive", "paused", name="clientstatus")
platform = sa.Enum("tiktok", "instagram", "youtube", "linkedin", "twitter", name="platform")
content_type = sa.Enum("video", "image", "carousel", "story", "post", name="contenttype")
content_status = sa.Enum(
    "draft", "review", "approved", "rejected", "scheduled", "published", name="contentstatus"
)
comment_type = sa.Enum("comment", "approval", "rejection", "revision", name="commenttype")


def _timestamps(nullable: bool = True) -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=nullable),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=nullable),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("status", user_status, nullable=False),
        sa.Column("avatar_url", sa.String(1000), nullable=True),
        sa.Column("timezone", sa.String(50), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "workspaces",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("owner_id", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_workspaces_owner_id", "workspaces", ["owner_id"])

    op.create_table(
        "workspace_members",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("workspace_id", UUID(as_uuid=False), sa.ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", member_role, nullable=False),
        sa.Column("status", member_status, nullable=False),
        sa.Column("invited_by", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("workspace_id", "user_id", name="uix_workspace_members_workspace_user"),
    )
    op.create_index("ix_workspace_members_workspace_id", "workspace_members", ["workspace_id"])
    op.create_index("ix_workspace_members_user_id", "workspace_members", ["user_id"])

    op.create_table(
        "clients",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("brand", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("industry", sa.String(255), nullable=True),
        sa.Column("website_url", sa.String(500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("user_id", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("creator_id", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("workspace_id", UUID(as_uuid=False), sa.ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=True),
        sa.Column("status", client_status, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_clients_user_id", "clients", ["user_id"])
    op.create_index("ix_clients_creator_id", "clients", ["creator_id"])
    op.create_index("ix_clients_workspace_id", "clients", ["workspace_id"])

    op.create_table(
        "content_items",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("platform", platform, nullable=False),
        sa.Column("content_type", content_type, nullable=False),
        sa.Column("status", content_status, nullable=False),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("client_id", UUID(as_uuid=False), sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=True),
        sa.Column("creator_id", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("script", sa.Text(), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("hashtags", JSONB(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_content_items_status", "content_items", ["status"])
    op.create_index("ix_content_items_client_id", "content_items", ["client_id"])
    op.create_index("ix_content_items_creator_id", "content_items", ["creator_id"])

    op.create_table(
        "content_comments",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("content_item_id", UUID(as_uuid=False), sa.ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("type", comment_type, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_content_comments_content_item_id", "content_comments", ["content_item_id"])

    op.create_table(
        "hashtag_packs",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("hashtags", JSONB(), nullable=False),
        sa.Column("purpose", sa.String(200), nullable=True),
        sa.Column("platform", platform, nullable=True),
        sa.Column("usage_count", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_hashtag_packs_user_id", "hashtag_packs", ["user_id"])


def downgrade() -> None:
    op.drop_table("hashtag_packs")
    op.drop_table("content_comments")
    op.drop_table("content_items")
    op.drop_table("clients")
    op.drop_table("workspace_members")
    op.drop_table("workspaces")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (
        comment_type, content_status, content_type, platform,
        client_status, member_status, member_role, user_status, user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
