"""Connected social accounts and in-app notifications.

Revision ID: 0002_social_accounts_notifications
Revises: 0001_initial_schema
Create Date: 2026-10-18
"""

from typing import Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID

revision: str = "0002_social_accounts_notifications"
down_revision: Union[str, None] = "0001_initial_schema"
branch_labels: Union[str, None] = None
depends_on: Union[str, None] = None

# Created by 0001
platform = ENUM(
    "tiktok", "instagram", "youtube", "linkedin", "twitter", name="platform", create_type=False
)
social_account_status = sa.Enum(
    "active", "inactive", "expired", "error", name="socialaccountstatus"
)


def upgrade() -> None:
    op.create_table(
        "social_accounts",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("client_id", UUID(as_uuid=False), sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=True),
        sa.Column("platform", platform, nullable=False),
        sa.Column("account_id", sa.String(255), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("account_data", JSONB(), nullable=True),
        sa.Column("status", social_account_status, nullable=False),
        sa.Column("last_sync", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "platform", "account_id", name="uq_social_account"),
    )
    op.create_index("ix_social_accounts_user_id", "social_accounts", ["user_id"])
    op.create_index("ix_social_accounts_client_id", "social_accounts", ["client_id"])

    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=False), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("data", JSONB(), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_type", "notifications", ["type"])
    op.create_index("ix_notifications_read", "notifications", ["read"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("social_accounts")
    social_account_status.drop(op.get_bind(), checkfirst=True)
