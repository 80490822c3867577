"""initial_access_delegation_schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:12:41.118204

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "app_user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("username", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_operator", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_app_user_username"),
        sa.UniqueConstraint("email", name="uq_app_user_email"),
    )

    op.create_table(
        "topic",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["app_user.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_topic_owner_id", "topic", ["owner_id"])

    op.create_table(
        "relay_target",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["app_user.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_relay_target_owner_id", "relay_target", ["owner_id"])

    op.create_table(
        "system_access_token",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("token_hash", sa.String(length=100), nullable=False),
        sa.Column("plain_text_echo", sa.Text(), nullable=True),
        sa.Column("max_calls", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("calls", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_calls", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("failed_calls", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "total_failed_calls", sa.Integer(), nullable=False, server_default=sa.text("0")
        ),
        sa.Column("scopes", sa.JSON(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_reset_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("requester_id", sa.String(), nullable=True),
        sa.Column("requester_identifier", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["requester_id"], ["app_user.id"], ondelete="SET NULL"),
        sa.CheckConstraint("max_calls >= 0", name="ck_system_access_token_max_calls"),
        sa.CheckConstraint("calls >= 0", name="ck_system_access_token_calls"),
    )
    op.create_index(
        "ix_system_access_token_requester_id", "system_access_token", ["requester_id"]
    )
    # Quota reset job pages in this order.
    op.create_index(
        "ix_system_access_token_created_at_id", "system_access_token", ["created_at", "id"]
    )

    op.create_table(
        "system_access_token_request",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("max_requests", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "status", sa.String(length=20), nullable=False, server_default=sa.text("'pending'")
        ),
        sa.Column("system_access_token_id", sa.String(), nullable=True),
        sa.Column("plain_text_token", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["system_access_token_id"], ["system_access_token.id"], ondelete="SET NULL"
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'declined')",
            name="ck_system_access_token_request_status",
        ),
        sa.CheckConstraint(
            "max_requests >= 0", name="ck_system_access_token_request_max_requests"
        ),
    )
    op.create_index(
        "ix_system_access_token_request_user_id", "system_access_token_request", ["user_id"]
    )
    op.create_index(
        "ix_system_access_token_request_status", "system_access_token_request", ["status"]
    )

    op.create_table(
        "invite_code",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.Column("resource_type", sa.String(length=32), nullable=False),
        sa.Column("resource_id", sa.String(length=64), nullable=False),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["created_by_id"], ["app_user.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("code", name="uq_invite_code_code"),
        sa.CheckConstraint(
            "max_uses IS NULL OR usage_count <= max_uses", name="ck_invite_code_usage_cap"
        ),
        sa.CheckConstraint("max_uses IS NULL OR max_uses >= 1", name="ck_invite_code_max_uses"),
    )
    op.create_index("ix_invite_code_resource_id", "invite_code", ["resource_id"])

    op.create_table(
        "permission_grant",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("resource_type", sa.String(length=32), nullable=False),
        sa.Column("resource_id", sa.String(length=64), nullable=False),
        sa.Column("grantee_id", sa.String(), nullable=False),
        sa.Column("level", sa.String(length=16), nullable=False),
        sa.Column("granted_by_id", sa.String(), nullable=True),
        sa.Column("invite_code_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["grantee_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["granted_by_id"], ["app_user.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["invite_code_id"], ["invite_code.id"], ondelete="SET NULL"),
        sa.UniqueConstraint(
            "resource_type",
            "resource_id",
            "grantee_id",
            name="uq_permission_grant_resource_grantee",
        ),
        sa.CheckConstraint(
            "level IN ('read', 'write', 'admin')", name="ck_permission_grant_level"
        ),
    )
    op.create_index("ix_permission_grant_grantee_id", "permission_grant", ["grantee_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_permission_grant_grantee_id", table_name="permission_grant")
    op.drop_table("permission_grant")
    op.drop_index("ix_invite_code_resource_id", table_name="invite_code")
    op.drop_table("invite_code")
    op.drop_index(
        "ix_system_access_token_request_status", table_name="system_access_token_request"
    )
    op.drop_index(
        "ix_system_access_token_request_user_id", table_name="system_access_token_request"
    )
    op.drop_table("system_access_token_request")
    op.drop_index("ix_system_access_token_created_at_id", table_name="system_access_token")
    op.drop_index("ix_system_access_token_requester_id", table_name="system_access_token")
    op.drop_table("system_access_token")
    op.drop_index("ix_relay_target_owner_id", table_name="relay_target")
    op.drop_table("relay_target")
    op.drop_index("ix_topic_owner_id", table_name="topic")
    op.drop_table("topic")
    op.drop_table("app_user")
