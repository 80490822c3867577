"""Resource sharing ORM models: direct permission grants and invite codes."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from notifyhub.infrastructure.persistence.database import Base
from notifyhub.infrastructure.persistence.models.mixins import IdentifiedModel


class PermissionGrant(IdentifiedModel, Base):
    """Permission level a grantee holds on one resource. One row per (resource, grantee)."""

    __tablename__ = "permission_grant"

    resource_type: Mapped[str] = mapped_column(String(32), nullable=False)
    resource_id: Mapped[str] = mapped_column(String(64), nullable=False)
    grantee_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    level: Mapped[str] = mapped_column(String(16), nullable=False)
    granted_by_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    invite_code_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("invite_code.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "resource_type",
            "resource_id",
            "grantee_id",
            name="uq_permission_grant_resource_grantee",
        ),
        CheckConstraint(
            "level IN ('read', 'write', 'admin')", name="ck_permission_grant_level"
        ),
    )


class InviteCode(IdentifiedModel, Base):
    """Shareable code that grants permissions on a resource when redeemed."""

    __tablename__ = "invite_code"

    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    resource_type: Mapped[str] = mapped_column(String(32), nullable=False)
    resource_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    max_uses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    usage_count: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_by_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            "max_uses IS NULL OR usage_count <= max_uses",
            name="ck_invite_code_usage_cap",
        ),
        CheckConstraint("max_uses IS NULL OR max_uses >= 1", name="ck_invite_code_max_uses"),
    )
