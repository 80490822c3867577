"""System access token ORM models (tokens and self-service token requests)."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from notifyhub.infrastructure.persistence.database import Base
from notifyhub.infrastructure.persistence.models.mixins import IdentifiedModel


class SystemAccessToken(IdentifiedModel, Base):
    """Machine bearer credential. Only a bcrypt hash of the secret is stored.

    calls is the current-period counter (reset by the quota job);
    total_calls is lifetime. max_calls == 0 means unlimited.
    """

    __tablename__ = "system_access_token"

    token_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    plain_text_echo: Mapped[str | None] = mapped_column(Text, nullable=True)
    max_calls: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    calls: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    total_calls: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    failed_calls: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    total_failed_calls: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    scopes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_reset_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    requester_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    requester_identifier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("max_calls >= 0", name="ck_system_access_token_max_calls"),
        CheckConstraint("calls >= 0", name="ck_system_access_token_calls"),
        Index("ix_system_access_token_created_at_id", "created_at", "id"),
    )


class SystemAccessTokenRequest(IdentifiedModel, Base):
    """User request for a system token; approved or declined by an operator."""

    __tablename__ = "system_access_token_request"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    max_requests: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=text("'pending'"), index=True
    )
    system_access_token_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("system_access_token.id", ondelete="SET NULL"),
        nullable=True,
    )
    # One-time plaintext bearer; cleared when first revealed to the requester.
    plain_text_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'declined')",
            name="ck_system_access_token_request_status",
        ),
        CheckConstraint(
            "max_requests >= 0", name="ck_system_access_token_request_max_requests"
        ),
    )
