"""Shareable resource ORM models (topics and relay targets).

Resources are created by the notification surface; the access layer only
reads their ownership.
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from notifyhub.infrastructure.persistence.database import Base
from notifyhub.infrastructure.persistence.models.mixins import IdentifiedModel


class Topic(IdentifiedModel, Base):
    """Notification topic owned by a user."""

    __tablename__ = "topic"

    owner_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)


class RelayTarget(IdentifiedModel, Base):
    """External relay destination (another hub deployment) owned by a user."""

    __tablename__ = "relay_target"

    owner_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
