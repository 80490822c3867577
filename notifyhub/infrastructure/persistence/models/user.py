"""User ORM model (read-only here; rows are written by the registration service)."""

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from notifyhub.infrastructure.persistence.database import Base
from notifyhub.infrastructure.persistence.models.mixins import IdentifiedModel


class User(IdentifiedModel, Base):
    """User model. Table: app_user. Username and email are globally unique."""

    __tablename__ = "app_user"

    username: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    is_operator: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
