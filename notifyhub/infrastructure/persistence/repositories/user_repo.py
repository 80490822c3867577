"""User repository (read-only lookups). Interface methods return application DTOs."""

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from notifyhub.application.dtos.user import UserResult
from notifyhub.infrastructure.persistence.models.user import User
from notifyhub.infrastructure.persistence.repositories.base import BaseRepository


def _user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult."""
    return UserResult(
        id=u.id,
        username=u.username,
        email=u.email,
        is_active=u.is_active,
        is_operator=u.is_operator,
    )


class UserRepository(BaseRepository[User]):
    """Implements IUserRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_by_id(self, user_id: str) -> UserResult | None:  # type: ignore[override]
        user = await super().get_by_id(user_id)
        return _user_to_result(user) if user else None

    async def find_by_identifier(self, identifier: str) -> UserResult | None:
        """Match username exactly or email case-insensitively."""
        result = await self.db.execute(
            select(User).where(
                or_(
                    User.username == identifier,
                    func.lower(User.email) == identifier.lower(),
                )
            )
        )
        user = result.scalars().first()
        return _user_to_result(user) if user else None
