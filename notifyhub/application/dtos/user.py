"""DTOs for users and authenticated principals (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserResult:
    """User read-model (result of get_by_id, find_by_identifier)."""

    id: str
    username: str
    email: str
    is_active: bool
    is_operator: bool = False


@dataclass(frozen=True)
class Principal:
    """Authenticated caller of an interactive operation.

    Operators may administer every system token, token request and resource.
    """

    id: str
    username: str
    email: str
    is_operator: bool = False

    @classmethod
    def from_user(cls, user: UserResult) -> "Principal":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            is_operator=user.is_operator,
        )
