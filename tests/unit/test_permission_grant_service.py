"""PermissionGrantService: effective levels, sharing and revocation."""

import pytest

from fakes import (
    InMemoryPermissionGrantRepository,
    InMemoryResourceRepository,
    InMemoryUserRepository,
    principal,
)
from notifyhub.application.services import PermissionGrantService
from notifyhub.domain.enums import PermissionLevel, ResourceType
from notifyhub.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from notifyhub.domain.value_objects import ResourceRef

TOPIC = ResourceRef(ResourceType.TOPIC, "topic-1")


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def resources() -> InMemoryResourceRepository:
    return InMemoryResourceRepository()


@pytest.fixture
def grants() -> InMemoryPermissionGrantRepository:
    return InMemoryPermissionGrantRepository()


@pytest.fixture
def service(resources, grants, users) -> PermissionGrantService:
    return PermissionGrantService(resources, grants, users)


@pytest.fixture
def owner(users, resources):
    user = users.add("owner")
    resources.owners[TOPIC] = user.id
    return principal(user)


async def test_owner_and_operator_hold_admin(service, users, owner) -> None:
    operator = principal(users.add("ops", is_operator=True))
    assert await service.effective_level(TOPIC, owner) is PermissionLevel.ADMIN
    assert await service.effective_level(TOPIC, operator) is PermissionLevel.ADMIN


async def test_stranger_has_no_level(service, users, owner) -> None:
    stranger = principal(users.add("stranger"))
    assert await service.effective_level(TOPIC, stranger) is None
    assert not await service.authorize(TOPIC, stranger, PermissionLevel.READ)
    with pytest.raises(AuthorizationException):
        await service.require(TOPIC, stranger, PermissionLevel.READ)


async def test_missing_resource_is_not_found(service, owner) -> None:
    missing = ResourceRef(ResourceType.TOPIC, "nope")
    with pytest.raises(ResourceNotFoundException):
        await service.effective_level(missing, owner)


async def test_grant_by_username_or_email(service, users, owner) -> None:
    bob = users.add("bob")
    await service.grant(TOPIC, owner, "bob", PermissionLevel.READ)
    assert await service.effective_level(TOPIC, principal(bob)) is PermissionLevel.READ

    carol = users.add("carol")
    await service.grant(TOPIC, owner, "CAROL@example.com", PermissionLevel.WRITE)
    assert await service.authorize(TOPIC, principal(carol), PermissionLevel.WRITE)
    assert not await service.authorize(TOPIC, principal(carol), PermissionLevel.ADMIN)


async def test_grant_never_downgrades(service, users, owner) -> None:
    bob = users.add("bob")
    await service.grant(TOPIC, owner, "bob", PermissionLevel.WRITE)
    result = await service.grant(TOPIC, owner, "bob", PermissionLevel.READ)
    assert result.level is PermissionLevel.WRITE
    assert await service.effective_level(TOPIC, principal(bob)) is PermissionLevel.WRITE


async def test_grant_requires_admin(service, users, owner) -> None:
    bob = users.add("bob")
    users.add("carol")
    await service.grant(TOPIC, owner, "bob", PermissionLevel.WRITE)
    with pytest.raises(AuthorizationException):
        await service.grant(TOPIC, principal(bob), "carol", PermissionLevel.READ)


async def test_grantee_admin_may_share_further(service, users, owner) -> None:
    bob = users.add("bob")
    carol = users.add("carol")
    await service.grant(TOPIC, owner, "bob", PermissionLevel.ADMIN)
    await service.grant(TOPIC, principal(bob), "carol", PermissionLevel.READ)
    assert await service.effective_level(TOPIC, principal(carol)) is PermissionLevel.READ


async def test_grant_to_unknown_user(service, owner) -> None:
    with pytest.raises(ResourceNotFoundException):
        await service.grant(TOPIC, owner, "ghost", PermissionLevel.READ)


async def test_grant_to_self_is_rejected(service, owner) -> None:
    with pytest.raises(ValidationException):
        await service.grant(TOPIC, owner, "owner", PermissionLevel.READ)


async def test_revoke_removes_grant_and_is_idempotent(service, users, owner) -> None:
    bob = users.add("bob")
    await service.grant(TOPIC, owner, "bob", PermissionLevel.WRITE)
    await service.revoke(TOPIC, owner, "bob")
    assert await service.effective_level(TOPIC, principal(bob)) is None
    await service.revoke(TOPIC, owner, "bob")


async def test_list_grants_requires_admin(service, users, owner) -> None:
    bob = users.add("bob")
    await service.grant(TOPIC, owner, "bob", PermissionLevel.READ)
    listed = await service.list_grants(TOPIC, owner)
    assert [g.grantee_id for g in listed] == [bob.id]
    with pytest.raises(AuthorizationException):
        await service.list_grants(TOPIC, principal(bob))


async def test_merge_grant_skips_authorization(service, users, owner, grants) -> None:
    bob = users.add("bob")
    result = await service.merge_grant(TOPIC, bob.id, PermissionLevel.READ, invite_code_id="inv1")
    assert result.invite_code_id == "inv1"
    assert (await service.merge_grant(TOPIC, bob.id, PermissionLevel.ADMIN)).level is PermissionLevel.ADMIN
