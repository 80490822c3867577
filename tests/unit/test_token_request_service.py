"""TokenRequestService: pending -> approved | declined, and one-time reveal."""

import pytest

from fakes import (
    InMemorySystemTokenRepository,
    InMemoryTokenRequestRepository,
    InMemoryUserRepository,
    principal,
)
from notifyhub.application.services import SystemTokenService, TokenRequestService
from notifyhub.domain.enums import TokenRequestStatus
from notifyhub.domain.exceptions import (
    AuthorizationException,
    InvalidStateTransitionException,
    ResourceNotFoundException,
    ValidationException,
)


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def tokens() -> InMemorySystemTokenRepository:
    return InMemorySystemTokenRepository()


@pytest.fixture
def requests() -> InMemoryTokenRequestRepository:
    return InMemoryTokenRequestRepository()


@pytest.fixture
def token_service(tokens, users, codec) -> SystemTokenService:
    return SystemTokenService(tokens, users, codec)


@pytest.fixture
def service(requests, token_service) -> TokenRequestService:
    return TokenRequestService(requests, token_service)


@pytest.fixture
def operator(users):
    return principal(users.add("ops", is_operator=True))


@pytest.fixture
def alice(users):
    return principal(users.add("alice"))


async def test_create_is_pending(service, alice) -> None:
    request = await service.create(alice, max_requests=100, description="ci bot")
    assert request.status is TokenRequestStatus.PENDING
    assert request.user_id == alice.id
    assert request.system_access_token_id is None


async def test_create_rejects_negative_quota(service, alice) -> None:
    with pytest.raises(ValidationException):
        await service.create(alice, max_requests=-5)


async def test_approve_issues_token_for_requester(service, tokens, operator, alice) -> None:
    request = await service.create(alice, max_requests=50, description="ci bot")
    approved = await service.approve(request.id, operator, scopes=["relay:notify"])

    assert approved.status is TokenRequestStatus.APPROVED
    assert approved.has_plain_text_token
    token = tokens.rows[approved.system_access_token_id].token
    assert token.max_calls == 50
    assert token.requester_id == alice.id
    assert token.scopes == ["relay:notify"]


async def test_only_operators_decide(service, alice) -> None:
    request = await service.create(alice, max_requests=1)
    with pytest.raises(AuthorizationException):
        await service.approve(request.id, alice)
    with pytest.raises(AuthorizationException):
        await service.decline(request.id, alice)


async def test_decision_is_final(service, operator, alice) -> None:
    request = await service.create(alice, max_requests=1)
    await service.approve(request.id, operator)
    with pytest.raises(InvalidStateTransitionException) as exc:
        await service.approve(request.id, operator)
    assert exc.value.details["status"] == "approved"
    with pytest.raises(InvalidStateTransitionException):
        await service.decline(request.id, operator)


async def test_decline_appends_reason(service, tokens, operator, alice) -> None:
    request = await service.create(alice, max_requests=1, description="please")
    declined = await service.decline(request.id, operator, reason="quota too high")
    assert declined.status is TokenRequestStatus.DECLINED
    assert declined.description == "please\n\nDeclined: quota too high"
    assert tokens.rows == {}
    with pytest.raises(InvalidStateTransitionException):
        await service.approve(request.id, operator)


async def test_unknown_request(service, operator) -> None:
    with pytest.raises(ResourceNotFoundException):
        await service.approve("missing", operator)


async def test_reveal_returns_working_token_once(service, token_service, operator, alice) -> None:
    request = await service.create(alice, max_requests=5)
    await service.approve(request.id, operator)

    raw = await service.reveal_token(request.id, alice)
    assert (await token_service.validate(raw)) is not None
    with pytest.raises(ResourceNotFoundException):
        await service.reveal_token(request.id, alice)
    assert not (await service.get(request.id, alice)).has_plain_text_token


async def test_reveal_only_for_requester_and_after_approval(service, users, operator, alice) -> None:
    request = await service.create(alice, max_requests=5)
    with pytest.raises(InvalidStateTransitionException):
        await service.reveal_token(request.id, alice)
    await service.approve(request.id, operator)
    with pytest.raises(AuthorizationException):
        await service.reveal_token(request.id, operator)
    with pytest.raises(AuthorizationException):
        await service.reveal_token(request.id, principal(users.add("mallory")))


async def test_requests_are_private_to_their_owner(service, users, operator, alice) -> None:
    bob = principal(users.add("bob"))
    mine = await service.create(alice, max_requests=1)
    await service.create(bob, max_requests=1)

    assert [r.id for r in await service.list_requests(alice)] == [mine.id]
    assert len(await service.list_requests(operator)) == 2
    assert (await service.get(mine.id, operator)).id == mine.id
    with pytest.raises(ResourceNotFoundException):
        await service.get(mine.id, bob)
