"""SQL repositories against an in-memory SQLite database.

Conditional UPDATEs are what keep counters, usage caps and request
transitions correct under concurrency; these tests pin their predicates.
"""

from contextlib import asynccontextmanager
from datetime import timedelta

import pytest
from sqlalchemy import text

from notifyhub.application.dtos.sharing import InviteCodeCreate
from notifyhub.application.dtos.system_token import SystemTokenCreate
from notifyhub.application.use_cases import RunQuotaResetUseCase
from notifyhub.domain.enums import PermissionLevel, ResourceType, TokenRequestStatus
from notifyhub.domain.value_objects import ResourceRef
from notifyhub.infrastructure.persistence.database import session_scope
from notifyhub.infrastructure.persistence.models import Topic, User
from notifyhub.infrastructure.persistence.repositories import (
    InviteCodeRepository,
    PermissionGrantRepository,
    ResourceRepository,
    SystemTokenRepository,
    TokenRequestRepository,
    UserRepository,
)
from notifyhub.shared.utils.datetime import utc_now
from notifyhub.shared.utils.generators import generate_cuid

pytestmark = pytest.mark.requires_db


async def _user(session, username: str, is_operator: bool = False) -> User:
    user = User(
        username=username,
        email=f"{username}@Example.com",
        is_active=True,
        is_operator=is_operator,
    )
    session.add(user)
    await session.flush()
    return user


async def _topic(session, owner: User) -> ResourceRef:
    topic = Topic(owner_id=owner.id, name="alerts")
    session.add(topic)
    await session.flush()
    return ResourceRef(ResourceType.TOPIC, topic.id)


async def _token(repo: SystemTokenRepository, max_calls: int, **kwargs):
    return await repo.create_token(
        SystemTokenCreate(
            token_id=generate_cuid(), token_hash="$2b$04$hash", max_calls=max_calls, **kwargs
        )
    )


# ---- users and resources ----


async def test_user_lookup_by_username_or_email(db_session) -> None:
    alice = await _user(db_session, "alice")
    repo = UserRepository(db_session)
    assert (await repo.find_by_identifier("alice")).id == alice.id
    assert (await repo.find_by_identifier("ALICE@example.COM")).id == alice.id
    assert await repo.find_by_identifier("Alice") is None


async def test_resource_owner_lookup(db_session) -> None:
    owner = await _user(db_session, "owner")
    topic = await _topic(db_session, owner)
    repo = ResourceRepository(db_session)
    assert await repo.get_owner_id(topic) == owner.id
    assert not await repo.exists(ResourceRef(ResourceType.RELAY_TARGET, topic.resource_id))


# ---- system tokens ----


async def test_token_record_keeps_hash_out_of_read_model(db_session) -> None:
    repo = SystemTokenRepository(db_session)
    token = await _token(repo, 3, scopes=["relay:notify"])
    record = await repo.get_record(token.id)
    assert record.token_hash == "$2b$04$hash"
    assert record.token.scopes == ["relay:notify"]
    assert record.token.created_at.tzinfo is not None


async def test_increment_calls_saturates(db_session) -> None:
    repo = SystemTokenRepository(db_session)
    token = await _token(repo, 2)
    for _ in range(3):
        assert await repo.increment_calls(token.id)
    stored = await repo.get_token(token.id)
    assert (stored.calls, stored.total_calls) == (2, 3)
    assert not await repo.increment_calls("missing")


async def test_increment_calls_unlimited(db_session) -> None:
    repo = SystemTokenRepository(db_session)
    token = await _token(repo, 0)
    for _ in range(5):
        await repo.increment_calls(token.id)
    assert (await repo.get_token(token.id)).calls == 5


async def test_increment_failed_calls(db_session) -> None:
    repo = SystemTokenRepository(db_session)
    token = await _token(repo, 2)
    await repo.increment_failed_calls(token.id)
    stored = await repo.get_token(token.id)
    assert (stored.calls, stored.failed_calls, stored.total_failed_calls) == (0, 1, 1)


async def test_reset_period_is_conditional(db_session) -> None:
    repo = SystemTokenRepository(db_session)
    token = await _token(repo, 5)
    await repo.increment_calls(token.id)
    period_start = utc_now() + timedelta(days=1)

    assert await repo.reset_period(token.id, period_start)
    assert not await repo.reset_period(token.id, period_start)
    stored = await repo.get_token(token.id)
    assert stored.calls == 0
    assert stored.total_calls == 1
    assert stored.last_reset_at == period_start

    assert await repo.reset_period(token.id, period_start + timedelta(days=31))


async def test_reset_period_before_creation_does_nothing(db_session) -> None:
    repo = SystemTokenRepository(db_session)
    token = await _token(repo, 5)
    assert not await repo.reset_period(token.id, utc_now() - timedelta(days=1))


class _BrokenResetRepository(SystemTokenRepository):
    """Issues a statement the database rejects when resetting one token."""

    def __init__(self, db, broken_id: str) -> None:
        super().__init__(db)
        self._broken_id = broken_id

    async def _reset_counters(self, token_id, period_start) -> bool:
        if token_id == self._broken_id:
            await self.db.execute(text("UPDATE no_such_table SET calls = 0"))
        return await super()._reset_counters(token_id, period_start)


async def test_failed_reset_keeps_the_rest_of_the_batch(database) -> None:
    async with session_scope() as session:
        repo = SystemTokenRepository(session)
        for _ in range(3):
            await _token(repo, 5)
    async with session_scope() as session:
        ordered = [c.id for c in await SystemTokenRepository(session).list_reset_candidates(0, 10)]
    broken = ordered[1]

    @asynccontextmanager
    async def scope():
        async with session_scope() as session:
            yield _BrokenResetRepository(session, broken)

    result = await RunQuotaResetUseCase(scope, batch_size=10).run(
        now=utc_now() + timedelta(days=40)
    )
    assert (result.tokens_reset, result.error_count, result.failed_batches) == (2, 1, 0)

    async with session_scope() as session:
        repo = SystemTokenRepository(session)
        stored = {token_id: await repo.get_token(token_id) for token_id in ordered}
    assert stored[broken].last_reset_at is None
    assert stored[ordered[0]].last_reset_at is not None
    assert stored[ordered[2]].last_reset_at is not None


async def test_list_tokens_filters_by_requester(db_session) -> None:
    alice = await _user(db_session, "alice")
    repo = SystemTokenRepository(db_session)
    mine = await _token(repo, 1, requester_id=alice.id)
    await _token(repo, 1)
    assert [t.id for t in await repo.list_tokens(requester_id=alice.id)] == [mine.id]
    assert len(await repo.list_tokens()) == 2
    assert len(await repo.list_tokens(limit=1)) == 1


async def test_reset_candidates_page_in_stable_order(db_session) -> None:
    repo = SystemTokenRepository(db_session)
    for _ in range(5):
        await _token(repo, 1)
    first = await repo.list_reset_candidates(0, 3)
    second = await repo.list_reset_candidates(3, 3)
    ids = [c.id for c in first + second]
    assert len(ids) == 5
    assert len(set(ids)) == 5


async def test_update_and_delete_token(db_session) -> None:
    repo = SystemTokenRepository(db_session)
    token = await _token(repo, 1)
    updated = await repo.update_token(token.id, {"max_calls": 9, "description": "x"})
    assert (updated.max_calls, updated.description) == (9, "x")
    assert await repo.delete_token(token.id)
    assert await repo.get_record(token.id) is None
    assert await repo.update_token(token.id, {"max_calls": 1}) is None


# ---- grants ----


async def test_upsert_max_never_downgrades(db_session) -> None:
    owner = await _user(db_session, "owner")
    bob = await _user(db_session, "bob")
    topic = await _topic(db_session, owner)
    repo = PermissionGrantRepository(db_session)

    first = await repo.upsert_max(topic, bob.id, PermissionLevel.WRITE, owner.id)
    lower = await repo.upsert_max(topic, bob.id, PermissionLevel.READ, owner.id)
    assert lower.level is PermissionLevel.WRITE
    assert lower.id == first.id
    higher = await repo.upsert_max(topic, bob.id, PermissionLevel.ADMIN, owner.id)
    assert higher.level is PermissionLevel.ADMIN
    assert await repo.get_level(topic, bob.id) is PermissionLevel.ADMIN
    assert len(await repo.list_for_resource(topic)) == 1


async def test_delete_grant(db_session) -> None:
    owner = await _user(db_session, "owner")
    bob = await _user(db_session, "bob")
    topic = await _topic(db_session, owner)
    repo = PermissionGrantRepository(db_session)
    await repo.upsert_max(topic, bob.id, PermissionLevel.READ, owner.id)
    assert await repo.delete_grant(topic, bob.id)
    assert not await repo.delete_grant(topic, bob.id)
    assert await repo.get_level(topic, bob.id) is None


# ---- invite codes ----


async def _invite(session, repo: InviteCodeRepository, code: str, **kwargs):
    owner = await _user(session, f"owner-{generate_cuid()}")
    topic = await _topic(session, owner)
    return await repo.create_invite(
        InviteCodeCreate(
            code=code,
            resource=topic,
            permissions=[PermissionLevel.READ, PermissionLevel.WRITE],
            max_uses=kwargs.get("max_uses"),
            expires_at=kwargs.get("expires_at"),
            created_by_id=owner.id,
        )
    )


async def test_invite_code_is_unique(db_session) -> None:
    repo = InviteCodeRepository(db_session)
    invite = await _invite(db_session, repo, "ABCDEFGH")
    assert invite.permissions == [PermissionLevel.READ, PermissionLevel.WRITE]
    assert await _invite(db_session, repo, "ABCDEFGH") is None
    assert (await repo.get_by_code("ABCDEFGH")).id == invite.id


async def test_try_consume_stops_at_max_uses(db_session) -> None:
    repo = InviteCodeRepository(db_session)
    invite = await _invite(db_session, repo, "CAPPED22", max_uses=2)
    now = utc_now()
    assert await repo.try_consume(invite.id, now)
    assert await repo.try_consume(invite.id, now)
    assert not await repo.try_consume(invite.id, now)
    assert (await repo.get_by_code("CAPPED22")).usage_count == 2


async def test_try_consume_rejects_expired(db_session) -> None:
    repo = InviteCodeRepository(db_session)
    expires = utc_now() + timedelta(hours=1)
    invite = await _invite(db_session, repo, "EXPIRING", expires_at=expires)
    assert not await repo.try_consume(invite.id, expires + timedelta(seconds=1))
    assert await repo.try_consume(invite.id, utc_now())


async def test_update_invite_permissions(db_session) -> None:
    repo = InviteCodeRepository(db_session)
    invite = await _invite(db_session, repo, "UPDATE99")
    updated = await repo.update_invite(
        invite.id, {"permissions": [PermissionLevel.ADMIN], "max_uses": 4}
    )
    assert updated.permissions == [PermissionLevel.ADMIN]
    assert updated.max_uses == 4
    assert (await repo.get_invite(invite.id)).max_uses == 4
    assert await repo.delete_invite(invite.id)
    assert await repo.get_invite(invite.id) is None


# ---- token requests ----


async def test_transition_from_pending_happens_once(db_session) -> None:
    alice = await _user(db_session, "alice")
    repo = TokenRequestRepository(db_session)
    request = await repo.create_request(alice.id, 10, "ci")
    assert request.status is TokenRequestStatus.PENDING

    assert await repo.transition_from_pending(request.id, TokenRequestStatus.APPROVED)
    assert not await repo.transition_from_pending(request.id, TokenRequestStatus.DECLINED)
    assert (await repo.get_request(request.id)).status is TokenRequestStatus.APPROVED


async def test_plain_text_token_is_taken_once(db_session) -> None:
    alice = await _user(db_session, "alice")
    tokens = SystemTokenRepository(db_session)
    token = await _token(tokens, 10, requester_id=alice.id)
    repo = TokenRequestRepository(db_session)
    request = await repo.create_request(alice.id, 10, None)
    await repo.transition_from_pending(request.id, TokenRequestStatus.APPROVED)
    await repo.set_issued_token(request.id, token.id, "sat_secret")

    stored = await repo.get_request(request.id)
    assert stored.has_plain_text_token
    assert stored.system_access_token_id == token.id
    assert await repo.take_plain_text_token(request.id) == "sat_secret"
    assert await repo.take_plain_text_token(request.id) is None


async def test_list_requests_filters_by_user(db_session) -> None:
    alice = await _user(db_session, "alice")
    bob = await _user(db_session, "bob")
    repo = TokenRequestRepository(db_session)
    mine = await repo.create_request(alice.id, 1, None)
    await repo.create_request(bob.id, 1, None)
    assert [r.id for r in await repo.list_requests(user_id=alice.id)] == [mine.id]
    assert len(await repo.list_requests()) == 2
