"""Pytest configuration and fixtures for notifyhub.

Environment is pinned before any notifyhub import: an in-memory SQLite
database (one per test), low bcrypt cost, push delivery off and no
background quota reset job.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-notifyhub-tests-only"
os.environ["SECRET_HASH_ROUNDS"] = "4"
os.environ["QUOTA_RESET_ENABLED"] = "false"
os.environ["PUSH_MODE"] = "off"
os.environ.pop("RELAY_SIGNING_SECRET", None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from notifyhub.core.config import get_settings
from notifyhub.core.limiter import limiter
from notifyhub.infrastructure.persistence.database import (
    Base,
    dispose_engine,
    get_engine,
    get_session_factory,
    session_scope,
)
from notifyhub.infrastructure.persistence.models import Topic, User
from notifyhub.infrastructure.security import SecretCodec, create_access_token
from notifyhub.main import app


@pytest.fixture(autouse=True)
def _reset_rate_limits() -> None:
    limiter.reset()


@pytest.fixture
def codec() -> SecretCodec:
    return SecretCodec(rounds=4)


@pytest.fixture
async def database():
    """Fresh schema on the in-memory database; dropped after the test."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await dispose_engine()


@pytest.fixture
async def db_session(database) -> AsyncSession:
    """Session for repository tests. Rolled back after each test."""
    async with get_session_factory()() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(database) -> AsyncClient:
    """Async HTTP client against the FastAPI app with its lifespan running."""
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    app.dependency_overrides.clear()
    get_settings.cache_clear()


async def create_user(
    username: str, is_operator: bool = False, is_active: bool = True
) -> User:
    """Insert a committed user (users normally arrive from the registration service)."""
    async with session_scope() as session:
        user = User(
            username=username,
            email=f"{username}@example.com",
            is_active=is_active,
            is_operator=is_operator,
        )
        session.add(user)
        await session.flush()
        await session.refresh(user)
        return user


async def create_topic(owner_id: str, name: str = "alerts") -> Topic:
    async with session_scope() as session:
        topic = Topic(owner_id=owner_id, name=name)
        session.add(topic)
        await session.flush()
        await session.refresh(topic)
        return topic


def bearer(user_id: str) -> dict[str, str]:
    """Authorization header with a user JWT."""
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
async def operator(database) -> User:
    return await create_user("ops", is_operator=True)


@pytest.fixture
async def alice(database) -> User:
    return await create_user("alice")


@pytest.fixture
async def bob(database) -> User:
    return await create_user("bob")
