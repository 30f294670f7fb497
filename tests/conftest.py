"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own in-memory SQLite engine. StaticPool keeps the
   single connection alive so every session sees the same database.
2. The app's get_db dependency is overridden to hand out that session.
3. Authenticated clients carry a real token issued for a real user, so
   every request runs through the actual IdentityMiddleware.

The JWT secret and cheap Argon2 costs are set in the environment before
any dissipate module is imported, because settings load at import time.
"""

import os

os.environ.setdefault("DISSIPATE_JWT_SECRET", "test-secret-for-the-dissipate-suite-0123456789")
os.environ.setdefault("DISSIPATE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DISSIPATE_ARGON2_TIME_COST", "1")
os.environ.setdefault("DISSIPATE_ARGON2_MEMORY_COST", "8192")
os.environ.setdefault("DISSIPATE_ARGON2_PARALLELISM", "1")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from dissipate.auth.jwt import issue_token  # noqa: E402
from dissipate.config import settings  # noqa: E402
from dissipate.db.engine import get_db, init_db  # noqa: E402
from dissipate.main import app  # noqa: E402
from dissipate.services.user_service import UserService  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "password123"


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session bound to a brand-new in-memory database."""
    engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)
    await init_db(engine)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
    await engine.dispose()


@pytest_asyncio.fixture()
async def user(db_session):
    """A stored user whose password is TEST_PASSWORD."""
    return await UserService(db_session).create_user(
        email="writer@example.com",
        username="writer",
        password=TEST_PASSWORD,
    )


@pytest_asyncio.fixture()
async def token(user):
    return issue_token(user.id, settings.jwt_secret)


@pytest_asyncio.fixture()
async def unauthenticated_client(db_session):
    """HTTP client with only get_db overridden — no Authorization header."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(db_session, token):
    """HTTP client that sends a valid bearer token for `user` on every request."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {token}"},
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
