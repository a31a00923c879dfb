"""Root conftest - shared fixtures: in-memory store, pool, handler, HTTP client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_pool dependency overridden to use the test pool
    - bcrypt cost lowered to 4 rounds so hashing stays fast

Design Decisions:
    - StaticPool: one in-memory database shared by every checkout of the test engine
    - FailingPool raises StoreError on every call to simulate a broken store
"""

import os

# Must be set before book_api.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FORMAT", "text")

from functools import partial  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import book_api.models  # noqa: E402, F401
from book_api.core.errors import StoreError  # noqa: E402
from book_api.db.base import Base  # noqa: E402
from book_api.infrastructure.database import ConnectionPool, get_pool  # noqa: E402
from book_api.infrastructure.security.password import get_password_hash  # noqa: E402
from book_api.main import app  # noqa: E402
from book_api.services.handle_users import UserHandler  # noqa: E402


class FailingPool:
    """Pool whose every statement fails with the given driver text."""

    def __init__(self, message: str = "connect ECONNREFUSED 127.0.0.1:5432"):
        self.message = message
        self.calls = []

    async def fetch_all(self, statement):
        self.calls.append(statement)
        raise StoreError(self.message, "query")

    async def execute(self, statement):
        self.calls.append(statement)
        raise StoreError(self.message, "execute")


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", poolclass=StaticPool, echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def pool(test_engine):
    return ConnectionPool(test_engine)


@pytest.fixture
def fast_hasher():
    return partial(get_password_hash, rounds=4)


@pytest.fixture
def handler(pool, fast_hasher):
    return UserHandler(pool, fast_hasher)


@pytest.fixture
def failing_pool():
    return FailingPool()


@pytest.fixture
async def client(pool):
    """FastAPI test client with the pool dependency overridden."""
    app.dependency_overrides[get_pool] = lambda: pool

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def failing_client(failing_pool):
    """Client whose store fails on every statement."""
    app.dependency_overrides[get_pool] = lambda: failing_pool

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def seed_user(handler):
    """Insert one user through the handler and return its id."""
    return await handler.create_user("seed@example.com", "Seed", "seedpass")
