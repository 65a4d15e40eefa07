"""
Pytest configuration and fixtures.
"""

import os

# Settings are read at import time; point them at test values before any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DEBUG"] = "false"
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.redis_client import get_redis
from app.models.user import User
from app.services import store
import app.models  # noqa: F401


class InMemoryRedis:
    """Stand-in for the Redis token store: the subset of commands the app issues."""

    def __init__(self):
        self.data = {}

    async def setex(self, key, ttl, value):
        self.data[key] = value
        return True

    async def get(self, key):
        return self.data.get(key)

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self):
        return True


@pytest.fixture
async def engine():
    """Fresh in-memory SQLite database with the full schema, one per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # ON DELETE CASCADE only fires with foreign keys enabled
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    """Database session for service tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db):
    """Create an account with its profile; returns the User."""
    async def _make_user(email: str, full_name: str = None) -> User:
        user = User(email=email, hashed_password="not-a-real-hash")
        db.add(user)
        await db.flush()
        await store.ensure_profile(db, user, full_name)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest.fixture
async def client(session_factory, fake_redis):
    """HTTP client bound to the ASGI app, with the database and Redis overridden."""
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        return fake_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
