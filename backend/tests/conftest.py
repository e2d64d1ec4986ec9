"""
RedSocial Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set BEFORE any `app` import, so the
       settings singleton and the engine are built against a throwaway
       SQLite database (aiosqlite) in a temp directory.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── database:        creates every table, drops them afterwards
    ├── db_session:      real AsyncSession on the test database
    ├── client:          httpx AsyncClient over ASGITransport
    └── make_user:       registers + logs in a user through the HTTP API

ASGITransport does not run the app lifespan, so `database` creates the
schema itself instead of relying on startup.
"""

import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

_TEST_DIR = tempfile.mkdtemp(prefix="redsocial_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["API_GATE_SECRET"] = "test-gate-secret"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"

from dataclasses import dataclass  # noqa: E402
from typing import Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

import app.models  # noqa: E402,F401
from app.database import Base, async_session_factory, engine  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402

GATE_SECRET = "test-gate-secret"
DEFAULT_PASSWORD = "s3cret-pass"


# ══════════════════════════════════════════════════════════════════════════
# Mocked Infrastructure
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Real Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled connections must not outlive this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(database):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ══════════════════════════════════════════════════════════════════════════
# API Helpers
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class ApiUser:
    id: int
    username: str
    email: str
    token: str

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def make_user(client):
    """Factory: `alice = await make_user("alice")` registers and logs in."""

    async def _make_user(username: str, email: str = None, password: str = DEFAULT_PASSWORD) -> ApiUser:
        email = email or f"{username}@example.com"
        response = await client.post(
            "/api/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 200, response.text

        response = await client.post(
            "/api/login",
            json={"username": username, "password": password},
        )
        assert response.status_code == 200, response.text
        body = response.json()
        return ApiUser(id=body["id"], username=username, email=email, token=body["access_token"])

    return _make_user


@pytest.fixture
def gate_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {GATE_SECRET}"}
