"""
Test configuration and fixtures for College Quest.

Provides shared fixtures for unit and integration tests.
"""

import os
import time
import uuid
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch

# Settings are read at import time; pin them before anything imports the app.
os.environ["SUPABASE_URL"] = "https://testproject.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-that-is-long-enough-for-hs256"
os.environ["ADMIN_PASSWORD"] = "test-admin-password"
os.environ["ENVIRONMENT"] = "testing"
os.environ["FRONTEND_URL"] = "http://localhost:3000"

import jwt
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from college_quest.infrastructure.db import models  # noqa: F401


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def no_jwks_lookup():
    """Tokens in tests are HS256; never reach out to the JWKS endpoint."""
    with patch(
        "college_quest.api.dependencies._decode_with_jwks",
        side_effect=jwt.InvalidTokenError("JWKS disabled in tests"),
    ):
        yield


@pytest.fixture
def app():
    """Get the FastAPI application with the database session stubbed out."""
    from college_quest.main import app
    from college_quest.infrastructure.db.database import get_session

    async def fake_session():
        yield MagicMock()

    app.dependency_overrides[get_session] = fake_session
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app)


# =============================================================================
# Auth Fixtures
# =============================================================================

@pytest.fixture
def mock_user_id() -> uuid.UUID:
    return uuid.UUID("00000000-0000-0000-0000-000000000001")


def make_token(user_id, email="student@example.edu", expires_in=3600, **claims) -> str:
    from college_quest.config.settings import get_settings

    settings = get_settings()
    payload = {
        "sub": str(user_id),
        "aud": "authenticated",
        "iss": f"{settings.supabase_url}/auth/v1",
        "exp": int(time.time()) + expires_in,
        "email": email,
        "user_metadata": {"full_name": "Test Student", "avatar_url": "https://img.example/a.png"},
        **claims,
    }
    return jwt.encode(payload, settings.supabase_jwt_secret, algorithm="HS256")


@pytest.fixture
def token_factory():
    """Signs HS256 tokens the way Supabase does."""
    return make_token


@pytest.fixture
def allowed_emails(app):
    """Allow list that admits everyone unless a test says otherwise."""
    from college_quest.infrastructure.db.dependencies import get_allowed_email_repository

    repo = MagicMock()
    repo.is_allowed = AsyncMock(return_value=True)
    app.dependency_overrides[get_allowed_email_repository] = lambda: repo
    return repo


@pytest.fixture
def auth_headers(mock_user_id, allowed_emails):
    """Bearer header with a valid HS256 token for an allowed mock_user_id."""
    return {"Authorization": f"Bearer {make_token(mock_user_id)}"}


@pytest.fixture
def admin_headers():
    return {"Authorization": "Bearer test-admin-password"}


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh in-memory SQLite database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite emits its own BEGIN lazily, which breaks SAVEPOINT; let
    # SQLAlchemy issue BEGIN instead.
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()
