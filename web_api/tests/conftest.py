# web_api/tests/conftest.py
"""Pytest fixtures for web API tests.

Signs access tokens with a test secret the same way the identity provider
does, so requests go through the real auth dependency.
"""

import uuid
from contextlib import asynccontextmanager
from unittest.mock import MagicMock

import jwt
import pytest

from web_api.rate_limit import grading_limiter

TEST_JWT_SECRET = "test-secret-for-web-api-tests-only"


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    """Configure the shared secret and drop any audience check."""
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.delenv("JWT_AUDIENCE", raising=False)
    return TEST_JWT_SECRET


@pytest.fixture(autouse=True)
def reset_rate_limits():
    grading_limiter.reset()
    yield
    grading_limiter.reset()


@pytest.fixture
def make_token():
    """Factory for signed access tokens."""

    def _make(user_id: uuid.UUID | str, role: str | None = None, **claims) -> str:
        payload = {"sub": str(user_id), **claims}
        if role:
            payload["app_metadata"] = {"role": role}
        return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def auth_headers(make_token, user_id) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def mock_db():
    """Stand-in for get_connection/get_transaction: yields a MagicMock conn."""
    conn = MagicMock()

    @asynccontextmanager
    async def _connection():
        yield conn

    _connection.conn = conn
    return _connection
