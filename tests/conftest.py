"""
tests/conftest.py -- Shared test fixtures for the auth service tests.

This module provides:
  - store / hasher / tokens / service: unit-level collaborators with a fixed
    secret and a private in-memory SQLite database per test
  - _patch_lifespan(): wires a test AuthService into app.state, bypassing the
    real startup (no .env, no file database)
  - api_client: TestClient against the real FastAPI app

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the api_client because TestClient runs route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread.

Environment must be set before any api/ import: the limiter reads
LOGIN_RATE_LIMIT through get_settings(), and Settings refuses to build
without a JWT secret.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any api/ or core/ import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("JWT_SECRET", "test-secret-0123456789abcdef0123456789")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService

TEST_SECRET = "unit-test-secret-0123456789abcdef0123"

# bcrypt's minimum cost. Keeps the suite fast; the production cost (10) is
# asserted separately in test_passwords.py.
FAST_ROUNDS = 4


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=FAST_ROUNDS)


@pytest.fixture
def secret() -> str:
    return TEST_SECRET


@pytest.fixture
def tokens(secret: str) -> TokenService:
    return TokenService(secret_key=secret)


@pytest.fixture
def service(store: UserStore, hasher: PasswordHasher, tokens: TokenService) -> AuthService:
    return AuthService(store=store, hasher=hasher, tokens=tokens)


# ---------------------------------------------------------------------------
# Integration fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, auth_service: AuthService):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.auth_service = auth_service
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, AuthService], None, None]:
    """Yield (client, service) for API integration tests.

    One TestClient and one shared-memory database per test module. Tests in a
    module must use distinct usernames.
    """
    db_name = request.module.__name__.rsplit(".", 1)[-1]
    user_store = UserStore(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    auth_service = AuthService(
        store=user_store,
        hasher=PasswordHasher(rounds=FAST_ROUNDS),
        tokens=TokenService(secret_key=TEST_SECRET),
    )

    app.router.lifespan_context = _patch_lifespan(user_store, auth_service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, auth_service

    user_store.close()
