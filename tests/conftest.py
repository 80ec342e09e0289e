"""
tests/conftest.py -- Shared test fixtures for the threat intel backend.

This module provides:
  - user_store / order_store: SQL stores on private in-memory SQLite DBs
  - tokens, auth_service, order_service: real services wired to those stores
  - add_user: helper fixture that persists a user with a known password
  - api_client: TestClient over the real FastAPI app with a patched lifespan

Design: unit-level fixtures use plain sqlite:///:memory:. SQLAlchemy keeps
one connection per thread for :memory: URLs, so the DB survives across calls
made from the test thread.

api_client uses a named shared-memory SQLite URI instead, because TestClient
runs sync route handlers in a thread pool. Plain :memory: DBs are
per-connection and would present a blank schema to each worker thread. The
named URI format (file:name?mode=memory&cache=shared&uri=true) shares one
in-memory instance across every connection in the process.

Environment must be set before any app import:
  DEBUG=true        -- get_settings() auto-generates SECRET_KEY
  BCRYPT_ROUNDS=4   -- minimum bcrypt cost keeps the suite fast
  RATE_LIMIT        -- high enough that the shared budget never trips here;
                       tests/test_rate_limit.py overrides it with a small one
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT", "100000/minute")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.credentials import create_user
from auth.models import User
from auth.roles import Role
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService
from orders.service import OrderService
from orders.store import OrderStore

TEST_SECRET = "unit-test-secret-key-0123456789abcdef"
TEST_PASSWORD = "correct-horse-42"


# ---------------------------------------------------------------------------
# Stores and services
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def order_store() -> Generator[OrderStore, None, None]:
    store = OrderStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret_key=TEST_SECRET)


@pytest.fixture
def auth_service(user_store: UserStore, tokens: TokenService) -> AuthService:
    return AuthService(user_store, tokens)


@pytest.fixture
def order_service(order_store: OrderStore, user_store: UserStore) -> OrderService:
    return OrderService(order_store, user_store)


@pytest.fixture
def add_user(user_store: UserStore) -> Callable[..., User]:
    """Return a helper that saves a user with TEST_PASSWORD and returns it."""

    def _add(email: str, role: Role = Role.viewer, is_active: bool = True) -> User:
        user = create_user(email, TEST_PASSWORD, role)
        user.is_active = is_active
        user_store.save(user)
        return user

    return _add


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, order_store: OrderStore, tokens: TokenService):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.order_store = order_store
        app.state.tokens = tokens
        app.state.auth_service = AuthService(user_store, tokens)
        app.state.order_service = OrderService(order_store, user_store)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app with isolated shared-memory stores.

    One database per test module (named after the module) so modules never
    see each other's users or orders.
    """
    db_name = request.module.__name__.replace(".", "_")
    db_url = f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true"
    user_store = UserStore(db_url)
    order_store = OrderStore(db_url)
    tokens = TokenService(secret_key=TEST_SECRET)

    app.router.lifespan_context = _patch_lifespan(user_store, order_store, tokens)
    limiter.reset()

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    order_store.close()
    user_store.close()

