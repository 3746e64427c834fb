"""
tests/conftest.py -- Shared test fixtures for NGO Manager integration tests.

This module provides:
  - make_settings(): explicit Settings with a fixed signing key, no .env read
  - _make_test_stores(): isolated in-memory DB shared by both stores
  - _patch_lifespan(): wires test stores and token services into app.state
  - seeded: module-scoped TestClient over a seeded DB (admin, volunteer,
            donor alice, one org_admin for each of two organizations)
  - empty_app: function-scoped TestClient over an empty DB (bootstrap tests)

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

app.state is global to the app object. A module must use either `seeded` or
`empty_app`, never both, or the second client replaces the first one's stores.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import NamedTuple

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import Credential, Role
from auth.passwords import hash_password
from auth.store import CredentialStore
from auth.tokens import TokenIssuer, TokenVerifier
from core.config import Settings
from ngo.models import Organization
from ngo.store import NGOStore

TEST_SECRET = "test-signing-key-0123456789abcdef-0123456789"
DEFAULT_PASSWORD = "password123"


def make_settings(**overrides) -> Settings:
    """Settings for tests: fixed secret, never reads .env."""
    values = {"secret_key": TEST_SECRET, "debug": False}
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[CredentialStore, NGOStore]:
    """Create both stores over one named shared-memory SQLite database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    db_url = f"sqlite:///file:test_ngo_{db_suffix}?mode=memory&cache=shared&uri=true"
    return CredentialStore(db_url), NGOStore(db_url)


def _patch_lifespan(settings: Settings, credential_store: CredentialStore, ngo_store: NGOStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = settings
        app.state.credential_store = credential_store
        app.state.ngo_store = ngo_store
        app.state.token_issuer = TokenIssuer(settings)
        app.state.token_verifier = TokenVerifier(settings)
        yield

    return test_lifespan


def _add_user(store: CredentialStore, username: str, role: Role, organization_id=None, password=DEFAULT_PASSWORD) -> int:
    return store.create(
        Credential(
            username=username,
            password_hash=hash_password(password),
            role=role,
            organization_id=organization_id,
        )
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class SeededApp(NamedTuple):
    client: TestClient
    settings: Settings
    credential_store: CredentialStore
    ngo_store: NGOStore
    issuer: TokenIssuer
    users: dict[str, int]
    orgs: dict[str, int]

    def token(self, username: str) -> str:
        user_id = self.users[username]
        return self.issuer.issue(user_id, self.credential_store.get_by_id(user_id).role)

    def headers(self, username: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token(username)}"}


@pytest.fixture(scope="module")
def seeded(request) -> Generator[SeededApp, None, None]:
    """Yield a SeededApp for API integration tests.

    Seeded accounts (password "password123" unless noted):
      admin         admin
      volunteer     volunteer
      alice         donor, password "secret123"
      org_admin_a   org_admin of organization "a"
      org_admin_b   org_admin of organization "b"
    """
    settings = make_settings()
    credential_store, ngo_store = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])

    orgs = {}
    for key in ("a", "b"):
        orgs[key] = ngo_store.create(
            Organization(
                name=f"Relief Org {key.upper()}",
                registration_number=f"REG-{key.upper()}",
                address=f"{key} street 1",
                contact_email=f"contact@{key}.example.org",
                contact_phone="555-0100",
            )
        )

    users = {
        "admin": _add_user(credential_store, "admin", Role.admin),
        "volunteer": _add_user(credential_store, "volunteer", Role.volunteer),
        "alice": _add_user(credential_store, "alice", Role.donor, password="secret123"),
        "org_admin_a": _add_user(credential_store, "org_admin_a", Role.org_admin, orgs["a"]),
        "org_admin_b": _add_user(credential_store, "org_admin_b", Role.org_admin, orgs["b"]),
    }

    app.router.lifespan_context = _patch_lifespan(settings, credential_store, ngo_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield SeededApp(client, settings, credential_store, ngo_store, TokenIssuer(settings), users, orgs)

    credential_store.close()
    ngo_store.close()


@pytest.fixture
def empty_app() -> Generator[TestClient, None, None]:
    """Yield a TestClient over a database with no accounts at all."""
    settings = make_settings()
    credential_store, ngo_store = _make_test_stores(f"empty_{uuid.uuid4().hex}")
    app.router.lifespan_context = _patch_lifespan(settings, credential_store, ngo_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    credential_store.close()
    ngo_store.close()


@pytest.fixture
def settings_factory():
    """Return make_settings so unit tests can build variants of the test Settings."""
    return make_settings
