"""
tests/test_startup.py -- The real application lifespan.

Covers:
  - A production config with no SECRET_KEY aborts startup with ConfigurationError
  - A valid config puts settings, token services and both stores on app.state

Each test runs api.main.lifespan on its own FastAPI instance, so the shared
app object used by the integration fixtures is never touched.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import api.main as main_module
from auth.errors import ConfigurationError
from auth.store import CredentialStore
from auth.tokens import TokenIssuer, TokenVerifier
from ngo.store import NGOStore


def test_missing_secret_aborts_startup(settings_factory, monkeypatch, tmp_path):
    settings = settings_factory(secret_key="", debug=False, database_url=f"sqlite:///{tmp_path / 'never.db'}")
    monkeypatch.setattr(main_module, "get_settings", lambda: settings)

    with pytest.raises(ConfigurationError):
        with TestClient(FastAPI(lifespan=main_module.lifespan)):
            pass
    # Token services are built first, so the database is never opened.
    assert not (tmp_path / "never.db").exists()


def test_valid_config_populates_app_state(settings_factory, monkeypatch, tmp_path):
    settings = settings_factory(database_url=f"sqlite:///{tmp_path / 'startup.db'}")
    monkeypatch.setattr(main_module, "get_settings", lambda: settings)
    app = FastAPI(lifespan=main_module.lifespan)

    with TestClient(app):
        assert app.state.settings is settings
        assert isinstance(app.state.token_issuer, TokenIssuer)
        assert isinstance(app.state.token_verifier, TokenVerifier)
        assert isinstance(app.state.credential_store, CredentialStore)
        assert isinstance(app.state.ngo_store, NGOStore)
