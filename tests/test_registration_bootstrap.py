"""
tests/test_registration_bootstrap.py -- First-account registration on an empty database.

Covers:
  - The first account may be created without authentication and must be an admin
  - Once an account exists, anonymous admin registration is refused

Fixtures used (from conftest.py):
  - empty_app: TestClient over a database with no accounts
"""

from __future__ import annotations


def test_first_account_can_be_admin(empty_app):
    resp = empty_app.post("/auth/register", json={"username": "founder", "password": "longenough", "role": "admin"})
    assert resp.status_code == 201, resp.text
    assert resp.json()["role"] == "admin"

    login = empty_app.post("/auth/login", json={"username": "founder", "password": "longenough"})
    assert login.status_code == 200
    assert login.json()["auth"] is True


def test_first_account_must_be_admin(empty_app):
    resp = empty_app.post("/auth/register", json={"username": "early-bird", "password": "longenough", "role": "donor"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "bootstrap_requires_admin"


def test_second_anonymous_admin_refused(empty_app):
    first = empty_app.post("/auth/register", json={"username": "founder", "password": "longenough", "role": "admin"})
    assert first.status_code == 201
    second = empty_app.post("/auth/register", json={"username": "usurper", "password": "longenough", "role": "admin"})
    assert second.status_code == 401


def test_protected_routes_need_a_token(empty_app):
    assert empty_app.get("/api/donors").status_code == 401
