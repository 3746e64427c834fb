"""
tests/test_admins_routes.py -- Integration tests for /api/admins.

Covers:
  - Admin-only access (org_admin and volunteer get 401)
  - Listing returns admin accounts only
  - Create / read / update / delete an admin
  - Non-admin ids are 404 through this router
  - Ids outside the storable range are 422
  - Demoting or deleting an admin is allowed while another admin remains

Fixtures used (from conftest.py):
  - seeded: SeededApp with one admin, volunteer, alice (donor) and two org_admins
"""

from __future__ import annotations


def test_non_admins_denied(seeded):
    for user in ("volunteer", "org_admin_a"):
        assert seeded.client.get("/api/admins", headers=seeded.headers(user)).status_code == 401


def test_list_only_admins(seeded):
    data = seeded.client.get("/api/admins", headers=seeded.headers("admin")).json()["data"]
    assert data
    assert all(u["role"] == "admin" for u in data)
    assert "admin" in {u["username"] for u in data}


def test_admin_lifecycle(seeded):
    headers = seeded.headers("admin")
    resp = seeded.client.post(
        "/api/admins", json={"username": "second-admin", "password": "longenough", "email": "ops@example.org"}, headers=headers
    )
    assert resp.status_code == 201, resp.text
    created = resp.json()
    assert created["role"] == "admin"
    assert created["organization_id"] is None

    path = f"/api/admins/{created['id']}"
    assert seeded.client.get(path, headers=headers).json()["email"] == "ops@example.org"

    resp = seeded.client.put(path, json={"first_name": "Olu"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["first_name"] == "Olu"

    assert seeded.client.delete(path, headers=headers).status_code == 204
    assert seeded.client.get(path, headers=headers).status_code == 404


def test_demote_while_another_admin_remains(seeded):
    headers = seeded.headers("admin")
    created = seeded.client.post(
        "/api/admins", json={"username": "temp-admin", "password": "longenough"}, headers=headers
    ).json()
    resp = seeded.client.put(f"/api/admins/{created['id']}", json={"role": "donor"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["role"] == "donor"
    # No longer an admin, so no longer addressable here.
    assert seeded.client.get(f"/api/admins/{created['id']}", headers=headers).status_code == 404


def test_non_admin_id_is_not_found(seeded):
    resp = seeded.client.get(f"/api/admins/{seeded.users['volunteer']}", headers=seeded.headers("admin"))
    assert resp.status_code == 404


def test_cannot_delete_self(seeded):
    resp = seeded.client.delete(f"/api/admins/{seeded.users['admin']}", headers=seeded.headers("admin"))
    assert resp.status_code == 400


def test_out_of_range_id(seeded):
    resp = seeded.client.get("/api/admins/99999999999999999999", headers=seeded.headers("admin"))
    assert resp.status_code == 422
