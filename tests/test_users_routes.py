"""
tests/test_users_routes.py -- Integration tests for /api/users.

Covers:
  - Admin list with role filter and search; no password material in responses
  - Self-or-admin reads and updates, 404 before 401
  - Role and organization changes are admin-only
  - Password change re-hashes and takes effect at login
  - Repeating the caller's current role or organization is not a privileged change
  - Ids outside the storable range are 422
  - Guards: last admin cannot be demoted, admins cannot delete themselves
  - Deleting an account invalidates its outstanding tokens

Fixtures used (from conftest.py):
  - seeded: SeededApp with one admin, volunteer, alice (donor) and two org_admins
"""

from __future__ import annotations

import pytest

from auth.models import Credential, Role
from auth.passwords import hash_password


def _new_user(seeded, username: str, role: Role = Role.volunteer) -> int:
    return seeded.credential_store.create(
        Credential(username=username, password_hash=hash_password("password123"), role=role)
    )


def _headers_for(seeded, user_id: int) -> dict[str, str]:
    role = seeded.credential_store.get_by_id(user_id).role
    return {"Authorization": f"Bearer {seeded.issuer.issue(user_id, role)}"}


class TestAdminListing:
    def test_role_filter(self, seeded):
        resp = seeded.client.get("/api/users?role=org_admin", headers=seeded.headers("admin"))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert {u["username"] for u in data} >= {"org_admin_a", "org_admin_b"}
        assert all(u["role"] == "org_admin" for u in data)

    def test_search(self, seeded):
        resp = seeded.client.get("/api/users?search=ALIC", headers=seeded.headers("admin"))
        assert [u["username"] for u in resp.json()["data"]] == ["alice"]

    def test_no_password_material(self, seeded):
        for user in seeded.client.get("/api/users?limit=100", headers=seeded.headers("admin")).json()["data"]:
            assert "password" not in user
            assert "password_hash" not in user

    def test_unknown_role_filter(self, seeded):
        resp = seeded.client.get("/api/users?role=overlord", headers=seeded.headers("admin"))
        assert resp.status_code == 422

    def test_admin_creates_user(self, seeded):
        body = {"username": "made-by-admin", "password": "longenough", "role": "employee", "city": "Nairobi"}
        resp = seeded.client.post("/api/users", json=body, headers=seeded.headers("admin"))
        assert resp.status_code == 201, resp.text
        assert resp.json()["role"] == "employee"
        assert resp.json()["city"] == "Nairobi"

    def test_duplicate_user(self, seeded):
        body = {"username": "volunteer", "password": "longenough"}
        resp = seeded.client.post("/api/users", json=body, headers=seeded.headers("admin"))
        assert resp.status_code == 409


class TestSelfOrAdmin:
    def test_read_own_profile(self, seeded):
        uid = seeded.users["volunteer"]
        resp = seeded.client.get(f"/api/users/{uid}", headers=seeded.headers("volunteer"))
        assert resp.status_code == 200
        assert resp.json()["username"] == "volunteer"

    def test_read_other_profile_denied(self, seeded):
        resp = seeded.client.get(f"/api/users/{seeded.users['alice']}", headers=seeded.headers("volunteer"))
        assert resp.status_code == 401

    def test_missing_user_is_404_first(self, seeded):
        resp = seeded.client.get("/api/users/999999", headers=seeded.headers("volunteer"))
        assert resp.status_code == 404

    def test_admin_reads_anyone(self, seeded):
        resp = seeded.client.get(f"/api/users/{seeded.users['alice']}", headers=seeded.headers("admin"))
        assert resp.status_code == 200

    def test_update_own_profile(self, seeded):
        uid = _new_user(seeded, "self-editor")
        resp = seeded.client.put(f"/api/users/{uid}", json={"phone": "555-0177"}, headers=_headers_for(seeded, uid))
        assert resp.status_code == 200
        assert resp.json()["phone"] == "555-0177"

    def test_update_other_denied(self, seeded):
        resp = seeded.client.put(
            f"/api/users/{seeded.users['alice']}", json={"phone": "555-0000"}, headers=seeded.headers("volunteer")
        )
        assert resp.status_code == 401

    def test_self_promotion_denied(self, seeded):
        uid = _new_user(seeded, "would-be-admin")
        resp = seeded.client.put(f"/api/users/{uid}", json={"role": "admin"}, headers=_headers_for(seeded, uid))
        assert resp.status_code == 401
        assert seeded.credential_store.get_by_id(uid).role is Role.volunteer

    def test_self_organization_change_denied(self, seeded):
        uid = _new_user(seeded, "org-switcher")
        resp = seeded.client.put(
            f"/api/users/{uid}", json={"organization_id": seeded.orgs["a"]}, headers=_headers_for(seeded, uid)
        )
        assert resp.status_code == 401

    def test_repeating_current_role_is_not_a_change(self, seeded):
        """A body that echoes the caller's own role and organization is a plain profile update."""
        uid = _new_user(seeded, "echo-role")
        body = {"role": "volunteer", "organization_id": None, "city": "Accra"}
        resp = seeded.client.put(f"/api/users/{uid}", json=body, headers=_headers_for(seeded, uid))
        assert resp.status_code == 200, resp.text
        assert resp.json()["city"] == "Accra"
        assert resp.json()["role"] == "volunteer"

    def test_org_admin_repeats_own_organization(self, seeded):
        uid = seeded.users["org_admin_a"]
        body = {"role": "org_admin", "organization_id": seeded.orgs["a"], "country": "Ghana"}
        resp = seeded.client.put(f"/api/users/{uid}", json=body, headers=seeded.headers("org_admin_a"))
        assert resp.status_code == 200, resp.text
        assert resp.json()["organization_id"] == seeded.orgs["a"]

    def test_password_change(self, seeded):
        uid = _new_user(seeded, "rotator")
        resp = seeded.client.put(f"/api/users/{uid}", json={"password": "brand-new-pass"}, headers=_headers_for(seeded, uid))
        assert resp.status_code == 200
        assert seeded.client.post("/auth/login", json={"username": "rotator", "password": "password123"}).status_code == 401
        assert seeded.client.post("/auth/login", json={"username": "rotator", "password": "brand-new-pass"}).status_code == 200
        assert seeded.credential_store.get_by_id(uid).password_hash.startswith("$2b$")

    def test_password_over_72_bytes(self, seeded):
        uid = _new_user(seeded, "multibyte-rotator")
        body = {"password": "\u00e9" * 40}
        resp = seeded.client.put(f"/api/users/{uid}", json=body, headers=_headers_for(seeded, uid))
        assert resp.status_code == 422
        assert seeded.client.post("/auth/login", json={"username": "multibyte-rotator", "password": "password123"}).status_code == 200

    def test_empty_update(self, seeded):
        uid = seeded.users["volunteer"]
        resp = seeded.client.put(f"/api/users/{uid}", json={}, headers=seeded.headers("volunteer"))
        assert resp.status_code == 400


class TestAdminChanges:
    def test_admin_changes_role(self, seeded):
        uid = _new_user(seeded, "to-promote")
        body = {"role": "org_admin", "organization_id": seeded.orgs["b"]}
        resp = seeded.client.put(f"/api/users/{uid}", json=body, headers=seeded.headers("admin"))
        assert resp.status_code == 200, resp.text
        assert resp.json()["role"] == "org_admin"
        assert resp.json()["organization_id"] == seeded.orgs["b"]

    def test_org_admin_role_needs_organization(self, seeded):
        uid = _new_user(seeded, "to-promote-badly")
        resp = seeded.client.put(f"/api/users/{uid}", json={"role": "org_admin"}, headers=seeded.headers("admin"))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "unknown_organization"

    def test_last_admin_cannot_be_demoted(self, seeded):
        uid = seeded.users["admin"]
        resp = seeded.client.put(f"/api/users/{uid}", json={"role": "volunteer"}, headers=seeded.headers("admin"))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "last_admin"
        assert seeded.credential_store.get_by_id(uid).role is Role.admin

    def test_admin_cannot_delete_self(self, seeded):
        resp = seeded.client.delete(f"/api/users/{seeded.users['admin']}", headers=seeded.headers("admin"))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "self_delete"


class TestPathIds:
    @pytest.mark.parametrize("user_id", ["99999999999999999999", "9223372036854775808", "0", "-1"])
    def test_out_of_range_id_is_rejected(self, seeded, user_id):
        """Ids SQLite cannot store fail validation instead of reaching the store."""
        resp = seeded.client.get(f"/api/users/{user_id}", headers=seeded.headers("volunteer"))
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    def test_largest_id_is_a_plain_miss(self, seeded):
        resp = seeded.client.get("/api/users/9223372036854775807", headers=seeded.headers("admin"))
        assert resp.status_code == 404

    def test_update_and_delete_validate_ids(self, seeded):
        headers = seeded.headers("admin")
        path = "/api/users/99999999999999999999"
        assert seeded.client.put(path, json={"city": "X"}, headers=headers).status_code == 422
        assert seeded.client.delete(path, headers=headers).status_code == 422


class TestDelete:
    def test_delete_invalidates_tokens(self, seeded):
        uid = _new_user(seeded, "to-delete")
        their_headers = _headers_for(seeded, uid)
        resp = seeded.client.delete(f"/api/users/{uid}", headers=seeded.headers("admin"))
        assert resp.status_code == 204
        assert seeded.client.get("/auth/me", headers=their_headers).status_code == 404

    def test_non_admin_cannot_delete(self, seeded):
        uid = _new_user(seeded, "survivor")
        resp = seeded.client.delete(f"/api/users/{uid}", headers=seeded.headers("volunteer"))
        assert resp.status_code == 401
        assert seeded.credential_store.get_by_id(uid) is not None

    def test_delete_missing(self, seeded):
        resp = seeded.client.delete("/api/users/999999", headers=seeded.headers("admin"))
        assert resp.status_code == 404
