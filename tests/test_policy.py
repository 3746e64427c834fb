"""Unit tests for auth/policy.py -- role predicates and the policy table.

Covers:
- every resource has a rule; only reports/attendance are organization-scoped
- ADMIN_ONLY admits admins and nobody else
- ADMIN_OR_ORG_ADMIN admits org_admins for their own organization only,
  and never when either side's organization is None
- SELF_OR_ADMIN admits the owner and admins
- authorize() raises AuthorizationDeniedError (401) on denial
"""

import pytest

from auth.errors import AuthorizationDeniedError
from auth.models import Principal, Role
from auth.policy import POLICY, Resource, Rule, authorize, is_allowed, is_org_admin_of, is_self_or_admin

ADMIN = Principal(id=1, role=Role.admin)
ORG_ADMIN_10 = Principal(id=2, role=Role.org_admin, organization_id=10)
ORG_ADMIN_NONE = Principal(id=3, role=Role.org_admin, organization_id=None)
VOLUNTEER = Principal(id=4, role=Role.volunteer, organization_id=10)

ADMIN_ONLY_RESOURCES = [r for r, rule in POLICY.items() if rule is Rule.ADMIN_ONLY]


class TestPolicyTable:
    def test_every_resource_has_a_rule(self):
        assert set(POLICY) == set(Resource)

    def test_scoped_resources(self):
        scoped = {r for r, rule in POLICY.items() if rule is Rule.ADMIN_OR_ORG_ADMIN}
        assert scoped == {Resource.reports, Resource.attendance}

    def test_user_profile_is_self_or_admin(self):
        assert POLICY[Resource.user_profile] is Rule.SELF_OR_ADMIN


class TestAdminOnly:
    @pytest.mark.parametrize("resource", ADMIN_ONLY_RESOURCES)
    def test_admin_allowed(self, resource):
        assert is_allowed(ADMIN, resource)

    @pytest.mark.parametrize("role", [r for r in Role if r is not Role.admin])
    @pytest.mark.parametrize("resource", ADMIN_ONLY_RESOURCES)
    def test_everyone_else_denied(self, resource, role):
        principal = Principal(id=99, role=role, organization_id=10)
        assert not is_allowed(principal, resource, owner_id=99, organization_id=10)


class TestAdminOrOrgAdmin:
    def test_admin_allowed_for_any_organization(self):
        assert is_allowed(ADMIN, Resource.reports, organization_id=10)
        assert is_allowed(ADMIN, Resource.reports, organization_id=None)

    def test_org_admin_allowed_for_own_organization(self):
        assert is_allowed(ORG_ADMIN_10, Resource.reports, organization_id=10)
        assert is_allowed(ORG_ADMIN_10, Resource.attendance, organization_id=10)

    def test_org_admin_denied_for_other_organization(self):
        assert not is_allowed(ORG_ADMIN_10, Resource.reports, organization_id=11)

    def test_none_is_not_a_wildcard(self):
        assert not is_org_admin_of(ORG_ADMIN_10, None)
        assert not is_org_admin_of(ORG_ADMIN_NONE, None)
        assert not is_allowed(ORG_ADMIN_NONE, Resource.reports, organization_id=None)

    def test_other_roles_denied_even_in_same_organization(self):
        assert not is_allowed(VOLUNTEER, Resource.reports, organization_id=10)


class TestSelfOrAdmin:
    def test_owner_allowed(self):
        assert is_self_or_admin(VOLUNTEER, owner_id=4)
        assert is_allowed(VOLUNTEER, Resource.user_profile, owner_id=4)

    def test_other_user_denied(self):
        assert not is_allowed(VOLUNTEER, Resource.user_profile, owner_id=5)

    def test_missing_owner_denied(self):
        assert not is_self_or_admin(VOLUNTEER, owner_id=None)

    def test_admin_allowed_for_anyone(self):
        assert is_allowed(ADMIN, Resource.user_profile, owner_id=5)


class TestAuthorize:
    def test_allowed_returns_none(self):
        assert authorize(ADMIN, Resource.donors) is None

    def test_denied_raises_401(self):
        with pytest.raises(AuthorizationDeniedError) as exc_info:
            authorize(VOLUNTEER, Resource.donors)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "unauthorized"
