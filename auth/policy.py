"""
auth/policy.py -- Centralized role-predicate table for every protected resource.

All authorization decisions go through this module. Routes never compare role
strings themselves; they name a Resource and let the table pick the Rule.

Rules:
  ADMIN_ONLY          role == admin
  ADMIN_OR_ORG_ADMIN  role == admin
                      OR (role == org_admin AND resource.organization_id == principal.organization_id)
  SELF_OR_ADMIN       role == admin OR resource owner id == principal.id

Evaluation is a pure function of (principal, resource, ownership facts). For
resource-scoped rules the route must load the resource first -- a missing
resource yields 404 before any authorization check runs.

Denial raises AuthorizationDeniedError, which the API layer renders as 401
with a static message.

Layer rule: auth/policy.py may import from fastapi because require() builds a
FastAPI dependency. No imports from api/ or ngo/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from fastapi import Depends

from auth.dependencies import get_principal
from auth.errors import AuthorizationDeniedError
from auth.models import Principal, Role

logger = logging.getLogger("ngomanager.auth")


class Rule(str, Enum):
    ADMIN_ONLY = "admin_only"
    ADMIN_OR_ORG_ADMIN = "admin_or_org_admin"
    SELF_OR_ADMIN = "self_or_admin"


class Resource(str, Enum):
    admins = "admins"
    users = "users"
    user_profile = "user_profile"
    organizations = "organizations"
    donors = "donors"
    beneficiaries = "beneficiaries"
    volunteers = "volunteers"
    employees = "employees"
    events = "events"
    projects = "projects"
    reports = "reports"
    attendance = "attendance"


POLICY: dict[Resource, Rule] = {
    Resource.admins: Rule.ADMIN_ONLY,
    Resource.users: Rule.ADMIN_ONLY,
    Resource.user_profile: Rule.SELF_OR_ADMIN,
    Resource.organizations: Rule.ADMIN_ONLY,
    Resource.donors: Rule.ADMIN_ONLY,
    Resource.beneficiaries: Rule.ADMIN_ONLY,
    Resource.volunteers: Rule.ADMIN_ONLY,
    Resource.employees: Rule.ADMIN_ONLY,
    Resource.events: Rule.ADMIN_ONLY,
    Resource.projects: Rule.ADMIN_ONLY,
    Resource.reports: Rule.ADMIN_OR_ORG_ADMIN,
    Resource.attendance: Rule.ADMIN_OR_ORG_ADMIN,
}


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_admin(principal: Principal) -> bool:
    return principal.role is Role.admin


def is_org_admin_of(principal: Principal, organization_id: int | None) -> bool:
    """True if principal is an org_admin of exactly this organization.

    An org_admin without an organization, or a resource without one, never
    matches -- None is not a wildcard.
    """
    return (
        principal.role is Role.org_admin
        and principal.organization_id is not None
        and organization_id is not None
        and principal.organization_id == organization_id
    )


def is_self_or_admin(principal: Principal, owner_id: int | None) -> bool:
    return is_admin(principal) or (owner_id is not None and principal.id == owner_id)


def is_allowed(
    principal: Principal,
    resource: Resource,
    *,
    owner_id: int | None = None,
    organization_id: int | None = None,
) -> bool:
    """Evaluate the table rule for resource against principal.

    owner_id / organization_id describe the addressed record. For the
    collection-level check on ADMIN_OR_ORG_ADMIN resources (list, create),
    pass organization_id=principal.organization_id to ask "may this principal
    act inside its own organization at all".
    """
    rule = POLICY[resource]
    if rule is Rule.ADMIN_ONLY:
        return is_admin(principal)
    if rule is Rule.ADMIN_OR_ORG_ADMIN:
        return is_admin(principal) or is_org_admin_of(principal, organization_id)
    if rule is Rule.SELF_OR_ADMIN:
        return is_self_or_admin(principal, owner_id)
    return False


def authorize(
    principal: Principal,
    resource: Resource,
    *,
    owner_id: int | None = None,
    organization_id: int | None = None,
) -> None:
    """Raise AuthorizationDeniedError unless is_allowed() passes."""
    if not is_allowed(principal, resource, owner_id=owner_id, organization_id=organization_id):
        logger.warning(
            "Authorization denied: principal=%s role=%s resource=%s",
            principal.id,
            principal.role.value,
            resource.value,
        )
        raise AuthorizationDeniedError(f"{POLICY[resource].value} check failed for {resource.value}")


def require(resource: Resource) -> Callable[..., Principal]:
    """Build a FastAPI dependency enforcing the collection-level rule for resource.

    For ADMIN_ONLY resources this is the whole check and it runs before the
    handler, so a denied request never reaches the store.

    For ADMIN_OR_ORG_ADMIN resources it admits admins and org_admins bound to
    an organization; the handler still scopes rows and authorizes individual
    records with authorize().

    Use as a FastAPI dependency:
        @router.post("/")
        def route(principal: Principal = Depends(require(Resource.donors))): ...
    """

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        authorize(principal, resource, owner_id=principal.id, organization_id=principal.organization_id)
        return principal

    return dependency
