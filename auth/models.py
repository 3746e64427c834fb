"""
auth/models.py -- Domain types for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in ngo/models.py -- dataclasses own domain shape; stores and routes do the work.

Role is a closed enumeration. Every role comparison in the codebase goes
through this enum and the policy table in auth/policy.py; raw role strings
appear only at the persistence boundary (auth/store.py).

Layer rule: no imports from api/, core/, or ngo/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    org_admin = "org_admin"
    employee = "employee"
    volunteer = "volunteer"
    donor = "donor"
    beneficiary = "beneficiary"


# Roles that only an admin may grant (registration or role change).
ELEVATED_ROLES: frozenset[Role] = frozenset({Role.admin, Role.org_admin, Role.employee})


@dataclass
class Credential:
    """A persisted login identity.

    password_hash is a bcrypt hash. It never leaves the auth and store layers --
    API response models do not declare the field, so it cannot be serialized.

    organization_id is the owning organization for scoped roles (org_admin).
    It is None for global admins and for roles that are not organization-bound.
    """

    username: str
    password_hash: str
    role: Role = Role.volunteer
    id: int | None = None
    organization_id: int | None = None
    email: str | None = None
    phone: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class Principal:
    """The authenticated identity for the duration of one request.

    Built by auth.dependencies from verified token claims plus a fresh store
    read. role is the live stored role, not the role embedded in the token.
    """

    id: int
    role: Role
    organization_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin
