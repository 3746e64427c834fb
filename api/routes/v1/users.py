"""
api/routes/v1/users.py -- User account management.

Routes:
  GET    /api/users          -- paginated list, optional ?role= filter (admin only)
  POST   /api/users          -- create an account with any role (admin only)
  GET    /api/users/{id}     -- read one account (self or admin)
  PUT    /api/users/{id}     -- partial update (self or admin; role and organization_id admin only)
  DELETE /api/users/{id}     -- delete an account (admin only)

Guards:
  An admin cannot delete their own account.
  The last admin cannot be demoted or deleted.
  An org_admin account must point at an existing organization.

Passwords arrive in plain text over the wire and are hashed here with
auth.passwords.hash_password before they reach the store.

The helpers at the bottom are shared with admins.py and auth.py.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.exc import IntegrityError

from api.models import Page, RegisterRequest, UserResponse, UserUpdate
from api.routes.v1.common import RecordId, bad_request, conflict, list_query, not_found, to_page
from auth.dependencies import get_principal
from auth.models import Credential, Principal, Role
from auth.passwords import hash_password
from auth.policy import Resource, authorize, is_admin, require
from auth.store import CredentialStore
from core.paging import ListQuery
from ngo.models import Organization
from ngo.store import NGOStore

logger = logging.getLogger("ngomanager.routes")

# Auth policy:
# - GET    /api/users:       require(Resource.users) -- admin only, checked before the handler
# - POST   /api/users:       require(Resource.users)
# - GET    /api/users/{id}:  load (404), then authorize(user_profile, owner_id=id)
# - PUT    /api/users/{id}:  load (404), then authorize(user_profile); role/org changes need admin
# - DELETE /api/users/{id}:  require(Resource.users)
router = APIRouter()

_PROFILE_FIELDS = ("email", "phone", "first_name", "last_name", "address", "city", "country")


@router.get("", response_model=Page[UserResponse])
def list_users(
    request: Request,
    query: ListQuery = Depends(list_query),
    role: Optional[Role] = Query(None, description="Only return accounts with this role."),
    principal: Principal = Depends(require(Resource.users)),
) -> Page:
    store: CredentialStore = request.app.state.credential_store
    items, total = store.list_page(query, role=role)
    return to_page(items, total, query, UserResponse)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    request: Request,
    body: RegisterRequest,
    principal: Principal = Depends(require(Resource.users)),
) -> UserResponse:
    credential = create_credential(
        request,
        username=body.username,
        password=body.password,
        role=body.role,
        organization_id=body.organization_id,
        profile=body.model_dump(include=set(_PROFILE_FIELDS)),
    )
    logger.info("User %s (%s) created by admin %s", credential.id, credential.role.value, principal.id)
    return UserResponse.model_validate(credential)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(request: Request, user_id: RecordId, principal: Principal = Depends(get_principal)) -> UserResponse:
    store: CredentialStore = request.app.state.credential_store
    credential = store.get_by_id(user_id)
    if credential is None:
        raise not_found("User")
    authorize(principal, Resource.user_profile, owner_id=credential.id)
    return UserResponse.model_validate(credential)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    request: Request,
    user_id: RecordId,
    body: UserUpdate,
    principal: Principal = Depends(get_principal),
) -> UserResponse:
    store: CredentialStore = request.app.state.credential_store
    target = store.get_by_id(user_id)
    if target is None:
        raise not_found("User")
    authorize(principal, Resource.user_profile, owner_id=target.id)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise bad_request("no_changes", "No fields to update.")
    return apply_user_changes(request, principal, target, changes)


@router.delete("/{user_id}", status_code=204)
def delete_user(
    request: Request,
    user_id: RecordId,
    principal: Principal = Depends(require(Resource.users)),
) -> Response:
    remove_credential(request, principal, user_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Helpers shared with admins.py and auth.py
# ---------------------------------------------------------------------------


def check_organization(request: Request, role: Role, organization_id: Optional[int]) -> None:
    """Raise 400 unless an org_admin account points at an existing organization."""
    if role is not Role.org_admin:
        return
    ngo_store: NGOStore = request.app.state.ngo_store
    if organization_id is None or ngo_store.get(Organization, organization_id) is None:
        raise bad_request("unknown_organization", "An org_admin account needs an existing organization_id.")


def create_credential(
    request: Request,
    *,
    username: str,
    password: str,
    role: Role,
    organization_id: Optional[int],
    profile: dict,
) -> Credential:
    """Hash the password, insert the credential and return the stored record.

    Duplicate username or email -> 409.
    """
    check_organization(request, role, organization_id)
    store: CredentialStore = request.app.state.credential_store
    credential = Credential(
        username=username,
        password_hash=hash_password(password),
        role=role,
        organization_id=organization_id,
        **profile,
    )
    try:
        user_id = store.create(credential)
    except IntegrityError as exc:
        raise conflict("A user with that username or email already exists.") from exc
    return _reload(store, user_id)


def apply_user_changes(request: Request, principal: Principal, target: Credential, changes: dict) -> UserResponse:
    """Validate and persist changes to target, returning the updated account.

    changes uses UserUpdate field names; password is hashed here. The caller
    has already passed the self-or-admin check.
    """
    store: CredentialStore = request.app.state.credential_store

    role_changed = "role" in changes and Role(changes["role"]) is not target.role
    org_changed = "organization_id" in changes and changes["organization_id"] != target.organization_id
    if (role_changed or org_changed) and not is_admin(principal):
        # Profile fields are self-service; role and organization are admin-only.
        authorize(principal, Resource.users)

    new_role = Role(changes.get("role", target.role))
    if target.role is Role.admin and new_role is not Role.admin and store.count_admins() <= 1:
        raise bad_request("last_admin", "Cannot demote the last admin account.")
    check_organization(request, new_role, changes.get("organization_id", target.organization_id))

    if "password" in changes:
        changes["password_hash"] = hash_password(changes.pop("password"))
    try:
        store.update(target.id, **changes)
    except IntegrityError as exc:
        raise conflict("A user with that username or email already exists.") from exc

    if new_role is not target.role:
        logger.info("User %s role changed %s -> %s by %s", target.id, target.role.value, new_role.value, principal.id)
    return UserResponse.model_validate(_reload(store, target.id))


def remove_credential(request: Request, principal: Principal, user_id: int, *, label: str = "User") -> None:
    """Delete an account after the self-delete and last-admin guards."""
    store: CredentialStore = request.app.state.credential_store
    target = store.get_by_id(user_id)
    if target is None:
        raise not_found(label)
    if target.id == principal.id:
        raise bad_request("self_delete", "You cannot delete your own account.")
    if target.role is Role.admin and store.count_admins() <= 1:
        raise bad_request("last_admin", "Cannot delete the last admin account.")
    store.delete(user_id)
    logger.info("User %s (%s) deleted by admin %s", user_id, target.role.value, principal.id)


def _reload(store: CredentialStore, user_id: int) -> Credential:
    credential = store.get_by_id(user_id)
    if credential is None:
        raise HTTPException(
            status_code=500,
            detail={"code": "internal_error", "message": "User not found after write."},
        )
    return credential
