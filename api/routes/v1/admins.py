"""
api/routes/v1/admins.py -- Global admin accounts. Admin only.

Admins are ordinary credentials with role=admin; this router is a filtered
view over the same table as api/routes/v1/users.py and reuses its guards.
Addressing a non-admin account through /api/admins/{id} is a 404.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response

from api.models import AdminCreate, Page, UserResponse, UserUpdate
from api.routes.v1.common import RecordId, bad_request, list_query, not_found, to_page
from api.routes.v1.users import apply_user_changes, create_credential, remove_credential
from auth.models import Credential, Principal, Role
from auth.policy import Resource, require
from auth.store import CredentialStore
from core.paging import ListQuery

logger = logging.getLogger("ngomanager.routes")

router = APIRouter()
_guard = require(Resource.admins)


def _load_admin(request: Request, user_id: int) -> Credential:
    store: CredentialStore = request.app.state.credential_store
    credential = store.get_by_id(user_id)
    if credential is None or credential.role is not Role.admin:
        raise not_found("Admin")
    return credential


@router.get("", response_model=Page[UserResponse])
def list_admins(
    request: Request,
    query: ListQuery = Depends(list_query),
    principal: Principal = Depends(_guard),
) -> Page:
    store: CredentialStore = request.app.state.credential_store
    items, total = store.list_page(query, role=Role.admin)
    return to_page(items, total, query, UserResponse)


@router.post("", response_model=UserResponse, status_code=201)
def create_admin(request: Request, body: AdminCreate, principal: Principal = Depends(_guard)) -> UserResponse:
    credential = create_credential(
        request,
        username=body.username,
        password=body.password,
        role=Role.admin,
        organization_id=None,
        profile=body.model_dump(exclude={"username", "password"}),
    )
    logger.info("Admin %s created by admin %s", credential.id, principal.id)
    return UserResponse.model_validate(credential)


@router.get("/{user_id}", response_model=UserResponse)
def get_admin(request: Request, user_id: RecordId, principal: Principal = Depends(_guard)) -> UserResponse:
    return UserResponse.model_validate(_load_admin(request, user_id))


@router.put("/{user_id}", response_model=UserResponse)
def update_admin(
    request: Request,
    user_id: RecordId,
    body: UserUpdate,
    principal: Principal = Depends(_guard),
) -> UserResponse:
    target = _load_admin(request, user_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise bad_request("no_changes", "No fields to update.")
    return apply_user_changes(request, principal, target, changes)


@router.delete("/{user_id}", status_code=204)
def delete_admin(request: Request, user_id: RecordId, principal: Principal = Depends(_guard)) -> Response:
    _load_admin(request, user_id)
    remove_credential(request, principal, user_id, label="Admin")
    return Response(status_code=204)
