"""
api/routes/v1/auth.py -- Login, registration and identity endpoints.

Routes:
  POST /auth/login     -- password login; returns {auth, token}
  POST /auth/register  -- create an account (bootstrap, admin or self-service)
  GET  /auth/me        -- the caller's principal and profile (requires auth)

Login outcomes:
  200 {"auth": true,  "token": "<jwt>"}
  401 {"auth": false, "token": null}    wrong password
  404 {"auth": false, "token": null}    unknown username
Every login response carries Cache-Control: no-store. An unknown username
still pays for one bcrypt comparison against DUMMY_HASH, so both failure
branches take the same time.

Registration rules, in order:
  1. No accounts yet: anyone may register, and the account must be an admin.
  2. Elevated roles (admin, org_admin, employee) need an admin caller.
  3. donor / volunteer / beneficiary: an admin may always register them;
     anonymous sign-up is allowed while SELF_REGISTRATION_ENABLED is true.
     Only admins may attach an organization.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, MeResponse, RegisterRequest, UserResponse
from api.routes.v1.common import bad_request
from api.routes.v1.users import create_credential
from auth.dependencies import get_principal, try_get_principal
from auth.errors import AuthorizationDeniedError, PrincipalNotFoundError
from auth.models import ELEVATED_ROLES, Principal, Role
from auth.passwords import DUMMY_HASH, verify_password
from auth.policy import is_admin
from auth.store import CredentialStore
from auth.tokens import TokenIssuer
from core.config import Settings

logger = logging.getLogger("ngomanager.auth")

# Auth policy:
# - POST /auth/login:     public
# - POST /auth/register:  public for bootstrap and self-service roles; admin for the rest
# - GET  /auth/me:        requires auth (get_principal)
router = APIRouter()


def _login_response(status_code: int, token: str | None = None) -> JSONResponse:
    resp = JSONResponse(
        status_code=status_code,
        content=LoginResponse(auth=token is not None, token=token).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange username and password for a bearer token."""
    store: CredentialStore = request.app.state.credential_store
    issuer: TokenIssuer = request.app.state.token_issuer

    credential = store.get_by_username(body.username)
    if credential is None:
        verify_password(body.password, DUMMY_HASH)
        logger.info("Login failed: unknown username")
        return _login_response(404)

    if not verify_password(body.password, credential.password_hash):
        logger.info("Login failed: wrong password for user %s", credential.id)
        return _login_response(401)

    token = issuer.issue(credential.id, credential.role)
    logger.info("User %s logged in", credential.id)
    return _login_response(200, token)


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> UserResponse:
    """Create an account under the registration rules in the module docstring."""
    store: CredentialStore = request.app.state.credential_store
    settings: Settings = request.app.state.settings
    organization_id = body.organization_id

    if not store.has_users():
        if body.role is not Role.admin:
            raise bad_request("bootstrap_requires_admin", "The first account must be an admin.")
        registered_by = "bootstrap"
    else:
        caller = try_get_principal(request)
        caller_is_admin = caller is not None and is_admin(caller)
        registered_by = f"admin {caller.id}" if caller_is_admin else "self-service"
        if body.role in ELEVATED_ROLES and not caller_is_admin:
            raise AuthorizationDeniedError(f"registering role {body.role.value} requires an admin")
        if not caller_is_admin:
            if not settings.self_registration_enabled:
                raise AuthorizationDeniedError("self-registration is disabled")
            organization_id = None

    credential = create_credential(
        request,
        username=body.username,
        password=body.password,
        role=body.role,
        organization_id=organization_id,
        profile=body.model_dump(exclude={"username", "password", "role", "organization_id"}),
    )
    logger.info(
        "Registered user %s (%s) by %s",
        credential.id,
        credential.role.value,
        registered_by,
    )
    return UserResponse.model_validate(credential)


@router.get("/auth/me", response_model=MeResponse)
def me(request: Request, principal: Principal = Depends(get_principal)) -> MeResponse:
    """Return the live role and organization of the caller plus their profile."""
    store: CredentialStore = request.app.state.credential_store
    credential = store.get_by_id(principal.id)
    if credential is None:
        raise PrincipalNotFoundError()
    return MeResponse(
        user_id=credential.id,
        username=credential.username,
        role=principal.role,
        organization_id=principal.organization_id,
        email=credential.email,
        phone=credential.phone,
        first_name=credential.first_name,
        last_name=credential.last_name,
        address=credential.address,
        city=credential.city,
        country=credential.country,
    )
