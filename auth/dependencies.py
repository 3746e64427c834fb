"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Per-request state machine (terminal states: Authenticated, Rejected):
  1. NoToken         Authorization header absent           -> 401 "no token provided"
  2. MalformedHeader nothing extractable after "Bearer "    -> 401 "invalid token format"
  3. Verify          bad signature / structure / expired    -> 400 "invalid token"
  4. LoadPrincipal   subject no longer in the store         -> 404 "user not found"
  5. Authenticated   Principal(id, live role, live organization)

Both raw tokens and "Bearer <token>" are accepted.

The credential record is re-read on every request and the role placed on the
Principal is the stored role, never the role claim from the token. A demoted
or deleted account loses access on its very next request.

authenticate() raises AuthError subclasses; api/main.py renders them. Store
failures are not AuthErrors and propagate to the generic 500 handler.

get_principal() is the hard dependency. try_get_principal() is the soft
variant (None on any auth failure) used where anonymous access is allowed.

Layer rule: no imports from api/ or ngo/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.errors import (
    AuthError,
    MalformedCredentialError,
    MissingCredentialError,
    PrincipalNotFoundError,
    TokenExpiredError,
    TokenInvalidError,
)
from auth.models import Principal
from auth.store import CredentialStore
from auth.tokens import TokenVerifier

logger = logging.getLogger("ngomanager.auth")


def extract_token(header: str | None) -> str:
    """Return the token value from an Authorization header.

    Raises MissingCredentialError when the header is absent and
    MalformedCredentialError when it is present but yields no single token.
    """
    if header is None:
        raise MissingCredentialError()
    value = header.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == "bearer":
        value = rest.strip()
    if not value or any(ch.isspace() for ch in value):
        raise MalformedCredentialError()
    return value


def authenticate(header: str | None, verifier: TokenVerifier, store: CredentialStore) -> Principal:
    """Run the full header -> token -> claims -> live record sequence.

    One store read, no writes.
    """
    token = extract_token(header)
    try:
        claims = verifier.verify(token)
    except TokenExpiredError:
        logger.info("Rejected expired token")
        raise
    except TokenInvalidError as exc:
        logger.warning("Rejected invalid token: %s", exc.reason)
        raise

    credential = store.get_by_id(claims.subject_id)
    if credential is None:
        logger.info("Token subject %s no longer exists", claims.subject_id)
        raise PrincipalNotFoundError()

    if credential.role is not claims.role:
        logger.info(
            "Role for user %s changed since issuance (%s -> %s)",
            credential.id,
            claims.role.value,
            credential.role.value,
        )
    return Principal(id=credential.id, role=credential.role, organization_id=credential.organization_id)


def get_principal(request: Request) -> Principal:
    """Require authentication. Raises an AuthError subclass on any failure.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(principal: Principal = Depends(get_principal)): ...
    """
    return authenticate(
        request.headers.get("Authorization"),
        request.app.state.token_verifier,
        request.app.state.credential_store,
    )


def try_get_principal(request: Request) -> Principal | None:
    """Attempt to authenticate the request. Returns None on any auth failure.

    Never raises an AuthError -- callers that need a hard failure should use
    get_principal(). Store errors still propagate.
    """
    try:
        return get_principal(request)
    except AuthError:
        return None
