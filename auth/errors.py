"""
auth/errors.py -- Exception taxonomy for the authentication/authorization core.

Every per-request failure subclasses AuthError and carries the HTTP status,
a stable machine-readable code, and a static client-facing message. The API
layer registers one exception handler for AuthError; nothing else in the
request path needs to know how a given failure maps to HTTP.

Messages are deliberately minimal. Expired and invalid tokens share the same
status and message so the response is not an oracle for token state; the
distinction is kept in the class hierarchy for server-side logging only.

ConfigurationError and ValidationError are NOT AuthErrors: they are programmer
or deployment faults, never client responses.

Layer rule: no imports from api/, core/, or ngo/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for failures that short-circuit a request in the auth path."""

    status_code: int = 401
    code: str = "unauthorized"
    message: str = "unauthorized"

    def __init__(self, reason: str | None = None) -> None:
        # reason is for logs only -- never rendered into the response body.
        self.reason = reason or self.message
        super().__init__(self.reason)


class MissingCredentialError(AuthError):
    """No Authorization header on the request."""

    status_code = 401
    code = "no_token"
    message = "no token provided"


class MalformedCredentialError(AuthError):
    """Authorization header present but no token value could be extracted."""

    status_code = 401
    code = "invalid_token_format"
    message = "invalid token format"


class TokenInvalidError(AuthError):
    """Bad signature, wrong algorithm, malformed structure, or unusable claims."""

    status_code = 400
    code = "invalid_token"
    message = "invalid token"


class TokenExpiredError(TokenInvalidError):
    """Signature is valid but the token is past its exp claim."""


class PrincipalNotFoundError(AuthError):
    """The token's subject no longer exists in the credential store."""

    status_code = 404
    code = "user_not_found"
    message = "user not found"


class AuthorizationDeniedError(AuthError):
    """Valid principal, but the role/ownership check for the operation failed.

    This system reports denial as 401, not 403.
    """

    status_code = 401
    code = "unauthorized"
    message = "unauthorized"


class ConfigurationError(Exception):
    """The signing secret is missing. Fatal at startup, never per-request."""


class ValidationError(ValueError):
    """Caller passed input the auth core refuses to process (e.g. empty password)."""
