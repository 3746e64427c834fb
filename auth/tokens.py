"""
auth/tokens.py -- JWT issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with Settings.secret_key and
       carry sub (subject id), role, iat and exp as integer epoch seconds.
       There is no server-side revocation store -- validity is fully decided
       by signature and expiry.

  Explicit configuration: TokenIssuer and TokenVerifier take the Settings
       object in their constructor. The secret is read once, when the
       application lifespan builds them, and never looked up again during
       request handling. A missing secret raises ConfigurationError at
       construction, which aborts startup.

  Expiry: python-jose's built-in exp check reads the wall clock directly.
       We disable it and compare exp against an injectable clock instead, so
       expiry behaviour is deterministic under test.

  Errors: verification raises TokenInvalidError (bad signature, malformed,
       missing claims) or TokenExpiredError (subclass). Messages name the
       failure category only -- never the key, never the decoded payload.

Layer rule: no imports from api/ or ngo/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import JWTError, jwt

from auth.errors import ConfigurationError, TokenExpiredError, TokenInvalidError
from auth.models import Role

if TYPE_CHECKING:
    from core.config import Settings

_ALGORITHM = "HS256"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Claims:
    """Structured data recovered from a verified token."""

    subject_id: int
    role: Role
    issued_at: datetime
    expires_at: datetime


def _require_secret(settings: Settings) -> str:
    if not settings.secret_key:
        raise ConfigurationError(
            "SECRET_KEY is required to issue or verify tokens. "
            "Set SECRET_KEY in your environment or .env file. "
            "To run in development mode, set DEBUG=true."
        )
    return settings.secret_key


class TokenIssuer:
    """Creates signed, time-bound bearer tokens.

    Usage:
        issuer = TokenIssuer(get_settings())
        token = issuer.issue(user.id, user.role)
    """

    def __init__(self, settings: Settings, clock: Clock = utcnow) -> None:
        self._secret = _require_secret(settings)
        self._ttl = timedelta(seconds=settings.token_expire_seconds)
        self._clock = clock

    def issue(self, subject_id: int, role: Role) -> str:
        """Encode a signed JWT for subject_id with iat=now and exp=now+TTL.

        Pure function of its inputs, the clock and the secret -- no I/O.
        """
        issued_at = self._clock()
        expires_at = issued_at + self._ttl
        payload = {
            "sub": str(subject_id),
            "role": Role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)


class TokenVerifier:
    """Validates signature and expiry and recovers Claims.

    Usage:
        verifier = TokenVerifier(get_settings())
        claims = verifier.verify(token)   # raises TokenInvalidError / TokenExpiredError
    """

    def __init__(self, settings: Settings, clock: Clock = utcnow) -> None:
        self._secret = _require_secret(settings)
        self._clock = clock

    def verify(self, token: str) -> Claims:
        """Decode and verify a JWT. Returns Claims or raises.

        Depends only on the token, the fixed secret and the clock.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise TokenInvalidError("signature or structure check failed") from exc

        try:
            subject_id = int(payload["sub"])
            role = Role(payload["role"])
            iat = int(payload["iat"])
            exp = int(payload["exp"])
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenInvalidError("token payload is missing required claims") from exc

        # exp is whole seconds; the current time is not truncated.
        if self._clock().timestamp() > exp:
            raise TokenExpiredError("token has expired")

        return Claims(
            subject_id=subject_id,
            role=role,
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
