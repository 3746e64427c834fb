"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for NGO Manager happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. The
      application lifespan reads it exactly once and passes the object
      explicitly into TokenIssuer / TokenVerifier and the stores.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). Type coercion and validation are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Dev mode generates a signing key with a
      warning; a configured key that is too short is rejected outright.

Security notes:
  - SECRET_KEY shorter than 32 chars is rejected.
  - In production mode (DEBUG not set or false), a missing SECRET_KEY is
    left empty here and rejected by auth.tokens with ConfigurationError when
    the lifespan builds the token services. The process never starts
    serving traffic without a signing key.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or ngo/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("ngomanager.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'ngomanager.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `secret_key` reads from SECRET_KEY, `debug` reads from DEBUG.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured".
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # 24 hours. Fixed window from issuance, no refresh.
    token_expire_seconds: int = 86400

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    # Allows unauthenticated sign-up for donor / volunteer / beneficiary.
    # Elevated roles always require an admin.
    self_registration_enabled: bool = True

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode: an unset key stays empty. The token services refuse
            to start with it (ConfigurationError), which aborts app startup.

        Both modes: reject configured keys shorter than 32 characters.
        """
        if self.token_expire_seconds < 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must not be negative.")
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Tokens will not persist across restarts.")
            return self
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    In tests: construct Settings(...) directly, or call
    get_settings.cache_clear() after changing environment variables.
    """
    return Settings()
