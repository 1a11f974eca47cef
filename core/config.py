"""
core/config.py -- Centralized service configuration via pydantic-settings.

All environment variable reads for the auth service happen here. No module
should call os.getenv() or os.environ.get() directly -- the bootstrap code
(api/main.py, main.py) calls get_settings() and injects the values it needs
into TokenService, UserStore and AuthService at construction time.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET). Type coercion and validation are built in.

  @model_validator(mode="after"): DEBUG-conditional JWT_SECRET policy. Dev
      mode generates a key with a warning, production mode refuses to start.

Not configurable here: token lifetime (auth.tokens.TOKEN_LIFETIME) and bcrypt
cost (auth.passwords.HASH_ROUNDS). Changing either is a code change.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger("authservice.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'auth' / 'authservice.db'}"


class Settings(BaseSettings):
    """Service settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. The model_validator enforces
    production-safety rules at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Process
    # ------------------------------------------------------------------

    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Token signing
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    jwt_secret: str = ""

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    # NATS_SERVERS=nats://a:4222,nats://b:4222 -- comma separated, not JSON.
    nats_servers: Annotated[list[str], NoDecode] = []

    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL
    db_timeout_seconds: float = 5.0

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("nats_servers", mode="before")
    @classmethod
    def split_servers(cls, value):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("PORT must be between 1 and 65535.")
        return value

    @model_validator(mode="after")
    def validate_jwt_secret(self) -> "Settings":
        """Enforce the JWT_SECRET policy.

        Dev mode (DEBUG=true): auto-generate a random secret with a warning.
            Tokens will not survive a restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            JWT_SECRET is missing.

        Both modes: reject secrets shorter than 32 characters. HS256 signing
            relies on key entropy.
        """
        if not self.jwt_secret:
            if self.debug:
                self.jwt_secret = secrets.token_hex(32)
                logger.warning("Using auto-generated JWT_SECRET. Tokens will not survive a restart.")
            else:
                raise ValueError(
                    "JWT_SECRET is required in production mode. "
                    "Set JWT_SECRET in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
