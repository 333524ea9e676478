"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Web Team Explorer happen here. No module
should call os.getenv() or os.environ.get() directly -- import get_settings().

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). Type coercion and validation are built in.

  @model_validator(mode="after"): DEBUG-conditional SECRET_KEY logic. Dev mode
      generates a key with a warning, production mode refuses to start without one.

Security notes:
  SECRET_KEY signs the session cookie that carries the visitor identity. A key
  shorter than 32 chars is rejected outright. In production mode a missing key
  is a hard startup failure: a random key would invalidate every stored
  identity on restart.

Layer rule: core/ is the kernel. This module may not import from api/, web/,
gate/, or cache/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("webteam.config")

APP_VERSION = "0.1.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
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
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Session cookie (client-side identity storage)
    # ------------------------------------------------------------------

    secure_cookies: bool = False
    session_cookie: str = "webteam_session"
    # One year. The identity is meant to survive reloads and restarts until
    # the visitor signs out.
    session_max_age: int = 60 * 60 * 24 * 365

    # ------------------------------------------------------------------
    # Upstream GraphQL endpoints (public, no credentials)
    # ------------------------------------------------------------------

    characters_graphql_url: str = "https://rickandmortyapi.com/graphql"
    launches_graphql_url: str = "https://spacex-production.up.railway.app/"
    request_timeout: float = 10.0
    launches_page_size: int = 10

    # ------------------------------------------------------------------
    # Response cache
    # ------------------------------------------------------------------

    cache_enabled: bool = True
    cache_ttl_seconds: int = 600

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Stored identities will not survive a restart -- acceptable locally.

        Production mode: refuse to start if SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning(
                    "WARNING: Using auto-generated SECRET_KEY. " "Stored identities will not persist across restarts."
                )
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        if self.launches_page_size < 1:
            raise ValueError("LAUNCHES_PAGE_SIZE must be at least 1.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
