"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for StaffLogin happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). List fields (ALLOWED_HOSTS, CORS_ORIGINS)
      are read as JSON arrays.

  @model_validator(mode="after"): dev mode generates a SECRET_KEY with a
      warning, production mode refuses to start without one.

Security notes:
  [M6] SECRET_KEY shorter than 32 chars is rejected outright.
  [M7] In production mode (DEBUG not set or false), a missing SECRET_KEY is a
       hard startup failure.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("stafflogin.config")


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
    # Empty string is the sentinel for "not configured".
    secret_key: str = ""
    database_url: str = "sqlite:///./stafflogin.db"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = 5 * 3600
    # Unlock dates in lockout responses are rendered in this zone.
    display_timezone: str = "America/Lima"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("display_timezone")
    @classmethod
    def validate_display_timezone(cls, value: str) -> str:
        """Refuse to start with a zone name the tz database does not know."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"DISPLAY_TIMEZONE {value!r} is not a valid IANA time zone.") from exc
        return value

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce SECRET_KEY policy [M7].

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters [M6].
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("WARNING: Using auto-generated SECRET_KEY. " "Tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
