"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads happen here. No module should call os.getenv()
or os.environ.get() directly -- use get_settings() or load_settings() instead.

Design patterns used:
  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. github_client_id -> GITHUB_CLIENT_ID).

  Explicit construction: load_settings(**overrides) builds a fresh Settings and
      converts validation failures into ConfigError. api.main.create_app()
      receives the result as a plain object, so tests build isolated apps
      without touching process environment.

  Singleton via lru_cache: get_settings() is the production entry point used
      by asgi.py and main.py. It caches the first successful load.

Security notes:
  [M6] SESSION_SECRET shorter than 32 chars is rejected outright. The session
       cookie is HMAC-signed with it; a short key weakens the signature.

  [M7] In production mode (DEBUG not set or false), a missing SESSION_SECRET is
       a hard startup failure. In dev mode a random key is generated, which
       logs everyone out on restart.

Layer rule: core/ is the kernel. This module may not import from api/, web/,
or auth/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("ghlogin.config")


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid.

    Fatal at startup: main.py logs it and exits non-zero; under plain uvicorn
    the import of asgi.py fails with this exception.
    """


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so the class can be imported anywhere, but the
    model_validator refuses to produce an instance without GitHub credentials
    and a usable session secret.
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
    session_secret: str = ""

    # ------------------------------------------------------------------
    # GitHub OAuth application
    # ------------------------------------------------------------------

    github_client_id: str = ""
    github_client_secret: str = ""
    # Must match the callback URL registered with the GitHub OAuth app.
    redirect_url: str = "http://localhost:8080/callback"
    oauth_scope: str = "user:email"
    # Applies to both outbound calls made during a callback.
    http_timeout: float = 10.0

    # ------------------------------------------------------------------
    # Session cookie
    # ------------------------------------------------------------------

    session_cookie: str = "session"
    session_max_age: int = 30 * 24 * 60 * 60
    secure_cookies: bool = False

    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    rate_limit_enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_credentials(self) -> "Settings":
        """Both halves of the GitHub OAuth credential pair are mandatory."""
        if not self.github_client_id or not self.github_client_secret:
            raise ValueError(
                "GitHub OAuth credentials not set. "
                "Please set GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET environment variables."
            )
        if self.http_timeout <= 0:
            raise ValueError("HTTP_TIMEOUT must be a positive number of seconds.")
        if self.session_max_age <= 0:
            raise ValueError("SESSION_MAX_AGE must be a positive number of seconds.")
        return self

    @model_validator(mode="after")
    def validate_session_secret(self) -> "Settings":
        """Enforce the SESSION_SECRET policy [M7].

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
        Production mode: refuse to start if SESSION_SECRET is missing.
        Both modes: reject keys shorter than 32 characters [M6].
        """
        if not self.session_secret:
            if self.debug:
                self.session_secret = secrets.token_hex(32)
                logger.warning("Using auto-generated SESSION_SECRET. Sessions will not persist across restarts.")
            else:
                raise ValueError(
                    "SESSION_SECRET is required in production mode. "
                    "Set SESSION_SECRET in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.session_secret) < 32:
            raise ValueError("SESSION_SECRET must be at least 32 characters.")
        return self


def load_settings(**overrides) -> Settings:
    """Build a Settings instance, raising ConfigError on any validation failure.

    Keyword overrides take precedence over environment variables. Tests pass
    _env_file=None to keep a developer's .env out of the picture.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        messages = "; ".join(err["msg"].removeprefix("Value error, ") for err in exc.errors())
        raise ConfigError(messages) from exc


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, loaded on first call.

    In tests: prefer load_settings() and pass the result to create_app().
    """
    return load_settings()
