# Broker settings, loaded once at process start.
# Created: 2026-10-19
#
# Values come from AUTHRELAY_* environment variables or a .env file in the
# working directory. The Settings object is frozen: components receive it
# by reference and never mutate it.

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Literal, get_args

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)

# Web origins of the plugin host, always allowed alongside site_url.
HOST_WEB_ORIGINS = [
    "https://www.figma.com",
    "https://figma.com",
]


class Settings(BaseSettings):
    """Immutable broker configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHRELAY_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    # Identity provider
    provider: str = Field(default="google", description="Key into relay.providers.PROVIDERS")
    client_id: str = Field(default="", description="OAuth client id")
    client_secret: str = Field(default="", description="OAuth client secret")
    redirect_uri: str = Field(
        default="http://localhost:3000/auth/callback",
        description="Callback URL registered with the provider",
    )
    scopes: str = Field(default="profile email openid", description="Space-separated scopes")

    # Server
    site_url: str = Field(default="http://localhost:3000", description="Public base URL")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000)
    log_level: LogLevel = Field(default="INFO")

    # Session relay
    session_ttl_seconds: int = Field(default=600, gt=0)
    sweep_interval_seconds: int = Field(default=60, gt=0)
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)
    state_cookie_required: bool = Field(default=True)
    state_cookie_max_age_seconds: int = Field(default=60, gt=0)

    # Plugin host
    host_uri_scheme: str = Field(default="figma", description="Custom URI scheme of the host")
    cors_allowed_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    plugin_id: str = Field(default="authrelay")
    poll_interval_ms: int = Field(default=2000, gt=0)

    # Diagnostics endpoint is disabled while unset
    debug_token: str | None = Field(default=None)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("site_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def load(cls) -> Settings:
        """Build settings from the environment and log the non-secret parts."""
        settings = cls()
        if not settings.client_id or not settings.client_secret:
            logger.warning("AUTHRELAY_CLIENT_ID / AUTHRELAY_CLIENT_SECRET are not set")
        logger.debug(
            "Settings loaded: provider=%s site_url=%s redirect_uri=%s",
            settings.provider,
            settings.site_url,
            settings.redirect_uri,
        )
        return settings

    def allowed_origins(self) -> list[str]:
        """Exact-match origins allowed to receive credentialed responses."""
        return sorted({self.site_url, *HOST_WEB_ORIGINS, *self.cors_allowed_origins})

    def origin_regex(self) -> str:
        """Regex matching any origin that uses the host's custom URI scheme."""
        return rf"^{re.escape(self.host_uri_scheme)}:.*$"

    def is_origin_allowed(self, origin: str) -> bool:
        if origin in self.allowed_origins():
            return True
        return re.fullmatch(self.origin_regex(), origin) is not None

    @property
    def session_ttl_ms(self) -> int:
        return self.session_ttl_seconds * 1000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings.load()
