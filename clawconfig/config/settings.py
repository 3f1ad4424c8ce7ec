"""
Settings for clawconfig.

Settings come from the process environment. The variables shared with
the surrounding control plane (ENCRYPTION_KEY, NGROK_DOMAIN, API_URL)
keep their unprefixed names; everything owned by this package uses the
CLAWCONFIG_ prefix.

Security:
    Keys and tokens use SecretStr so they never show up in reprs or logs.
    Access the value with `.get_secret_value()`.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from pydantic import BaseModel, Field, SecretStr

DEFAULT_PROXY_URL = "http://localhost:3001"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppSettings(BaseModel):
    """
    Application settings model.

    Security:
        API keys and tokens use SecretStr to prevent accidental logging.
    """

    # Service identity
    service_name: str = "clawconfig"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Token decryption (64 hex chars = 32 bytes)
    encryption_key: SecretStr = Field(default=SecretStr(""), description="AES-256-GCM key")

    # Proxy URL resolution
    ngrok_domain: str | None = Field(default=None, description="Tunnel domain, wins over api_url")
    api_url: str | None = Field(default=None, description="Public control-plane API URL")

    # Generated config metadata
    generator_tag: str = "fasterclaw"

    # Loaders
    instances_dir: str | None = Field(default=None, description="Directory of snapshot JSON files")
    api_base_url: str | None = Field(default=None, description="Internal API for snapshot loading")
    api_token: SecretStr | None = None

    # Static instruction markdown, one <provider>.md per file
    instructions_dir: str | None = None

    class Config:
        populate_by_name = True

    @property
    def proxy_base_url(self) -> str:
        """Base URL agents use to reach the secure proxy."""
        if self.ngrok_domain:
            return f"https://{self.ngrok_domain}"
        return self.api_url or DEFAULT_PROXY_URL


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern; call
    `get_settings.cache_clear()` to re-read the environment.
    """
    api_token = os.getenv("CLAWCONFIG_API_TOKEN")
    return AppSettings(
        # Service
        environment=os.getenv("CLAWCONFIG_ENVIRONMENT", "development"),
        debug=_env_flag("CLAWCONFIG_DEBUG"),
        log_level=os.getenv("CLAWCONFIG_LOG_LEVEL", "INFO"),
        # Encryption
        encryption_key=os.getenv("ENCRYPTION_KEY", ""),
        # Proxy
        ngrok_domain=os.getenv("NGROK_DOMAIN") or None,
        api_url=os.getenv("API_URL") or None,
        # Metadata
        generator_tag=os.getenv("CLAWCONFIG_GENERATOR_TAG", "fasterclaw"),
        # Loaders
        instances_dir=os.getenv("CLAWCONFIG_INSTANCES_DIR") or None,
        api_base_url=os.getenv("CLAWCONFIG_API_BASE_URL") or None,
        api_token=api_token or None,
        instructions_dir=os.getenv("CLAWCONFIG_INSTRUCTIONS_DIR") or None,
    )


def configure_logging(level: str | int | None = None) -> None:
    """Install the root logging format used by clawconfig entry points."""
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)
