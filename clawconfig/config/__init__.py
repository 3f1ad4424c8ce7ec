"""
clawconfig Configuration

Environment-driven settings and logging setup.
"""

from .settings import (
    DEFAULT_PROXY_URL,
    LOG_FORMAT,
    AppSettings,
    configure_logging,
    get_settings,
)

__all__ = [
    "DEFAULT_PROXY_URL",
    "LOG_FORMAT",
    "AppSettings",
    "configure_logging",
    "get_settings",
]
