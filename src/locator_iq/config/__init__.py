"""
Configuration module - Settings for resolution, matching and logging.

Usage:
    from locator_iq.config import get_settings, load_config

    # Process-wide settings, loaded on first use
    settings = get_settings()

    # Fresh settings with overrides, e.g. in tests
    settings = load_config(matcher={"retry_timeout_ms": 0})

Environment Variables:
    LOCATOR_IQ__RESOLVER__DEFAULT_PATTERN_CODE=searchPage
    LOCATOR_IQ__RESOLVER__PATTERNS_PATH=resources/patterns
    LOCATOR_IQ__MATCHER__RETRY_TIMEOUT_MS=10000
"""

from locator_iq.config.settings import (
    Settings,
    ResolverSettings,
    MatcherSettings,
    LoggingSettings,
)
from locator_iq.config.loader import ConfigLoader, load_config

_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide Settings, loading them on first call."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Drop the cached Settings so the next get_settings() reloads them."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "ResolverSettings",
    "MatcherSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
