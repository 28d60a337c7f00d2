"""
Settings - Validated configuration models.

One nested model per concern (resolver, matcher, logging) under a root
Settings that also reads LOCATOR_IQ__* environment variables.

Example:
    >>> from locator_iq.config import Settings, load_config
    >>> settings = load_config()  # Loads from env, yaml, and defaults
    >>> print(settings.matcher.retry_timeout_ms)
    30000
"""

from typing import Dict, Literal, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _deep_merge(base: dict, updates: dict) -> dict:
    for key, value in updates.items():
        if isinstance(base.get(key), dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class ResolverSettings(BaseModel):
    """
    Pattern resolution settings.

    Attributes:
        default_pattern_code: Page object used when no override or URL mapping applies
        page_mapping: URL substring -> pattern code, checked in insertion order
        patterns_path: Pattern file or directory of pattern files (YAML)
        static_locators_path: YAML file of human-authored locators
        cache_path: JSON file persisting generated records between runs
        key_prefix: First segment of every cache key
        wrap_xpath_instance: Wrap XPath candidates as (xpath)[n] for explicit instances
    """
    default_pattern_code: Optional[str] = None
    page_mapping: Dict[str, str] = Field(default_factory=dict)
    patterns_path: Optional[str] = None
    static_locators_path: Optional[str] = None
    cache_path: Optional[str] = None
    key_prefix: str = Field(default="loc", min_length=1)
    wrap_xpath_instance: bool = True


class MatcherSettings(BaseModel):
    """
    Fallback matching settings.

    Attributes:
        retry_timeout_ms: Keep retrying full candidate passes for this long (0 = single pass)
        retry_interval_ms: Pause between candidate passes
        resolution_timeout_ms: Hard limit for one resolve-and-match cycle
    """
    retry_timeout_ms: int = Field(default=30000, ge=0, le=600000)
    retry_interval_ms: int = Field(default=2000, ge=0, le=60000)
    resolution_timeout_ms: int = Field(default=60000, ge=1000, le=900000)


class LoggingSettings(BaseModel):
    """
    Logging configuration.

    Attributes:
        level: Log level
        format: Log format string
        file: Log file path (None for console only)
        json_format: Use JSON format for logs
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


class Settings(BaseSettings):
    """
    Root of all Locator IQ settings.

    Constructor values win over LOCATOR_IQ__* environment variables, which
    win over defaults. Nested fields use "__" in variable names, e.g.
    LOCATOR_IQ__MATCHER__RETRY_TIMEOUT_MS=0.

    Example:
        >>> settings = Settings()  # Load from env vars
        >>> settings = Settings(matcher=MatcherSettings(retry_timeout_ms=0))  # Override
    """

    model_config = SettingsConfigDict(
        env_prefix="LOCATOR_IQ__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    matcher: MatcherSettings = Field(default_factory=MatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    debug: bool = False

    def merge_with(self, overrides: dict) -> "Settings":
        """Return a copy with overrides deep-merged into the current values."""
        return Settings(**_deep_merge(self.model_dump(), overrides))
