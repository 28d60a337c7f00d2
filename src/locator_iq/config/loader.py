"""
Config Loader - Build Settings from a config file, .env, env vars and overrides.

Later sources win:

    defaults < environment (incl. .env) < config file < explicit overrides

A config file given explicitly must exist; the default locations are
searched only when none is given.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from locator_iq.config.settings import Settings
from locator_iq.exceptions import ConfigurationError

ENV_FILES = (Path(".env"), Path(".env.local"))


class ConfigLoader:
    """
    Resolves and reads the configuration sources for one Settings instance.

    Example:
        >>> loader = ConfigLoader("config/locator-iq.yaml")
        >>> settings = loader.load(overrides={"matcher": {"retry_timeout_ms": 0}})
    """

    DEFAULT_CONFIG_PATHS: List[Path] = [
        Path("locator-iq.yaml"),
        Path("locator-iq.yml"),
        Path("config/locator-iq.yaml"),
        Path.home() / ".config" / "locator-iq" / "config.yaml",
    ]

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        self.config_path = Path(config_path).expanduser() if config_path else None
        self._file_config: Dict[str, Any] = {}

    def find_config_file(self) -> Optional[Path]:
        """
        Locate the config file, or None when no default location has one.

        Raises:
            ConfigurationError: If an explicit config path does not exist
        """
        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigurationError(
                    f"Config file not found: {self.config_path}",
                    {"path": str(self.config_path)},
                )
            return self.config_path
        return next((p for p in self.DEFAULT_CONFIG_PATHS if p.exists()), None)

    def load_yaml_config(self, path: Path) -> Dict[str, Any]:
        """
        Read a YAML config file into a dict; an empty file gives {}.

        Raises:
            ConfigurationError: If the file is not valid YAML or not a mapping
        """
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", {"path": str(path)}) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping", {"path": str(path)})
        return data

    @staticmethod
    def _load_env(env_file: Optional[Union[str, Path]]) -> None:
        if env_file:
            load_dotenv(env_file)
            return
        first = next((p for p in ENV_FILES if p.exists()), None)
        if first is not None:
            load_dotenv(first)

    def load(
        self,
        env_file: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Settings:
        """
        Build Settings from every source.

        Args:
            env_file: .env file to read instead of ./.env or ./.env.local
            overrides: Nested values applied last, e.g. {"resolver": {...}}

        Raises:
            ConfigurationError: If a source is unreadable or a value is invalid
        """
        self._load_env(env_file)

        config_file = self.find_config_file()
        self._file_config = self.load_yaml_config(config_file) if config_file else {}

        try:
            # File values are init kwargs, so they take precedence over env vars
            settings = Settings(**self._file_config)
            return settings.merge_with(overrides) if overrides else settings
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", {"source": str(config_file)}) from e


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> Settings:
    """
    Load Settings in one call.

    Example:
        >>> settings = load_config()
        >>> settings = load_config(config_path="config/locator-iq.yaml")
        >>> settings = load_config(resolver={"default_pattern_code": "searchPage"})
    """
    return ConfigLoader(config_path).load(env_file=env_file, overrides=overrides or None)
