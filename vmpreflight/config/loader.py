"""
Configuration loader for YAML files.

Handles loading the configuration file, environment variable overrides and
command line overrides.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from .defaults import CONFIG_FILENAME, DEFAULT_HOME_DIR, ENV_PREFIX
from .models import PreflightConfig


class ConfigError(Exception):
    """Configuration loading or validation error."""
    pass


# Environment variable suffix -> configuration field
ENV_FIELDS = {
    "NETWORK_MODE": "network_mode",
    "PRESET": "preset",
    "BUNDLE": "bundle",
    "SKIP_CHECKS": "skip_checks",
    "WARN_CHECKS": "warn_checks",
    "HOME": "home_dir",
}

# Overrides for these extend the file and environment values
LIST_FIELDS = ("skip_checks", "warn_checks")


class ConfigLoader:
    """
    Loads and validates the pre-flight configuration.

    Values are merged in order: configuration file, environment variables
    (``VMPREFLIGHT_*``), then explicit overrides.
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML config file. Defaults to
                ~/.vmpreflight/config.yaml, which may be absent.
            environ: Environment mapping, defaults to os.environ
        """
        self.config_path = Path(config_path) if config_path else None
        self.environ = os.environ if environ is None else environ
        self._config: Optional[PreflightConfig] = None

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> "ConfigLoader":
        """
        Load the configuration.

        Args:
            overrides: Values taking precedence over file and environment.
                None values are ignored and check key lists are appended.

        Returns:
            Self for method chaining

        Raises:
            ConfigError: If the file is unreadable or values are invalid
        """
        data: Dict[str, Any] = {}

        path = self._resolve_path()
        if path is not None:
            data.update(self._read_yaml(path))

        data.update(self._read_environment())

        for key, value in (overrides or {}).items():
            if value is None:
                continue
            if key in LIST_FIELDS:
                value = [*_as_list(data.get(key)), *value]
            data[key] = value

        try:
            self._config = PreflightConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}")

        return self

    def _resolve_path(self) -> Optional[Path]:
        if self.config_path is not None:
            if not self.config_path.is_file():
                raise ConfigError(f"Configuration file does not exist: {self.config_path}")
            return self.config_path

        home = self.environ.get(f"{ENV_PREFIX}_HOME")
        default = (Path(home).expanduser() if home else DEFAULT_HOME_DIR) / CONFIG_FILENAME
        return default if default.is_file() else None

    def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse a YAML file."""
        try:
            with open(file_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {file_path}: {e}")
        except IOError as e:
            raise ConfigError(f"Cannot read {file_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {file_path}, got {type(data).__name__}")
        return data

    def _read_environment(self) -> Dict[str, Any]:
        values = {}
        for suffix, field in ENV_FIELDS.items():
            value = self.environ.get(f"{ENV_PREFIX}_{suffix}")
            if value:
                values[field] = value
        return values

    @property
    def config(self) -> PreflightConfig:
        """Get loaded configuration."""
        if self._config is None:
            raise ConfigError("Configuration not loaded")
        return self._config

    def save(self, output_path: Union[str, Path]) -> None:
        """
        Save the current configuration as YAML.

        Args:
            output_path: File to write
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            yaml.dump(
                self.config.model_dump(mode="json", exclude_none=True),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigLoader":
        """
        Create a ConfigLoader from a dictionary.

        Useful for programmatic configuration.
        """
        loader = cls(environ={})
        try:
            loader._config = PreflightConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}")
        return loader


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split(",")
    return list(value)
