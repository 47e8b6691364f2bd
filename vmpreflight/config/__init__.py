"""Configuration handling for the pre-flight checks."""

from .models import PreflightConfig, Preset
from .loader import ConfigError, ConfigLoader

__all__ = [
    "PreflightConfig",
    "Preset",
    "ConfigError",
    "ConfigLoader",
]
