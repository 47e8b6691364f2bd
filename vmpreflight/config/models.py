"""
Pydantic models for configuration validation.

Defines the schema of the pre-flight configuration file.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .defaults import DEFAULT_HOME_DIR, default_bundle_path
from ..preflight.models import NetworkMode


class Preset(str, Enum):
    """Workloads the virtual machine bundle can run."""
    OPENSHIFT = "openshift"
    MICROSHIFT = "microshift"
    OKD = "okd"


class PreflightConfig(BaseModel):
    """Pre-flight configuration."""

    network_mode: NetworkMode = Field(default=NetworkMode.SYSTEM, description="VM networking mode")
    preset: Preset = Field(default=Preset.OPENSHIFT, description="Bundle preset")
    bundle: Optional[str] = Field(None, description="Bundle path, defaults to the cached bundle of the preset")
    daemon_tasks: bool = Field(default=True, description="Check the background daemon task")
    admin_helper: bool = Field(default=True, description="Check the admin helper service")
    skip_checks: List[str] = Field(default_factory=list, description="Check keys to skip")
    warn_checks: List[str] = Field(default_factory=list, description="Check keys that only warn on failure")
    home_dir: Path = Field(default=DEFAULT_HOME_DIR, description="Home directory for cache and state")

    @field_validator("skip_checks", "warn_checks", mode="before")
    @classmethod
    def split_keys(cls, v):
        """Accept comma-separated strings and drop blanks and duplicates."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        keys = []
        for key in v:
            key = str(key).strip()
            if key and key not in keys:
                keys.append(key)
        return keys

    @field_validator("skip_checks", "warn_checks")
    @classmethod
    def validate_key_format(cls, v: List[str]) -> List[str]:
        """Check keys always start with 'check-'."""
        for key in v:
            if not key.startswith("check-"):
                raise ValueError(f"Invalid check key '{key}'. Keys start with 'check-'")
        return v

    @field_validator("home_dir", mode="before")
    @classmethod
    def expand_home(cls, v):
        return Path(v).expanduser()

    @property
    def bundle_path(self) -> Path:
        """Configured bundle, or the default one for the preset."""
        if self.bundle:
            return Path(self.bundle).expanduser()
        return default_bundle_path(self.preset.value, self.home_dir)
