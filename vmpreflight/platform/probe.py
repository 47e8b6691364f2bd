"""Detection of the host platform."""

import sys
from pathlib import Path
from typing import Optional

from .operations import HostOperations
from ..preflight.models import Platform


def current_platform(sys_platform: Optional[str] = None) -> Platform:
    """
    Map sys.platform to a Platform.

    Unknown Unix flavours are treated as Linux.
    """
    value = sys_platform or sys.platform
    if value.startswith("win") or value == "cygwin":
        return Platform.WINDOWS
    if value == "darwin":
        return Platform.DARWIN
    return Platform.LINUX


def get_operations(platform: Platform, home_dir: Path) -> HostOperations:
    """Get the host operations implementation for a platform."""
    if platform == Platform.WINDOWS:
        from .windows import WindowsOperations
        return WindowsOperations(home_dir)
    return HostOperations(home_dir)
