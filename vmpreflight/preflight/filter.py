"""
Check Filtering

Narrows the registered checks to the ones that apply to this host and run.
"""

from dataclasses import dataclass
from typing import Iterable, List

from .models import CheckDescriptor, NetworkMode, Platform


@dataclass(frozen=True)
class CheckFilter:
    """
    Selects descriptors by their labels.

    A descriptor is kept when its OS label and network mode label are
    unset or equal to the current values. Startup-only descriptors are
    dropped on warm starts.
    """
    platform: Platform
    network_mode: NetworkMode
    cold_start: bool = True

    def apply(self, checks: Iterable[CheckDescriptor]) -> List[CheckDescriptor]:
        """
        Filter checks, keeping registration order.

        Args:
            checks: Registered descriptors

        Returns:
            Descriptors applicable to this run
        """
        return [check for check in checks if self.accepts(check)]

    def accepts(self, check: CheckDescriptor) -> bool:
        if not check.labels.matches(self.platform, self.network_mode):
            return False
        if check.startup_only and not self.cold_start:
            return False
        return True


def cleanup_checks(checks: Iterable[CheckDescriptor]) -> List[CheckDescriptor]:
    """Keep the descriptors that expose a cleanup function."""
    return [check for check in checks if check.cleanup is not None]
