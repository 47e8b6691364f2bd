"""
Check Registry

Assembles the ordered list of check descriptors for a run.

Later checks assume earlier ones passed (listing virtual switches needs the
group membership added by an earlier fix, for example), so sub-lists are concatenated in
dependency order and never reordered afterwards.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from .checks import (
    admin_helper_checks,
    bundle_check,
    daemon_task_checks,
    generic_cleanup_checks,
    hyperv_service_checks,
    hypervisor_checks,
    user_group_checks,
    vsock_checks,
)
from .filter import CheckFilter
from .models import CheckDescriptor, NetworkMode, Platform
from ..config.defaults import default_bundle_path
from ..platform.operations import HostOperations


@dataclass(frozen=True)
class RegistryOptions:
    """Target configuration the registry is built for."""
    bundle_path: Path
    preset: str = "openshift"
    daemon_tasks: bool = True
    admin_helper: bool = True


def build_checks(ops: HostOperations, options: RegistryOptions) -> List[CheckDescriptor]:
    """
    Build a fresh list of every descriptor for the given options.

    Args:
        ops: Host operations the checks run against
        options: Bundle, preset and optional subsystem selection

    Returns:
        Descriptors in dependency order
    """
    checks: List[CheckDescriptor] = []
    checks.extend(hypervisor_checks(ops))
    checks.extend(user_group_checks(ops))
    checks.extend(hyperv_service_checks(ops))
    checks.extend(vsock_checks(ops))
    checks.append(bundle_check(ops, options.bundle_path, options.preset))
    checks.extend(generic_cleanup_checks(ops))
    if options.daemon_tasks:
        checks.extend(daemon_task_checks(ops))
    if options.admin_helper:
        checks.extend(admin_helper_checks(ops))
    return checks


def get_all_checks(ops: HostOperations) -> List[CheckDescriptor]:
    """
    Every descriptor of every option combination.

    Used to list the keys that can be skipped or downgraded to warnings.
    """
    options = RegistryOptions(
        bundle_path=default_bundle_path("openshift", ops.home_dir),
        daemon_tasks=True,
        admin_helper=True,
    )
    return build_checks(ops, options)


def get_preflight_checks(
    ops: HostOperations,
    options: RegistryOptions,
    platform: Platform,
    network_mode: NetworkMode,
    cold_start: bool = True,
) -> List[CheckDescriptor]:
    """Registered descriptors applicable to this host and run."""
    check_filter = CheckFilter(platform=platform, network_mode=network_mode, cold_start=cold_start)
    return check_filter.apply(build_checks(ops, options))
