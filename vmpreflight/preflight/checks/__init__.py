"""
Pre-flight Check Implementations

Descriptor builders for each subsystem.
"""

from .hyperv import hypervisor_checks, hyperv_service_checks, user_group_checks
from .network import vsock_checks
from .bundle import bundle_check
from .cleanup import generic_cleanup_checks
from .daemon import daemon_task_checks, admin_helper_checks

__all__ = [
    "hypervisor_checks",
    "user_group_checks",
    "hyperv_service_checks",
    "vsock_checks",
    "bundle_check",
    "generic_cleanup_checks",
    "daemon_task_checks",
    "admin_helper_checks",
]
