"""
Networking Checks

Prerequisites that only apply to one networking mode.
"""

from typing import List

from ...errors import CheckError
from ..models import CheckDescriptor, Labels, NetworkMode, Platform
from ...platform.operations import HostOperations


def vsock_checks(ops: HostOperations) -> List[CheckDescriptor]:
    """
    Build the vsock checks for user-mode networking on Windows.

    The registry key is created by the installer, so a missing key cannot
    be fixed from here.
    """

    def check_vsock() -> None:
        if not ops.vsock_registered():
            raise CheckError("VSock registry key not correctly configured")

    def clean_vsock() -> None:
        if not ops.vsock_registered():
            return
        ops.unregister_vsock()

    return [
        CheckDescriptor.verify_only(
            key="check-vsock",
            check_description="Checking if vsock is correctly configured",
            check=check_vsock,
            fix_description="Please reinstall vmpreflight to register the vsock service",
            cleanup_description="Removing vsock service from hyperv registry",
            cleanup=clean_vsock,
            startup_only=True,
            labels=Labels(os=Platform.WINDOWS, network_mode=NetworkMode.USER),
        ),
    ]
