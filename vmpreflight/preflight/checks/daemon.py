"""
Daemon and Helper Service Checks

Background daemon task and administrator helper service prerequisites.
"""

from typing import List

from ...errors import CheckError
from ..models import CheckDescriptor, Labels, Platform
from ...config.defaults import ADMIN_HELPER_SERVICE, DAEMON_TASK_NAME
from ...platform.operations import HostOperations

WINDOWS = Labels(os=Platform.WINDOWS)


def daemon_task_checks(ops: HostOperations) -> List[CheckDescriptor]:
    """Build the daemon task checks. Installation must precede the running check."""

    def check_installed() -> None:
        if not ops.daemon_task_installed():
            raise CheckError(f"{DAEMON_TASK_NAME} task is not installed")

    def check_running() -> None:
        if not ops.daemon_task_running():
            raise CheckError(f"{DAEMON_TASK_NAME} task is not running")

    return [
        CheckDescriptor.fixable(
            key="check-daemon-task-install",
            check_description="Checking if the daemon task is installed",
            check=check_installed,
            fix_description="Installing the daemon task",
            fix=ops.install_daemon_task,
            cleanup_description="Removing the daemon task",
            cleanup=ops.remove_daemon_task,
            labels=WINDOWS,
        ),
        CheckDescriptor.fixable(
            key="check-daemon-task-running",
            check_description="Checking if the daemon task is running",
            check=check_running,
            fix_description="Running the daemon task",
            fix=ops.start_daemon_task,
            labels=WINDOWS,
        ),
    ]


def admin_helper_checks(ops: HostOperations) -> List[CheckDescriptor]:

    def check_service_running() -> None:
        status = ops.service_status(ADMIN_HELPER_SERVICE)
        if status is None:
            raise CheckError(f"{ADMIN_HELPER_SERVICE} service is not present")
        if status != "Running":
            raise CheckError(f"{ADMIN_HELPER_SERVICE} service is not running")

    return [
        CheckDescriptor.verify_only(
            key="check-admin-helper-service-running",
            check_description="Checking if the admin helper service is running",
            check=check_service_running,
            fix_description=f"Make sure you installed vmpreflight using the installer and the {ADMIN_HELPER_SERVICE} service is running",
            labels=WINDOWS,
        ),
    ]
