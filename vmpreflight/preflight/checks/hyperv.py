"""
Hyper-V Checks

Windows and Hyper-V prerequisites, and the user/group setup needed to manage
virtual machines without administrator rights.
"""

import logging
from typing import List

from ...errors import CheckError, RebootRequiredError
from ..models import CheckDescriptor, Labels, Platform
from ...config.defaults import (
    ALTERNATIVE_SWITCH,
    MINIMUM_WINDOWS_RELEASE_ID,
    USERS_GROUP,
    VM_NAME,
)
from ...platform.operations import HostOperations

logger = logging.getLogger(__name__)

WINDOWS = Labels(os=Platform.WINDOWS)
VMMS = "vmms"


def hypervisor_checks(ops: HostOperations) -> List[CheckDescriptor]:
    """
    Build the Windows release and Hyper-V installation checks.

    Args:
        ops: Host operations the checks run against

    Returns:
        Descriptors in dependency order
    """

    def check_running_as_normal_user() -> None:
        if ops.is_admin():
            logger.debug("Ran as administrator")
            raise CheckError("vmpreflight should be run in a shell without administrator rights")

    def check_windows_release() -> None:
        release_id = ops.windows_release_id()
        if release_id < MINIMUM_WINDOWS_RELEASE_ID:
            raise CheckError(
                f"Please update Windows. Currently {MINIMUM_WINDOWS_RELEASE_ID} is the minimum "
                f"release needed to run. You are running {release_id}"
            )

    def check_windows_edition() -> None:
        if ops.windows_edition().lower() == "core":
            raise CheckError("Windows Home edition is not supported")

    def check_hyperv_installed() -> None:
        if not ops.hypervisor_present():
            raise CheckError("Hyper-V not installed")
        if ops.service_status(VMMS) is None:
            raise CheckError("Hyper-V management service not available")

    def fix_hyperv_installed() -> None:
        ops.enable_hyperv()
        raise RebootRequiredError()

    return [
        CheckDescriptor.verify_only(
            key="check-administrator-user",
            check_description="Checking if running in a shell with administrator rights",
            check=check_running_as_normal_user,
            fix_description="vmpreflight should be run in a shell without administrator rights",
            startup_only=True,
            labels=WINDOWS,
        ),
        CheckDescriptor.verify_only(
            key="check-windows-version",
            check_description="Checking Windows release",
            check=check_windows_release,
            fix_description="Please manually update your Windows installation",
            startup_only=True,
            labels=WINDOWS,
        ),
        CheckDescriptor.verify_only(
            key="check-windows-edition",
            check_description="Checking Windows edition",
            check=check_windows_edition,
            fix_description=(
                "Your Windows edition is not supported. "
                "Consider using Professional or Enterprise editions of Windows"
            ),
            startup_only=True,
            labels=WINDOWS,
        ),
        CheckDescriptor.fixable(
            key="check-hyperv-installed",
            check_description="Checking if Hyper-V is installed and operational",
            check=check_hyperv_installed,
            fix_description="Installing Hyper-V",
            fix=fix_hyperv_installed,
            startup_only=True,
            labels=WINDOWS,
        ),
    ]


def user_group_checks(ops: HostOperations) -> List[CheckDescriptor]:
    """Build the group membership checks."""

    def check_group_exists() -> None:
        if not ops.local_group_exists(USERS_GROUP):
            raise CheckError(f"'{USERS_GROUP}' group does not exist")

    def remove_group() -> None:
        if not ops.local_group_exists(USERS_GROUP):
            return
        ops.remove_local_group(USERS_GROUP)

    def check_user_in_groups() -> None:
        if not ops.user_in_local_group(USERS_GROUP):
            raise CheckError(f"current user is not a member of '{USERS_GROUP}'")
        if not ops.user_in_hyperv_admins():
            raise CheckError("current user is not a member of 'Hyper-V Administrators'")

    def fix_user_in_groups() -> None:
        ops.add_user_to_groups(USERS_GROUP)
        raise RebootRequiredError()

    return [
        CheckDescriptor.verify_only(
            key="check-users-group-exists",
            check_description=f"Checking if {USERS_GROUP} group exists",
            check=check_group_exists,
            fix_description=f"Please reinstall vmpreflight to create the '{USERS_GROUP}' group",
            cleanup_description=f"Removing '{USERS_GROUP}' group",
            cleanup=remove_group,
            startup_only=True,
            labels=WINDOWS,
        ),
        CheckDescriptor.fixable(
            key="check-user-in-hyperv-group",
            check_description=f"Checking if current user is in {USERS_GROUP} and Hyper-V admins group",
            check=check_user_in_groups,
            fix_description=f"Adding current user to {USERS_GROUP} and Hyper-V admins group",
            fix=fix_user_in_groups,
            labels=WINDOWS,
        ),
    ]


def hyperv_service_checks(ops: HostOperations) -> List[CheckDescriptor]:
    """
    Build the Hyper-V service and virtual switch checks.

    Querying switches needs Hyper-V Administrators membership, so these
    are registered after the group checks.
    """

    def check_hyperv_service_running() -> None:
        if ops.service_status(VMMS) != "Running":
            raise CheckError("Hyper-V Virtual Machine Management service not running")

    def fix_hyperv_service_running() -> None:
        ops.start_service(VMMS)

    def check_virtual_switch() -> None:
        found = ops.find_virtual_switch(ALTERNATIVE_SWITCH)
        if found is None:
            raise CheckError("Virtual Switch not found")
        logger.info("Found Virtual Switch to use: %s", found)

    def remove_vm() -> None:
        if not ops.vm_exists(VM_NAME):
            return
        ops.remove_vm(VM_NAME)

    return [
        CheckDescriptor.fixable(
            key="check-hyperv-service-running",
            check_description="Checking if Hyper-V service is enabled",
            check=check_hyperv_service_running,
            fix_description="Enabling Hyper-V service",
            fix=fix_hyperv_service_running,
            startup_only=True,
            labels=WINDOWS,
        ),
        CheckDescriptor.verify_only(
            key="check-hyperv-switch",
            check_description="Checking if the Hyper-V virtual switch exists",
            check=check_virtual_switch,
            fix_description=(
                "Unable to perform Hyper-V administrative commands. "
                "Please reboot your system and run 'vmpreflight setup' to complete the setup process"
            ),
            startup_only=True,
            labels=WINDOWS,
        ),
        CheckDescriptor.cleanup_only(
            cleanup_description="Removing dns server from interface",
            cleanup=ops.reset_dns_servers,
            labels=WINDOWS,
        ),
        CheckDescriptor.cleanup_only(
            cleanup_description=f"Removing the {VM_NAME} VM if exists",
            cleanup=remove_vm,
            labels=WINDOWS,
        ),
    ]
