"""
Windows Host Operations

Hyper-V, group, registry and scheduled task operations implemented with
PowerShell.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from . import powershell
from .operations import HostOperations
from .powershell import CommandError
from ..config.defaults import (
    ALTERNATIVE_SWITCH,
    DAEMON_TASK_NAME,
    HYPERV_ADMINS_SID,
    VSOCK_REGISTRY_DIRECTORY,
    VSOCK_REGISTRY_KEY,
    VSOCK_REGISTRY_VALUE,
)

logger = logging.getLogger(__name__)


def username() -> str:
    """Current user name, qualified with the domain when domain joined."""
    user = os.environ.get("USERNAME", "")
    domain = os.environ.get("USERDOMAIN", "")
    computer = os.environ.get("COMPUTERNAME", "")
    if domain and domain.lower() != computer.lower():
        return f"{domain}\\{user}"
    return user


class WindowsOperations(HostOperations):
    """Host operations for Windows with Hyper-V."""

    platform_name = "windows"

    def __init__(self, home_dir: Path, executable: Optional[str] = None):
        """
        Initialize Windows operations.

        Args:
            home_dir: Tool home directory
            executable: Program the daemon task launches
        """
        super().__init__(home_dir)
        self.executable = executable or "vmpreflight.exe"

    # ============================================================
    # System information
    # ============================================================

    def is_admin(self) -> bool:
        return powershell.is_admin()

    def windows_release_id(self) -> int:
        command = (
            r'(Get-ItemProperty -Path "HKLM:\SOFTWARE\Microsoft\Windows NT\CurrentVersion" -Name ReleaseId).ReleaseId'
        )
        stdout = powershell.execute(command).stdout.strip()
        try:
            return int(stdout)
        except ValueError:
            raise CommandError(f"Failed to parse Windows release id: {stdout!r}")

    def windows_edition(self) -> str:
        command = r'(Get-ItemProperty -Path "HKLM:\SOFTWARE\Microsoft\Windows NT\CurrentVersion").EditionID'
        edition = powershell.execute(command).stdout.strip()
        logger.debug("Running on Windows %s edition", edition)
        return edition

    # ============================================================
    # Hyper-V
    # ============================================================

    def hypervisor_present(self) -> bool:
        result = powershell.execute("@(Get-Wmiobject Win32_ComputerSystem).HypervisorPresent")
        return "True" in result.stdout

    def enable_hyperv(self) -> None:
        powershell.execute_as_admin(
            "enabling Hyper-V",
            "Enable-WindowsOptionalFeature -Online -FeatureName Microsoft-Hyper-V -All -NoRestart",
        )

    def service_status(self, name: str) -> Optional[str]:
        try:
            result = powershell.execute(f"(Get-Service {name}).Status")
        except CommandError as e:
            logger.debug("Service %s not found: %s", name, e)
            return None
        return result.stdout.strip()

    def start_service(self, name: str) -> None:
        powershell.execute_as_admin(
            f"starting the {name} service",
            f"Set-Service -Name {name} -StartupType Automatic; Start-Service -Name {name}",
        )

    def find_virtual_switch(self, name: str) -> Optional[str]:
        command = "Get-VMSwitch | ForEach-Object { $_.Name }"
        names = [line.strip() for line in powershell.execute(command).stdout.splitlines() if line.strip()]
        if name in names:
            return name
        if "Default Switch" in names:
            return "Default Switch"
        return None

    def vm_exists(self, name: str) -> bool:
        try:
            powershell.execute(f'Get-VM -Name "{name}"')
        except CommandError:
            return False
        return True

    def remove_vm(self, name: str) -> None:
        powershell.execute(f'Stop-VM -Name "{name}" -TurnOff -Force')
        powershell.execute(f'Remove-VM -Name "{name}" -Force')
        logger.debug("'%s' VM is removed", name)

    # ============================================================
    # Groups
    # ============================================================

    def local_group_exists(self, group: str) -> bool:
        try:
            powershell.execute(f"Get-LocalGroup -Name '{group}'")
        except CommandError:
            return False
        return True

    def remove_local_group(self, group: str) -> None:
        powershell.execute_as_admin(f"removing the {group} group", f"Remove-LocalGroup -Name '{group}'")

    def user_in_local_group(self, group: str) -> bool:
        try:
            powershell.execute(f"Get-LocalGroupMember -Group '{group}' -Member '{username()}'")
        except CommandError:
            return False
        return True

    def user_in_hyperv_admins(self) -> bool:
        try:
            powershell.execute(f"Get-LocalGroupMember -SID '{HYPERV_ADMINS_SID}' -Member '{username()}'")
        except CommandError:
            return False
        return True

    def add_user_to_groups(self, group: str) -> None:
        user = username()
        command = (
            f"Add-LocalGroupMember -Group '{group}' -Member '{user}';"
            f"Add-LocalGroupMember -SID '{HYPERV_ADMINS_SID}' -Member '{user}'"
        )
        powershell.execute_as_admin(f"adding {user} to the {group} and Hyper-V Administrators groups", command)

    # ============================================================
    # Networking
    # ============================================================

    def vsock_registered(self) -> bool:
        command = f'Get-Item -Path "{VSOCK_REGISTRY_DIRECTORY}\\{VSOCK_REGISTRY_KEY}"'
        try:
            result = powershell.execute(command)
        except CommandError:
            return False
        return VSOCK_REGISTRY_VALUE in result.stdout

    def unregister_vsock(self) -> None:
        powershell.execute_as_admin(
            "removing the vsock registry key",
            f'Remove-Item -Path "{VSOCK_REGISTRY_DIRECTORY}\\{VSOCK_REGISTRY_KEY}"',
        )

    def reset_dns_servers(self) -> None:
        aliases = [f'"vEthernet ({ALTERNATIVE_SWITCH})"']
        try:
            switch = self.find_virtual_switch("Default Switch")
        except CommandError as e:
            # Hyper-V disabled or no Hyper-V Administrators membership
            logger.debug("Cannot list virtual switches: %s", e)
            switch = None
        if switch and switch != ALTERNATIVE_SWITCH:
            aliases.insert(0, f'"vEthernet ({switch})"')
        command = f"Set-DnsClientServerAddress -InterfaceAlias ({','.join(aliases)}) -ResetServerAddresses"
        powershell.execute_as_admin("resetting DNS servers of the virtual switch", command)

    # ============================================================
    # Daemon task
    # ============================================================

    def daemon_task_installed(self) -> bool:
        try:
            powershell.execute(f"Get-ScheduledTask -TaskName {DAEMON_TASK_NAME}")
        except CommandError:
            return False
        return True

    def install_daemon_task(self) -> None:
        command = (
            f"$action = New-ScheduledTaskAction -Execute '{self.executable}' -Argument 'daemon';"
            f"$trigger = New-ScheduledTaskTrigger -AtLogOn -User '{username()}';"
            f"Register-ScheduledTask -TaskName {DAEMON_TASK_NAME} -Action $action -Trigger $trigger | Out-Null"
        )
        powershell.execute(command)

    def remove_daemon_task(self) -> None:
        if not self.daemon_task_installed():
            return
        powershell.execute(f"Unregister-ScheduledTask -TaskName {DAEMON_TASK_NAME} -Confirm:$false")

    def daemon_task_running(self) -> bool:
        result = powershell.execute(f"(Get-ScheduledTask -TaskName {DAEMON_TASK_NAME}).State")
        return result.stdout.strip() == "Running"

    def start_daemon_task(self) -> None:
        powershell.execute(f"Start-ScheduledTask -TaskName {DAEMON_TASK_NAME}")
