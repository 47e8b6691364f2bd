from pathlib import Path
from typing import List, Optional

import pytest

from vmpreflight.platform.operations import HostOperations
from vmpreflight.preflight import CheckDescriptor, CheckError, RebootRequiredError


class FakeOperations(HostOperations):
    """In-memory Windows host. Every attribute is a piece of host state."""

    platform_name = "fake"

    def __init__(self, home_dir: Path):
        super().__init__(home_dir)
        self.admin = False
        self.release_id = 2004
        self.edition = "Professional"
        self.hyperv = True
        self.services = {"vmms": "Running", "vmpreflightAdminHelper": "Running"}
        self.groups = {"vmpreflight-users"}
        self.user_groups = {"vmpreflight-users"}
        self.hyperv_admin = True
        self.switches = ["Default Switch"]
        self.vsock = True
        self.vms = set()
        self.task_installed = True
        self.task_running = True
        self.calls: List[str] = []

    def is_admin(self) -> bool:
        return self.admin

    def windows_release_id(self) -> int:
        return self.release_id

    def windows_edition(self) -> str:
        return self.edition

    def hypervisor_present(self) -> bool:
        return self.hyperv

    def enable_hyperv(self) -> None:
        self.calls.append("enable_hyperv")
        self.hyperv = True

    def service_status(self, name: str) -> Optional[str]:
        return self.services.get(name)

    def start_service(self, name: str) -> None:
        self.calls.append(f"start_service:{name}")
        self.services[name] = "Running"

    def local_group_exists(self, group: str) -> bool:
        return group in self.groups

    def remove_local_group(self, group: str) -> None:
        self.calls.append(f"remove_group:{group}")
        self.groups.discard(group)

    def user_in_local_group(self, group: str) -> bool:
        return group in self.user_groups

    def user_in_hyperv_admins(self) -> bool:
        return self.hyperv_admin

    def add_user_to_groups(self, group: str) -> None:
        self.calls.append(f"add_user:{group}")
        self.user_groups.add(group)
        self.hyperv_admin = True

    def find_virtual_switch(self, name: str) -> Optional[str]:
        if not self.hyperv_admin:
            raise CheckError("You do not have the required permission to complete this task")
        if name in self.switches:
            return name
        if "Default Switch" in self.switches:
            return "Default Switch"
        return None

    def vsock_registered(self) -> bool:
        return self.vsock

    def unregister_vsock(self) -> None:
        self.calls.append("unregister_vsock")
        self.vsock = False

    def reset_dns_servers(self) -> None:
        self.calls.append("reset_dns")

    def vm_exists(self, name: str) -> bool:
        return name in self.vms

    def remove_vm(self, name: str) -> None:
        self.calls.append(f"remove_vm:{name}")
        self.vms.discard(name)

    def daemon_task_installed(self) -> bool:
        return self.task_installed

    def install_daemon_task(self) -> None:
        self.calls.append("install_daemon_task")
        self.task_installed = True

    def remove_daemon_task(self) -> None:
        self.calls.append("remove_daemon_task")
        self.task_installed = False

    def daemon_task_running(self) -> bool:
        return self.task_running

    def start_daemon_task(self) -> None:
        self.calls.append("start_daemon_task")
        self.task_running = True


class Probe:
    """Records calls to scripted check/fix/cleanup functions."""

    def __init__(self):
        self.calls: List[str] = []

    def passing(self, name: str):
        def func():
            self.calls.append(name)
        return func

    def failing(self, name: str, message: str = "failed"):
        def func():
            self.calls.append(name)
            raise CheckError(f"{name} {message}")
        return func

    def rebooting(self, name: str):
        def func():
            self.calls.append(name)
            raise RebootRequiredError()
        return func

    def sequence(self, name: str, *outcomes: bool):
        """Fails or passes per call; the last outcome repeats."""
        remaining = list(outcomes)

        def func():
            self.calls.append(name)
            ok = remaining.pop(0) if len(remaining) > 1 else remaining[0]
            if not ok:
                raise CheckError(f"{name} failed")
        return func

    def verify(self, key: str, ok: bool = True, **kwargs) -> CheckDescriptor:
        check = self.passing(f"{key}.check") if ok else self.failing(f"{key}.check")
        return CheckDescriptor.verify_only(
            key=key,
            check_description=f"Checking {key}",
            check=check,
            fix_description=f"Fix {key} manually",
            **kwargs,
        )


@pytest.fixture
def fake_ops(tmp_path):
    return FakeOperations(tmp_path / "home")


@pytest.fixture
def probe():
    return Probe()
