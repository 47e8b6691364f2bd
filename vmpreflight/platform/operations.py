"""
Host Operations

The probes and mutations the check functions rely on. Filesystem operations
work on every platform; hypervisor operations are only available on
platform-specific subclasses.
"""

import logging
import shutil
import tarfile
from pathlib import Path
from typing import Optional

from ..errors import CheckError, UnsupportedOperationError

logger = logging.getLogger(__name__)


class HostOperations:
    """
    Base host operations.

    Subclasses override the hypervisor methods for their platform. The
    defaults raise UnsupportedOperationError.
    """

    platform_name: str = "generic"

    def __init__(self, home_dir: Path):
        """
        Initialize host operations.

        Args:
            home_dir: Tool home directory holding cache and machine data
        """
        self.home_dir = Path(home_dir)

    @property
    def cache_dir(self) -> Path:
        return self.home_dir / "cache"

    @property
    def bin_dir(self) -> Path:
        return self.home_dir / "bin"

    @property
    def machine_dir(self) -> Path:
        return self.home_dir / "machines"

    # ============================================================
    # Bundle and filesystem
    # ============================================================

    def bundle_exists(self, bundle_path: Path) -> bool:
        return Path(bundle_path).is_file()

    def bundle_extract_dir(self, bundle_path: Path) -> Path:
        """Directory the bundle is extracted into."""
        name = Path(bundle_path).name
        for suffix in (".crcbundle", ".tar.gz", ".tar"):
            if name.endswith(suffix):
                name = name[: -len(suffix)]
                break
        return self.cache_dir / name

    def bundle_extracted(self, bundle_path: Path) -> bool:
        extract_dir = self.bundle_extract_dir(bundle_path)
        return extract_dir.is_dir() and any(extract_dir.iterdir())

    def extract_bundle(self, bundle_path: Path) -> None:
        """
        Extract a bundle archive into the cache directory.

        Raises:
            CheckError: If the bundle is missing or not a readable archive
        """
        bundle_path = Path(bundle_path)
        if not bundle_path.is_file():
            raise CheckError(f"Bundle {bundle_path} does not exist")

        extract_dir = self.bundle_extract_dir(bundle_path)
        extract_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("Extracting %s to %s", bundle_path, extract_dir)
        try:
            with tarfile.open(bundle_path) as archive:
                archive.extractall(extract_dir, filter="data")
        except (tarfile.TarError, OSError) as e:
            shutil.rmtree(extract_dir, ignore_errors=True)
            raise CheckError(f"Cannot extract bundle {bundle_path}: {e}")

    def remove_machine_directory(self) -> None:
        self._remove_tree(self.machine_dir)

    def remove_cached_binaries(self) -> None:
        self._remove_tree(self.bin_dir)

    def _remove_tree(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise CheckError(f"Failed to remove {path}: {e}")
        logger.debug("Removed %s", path)

    # ============================================================
    # Hypervisor and host configuration
    # ============================================================

    def _unsupported(self, operation: str) -> UnsupportedOperationError:
        return UnsupportedOperationError(f"{operation} is not supported on {self.platform_name}")

    def is_admin(self) -> bool:
        raise self._unsupported("administrator detection")

    def windows_release_id(self) -> int:
        raise self._unsupported("Windows release detection")

    def windows_edition(self) -> str:
        raise self._unsupported("Windows edition detection")

    def hypervisor_present(self) -> bool:
        raise self._unsupported("hypervisor detection")

    def enable_hyperv(self) -> None:
        raise self._unsupported("Hyper-V installation")

    def service_status(self, name: str) -> Optional[str]:
        """Status string of a service, or None when it is not installed."""
        raise self._unsupported("service queries")

    def start_service(self, name: str) -> None:
        raise self._unsupported("service management")

    def local_group_exists(self, group: str) -> bool:
        raise self._unsupported("local groups")

    def remove_local_group(self, group: str) -> None:
        raise self._unsupported("local groups")

    def user_in_local_group(self, group: str) -> bool:
        raise self._unsupported("group membership")

    def user_in_hyperv_admins(self) -> bool:
        raise self._unsupported("group membership")

    def add_user_to_groups(self, group: str) -> None:
        """Add the current user to ``group`` and to Hyper-V Administrators."""
        raise self._unsupported("group membership")

    def find_virtual_switch(self, name: str) -> Optional[str]:
        """Name of the switch to use, preferring ``name`` over the default switch."""
        raise self._unsupported("virtual switches")

    def vsock_registered(self) -> bool:
        raise self._unsupported("vsock registration")

    def unregister_vsock(self) -> None:
        raise self._unsupported("vsock registration")

    def reset_dns_servers(self) -> None:
        raise self._unsupported("DNS configuration")

    def vm_exists(self, name: str) -> bool:
        raise self._unsupported("virtual machine queries")

    def remove_vm(self, name: str) -> None:
        raise self._unsupported("virtual machine removal")

    def daemon_task_installed(self) -> bool:
        raise self._unsupported("daemon tasks")

    def install_daemon_task(self) -> None:
        raise self._unsupported("daemon tasks")

    def remove_daemon_task(self) -> None:
        raise self._unsupported("daemon tasks")

    def daemon_task_running(self) -> bool:
        raise self._unsupported("daemon tasks")

    def start_daemon_task(self) -> None:
        raise self._unsupported("daemon tasks")
