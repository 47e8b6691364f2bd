"""
Default configuration values.

Names and paths shared by the configuration, the checks and the host
operations.
"""

from pathlib import Path
from typing import Dict

DEFAULT_HOME_DIR = Path.home() / ".vmpreflight"
CONFIG_FILENAME = "config.yaml"
ENV_PREFIX = "VMPREFLIGHT"

VM_NAME = "vmpreflight"
USERS_GROUP = "vmpreflight-users"
ALTERNATIVE_SWITCH = "vmpreflight"
DAEMON_TASK_NAME = "vmpreflightDaemon"
ADMIN_HELPER_SERVICE = "vmpreflightAdminHelper"

# Fall Creators Update ships the "Default Switch"
MINIMUM_WINDOWS_RELEASE_ID = 1709

# BUILTIN\Hyper-V Administrators
HYPERV_ADMINS_SID = "S-1-5-32-578"

VSOCK_REGISTRY_DIRECTORY = (
    r"HKLM:\SOFTWARE\Microsoft\Windows NT\CurrentVersion\Virtualization\GuestCommunicationServices"
)
# The first part of the key is the vsock port
VSOCK_REGISTRY_KEY = "00000400-FACB-11E6-BD58-64006A7986D3"
VSOCK_REGISTRY_VALUE = "gvisor-tap-vsock"

BUNDLE_VERSION = "4.14.3"

BUNDLE_NAMES: Dict[str, str] = {
    "openshift": f"crc_hyperv_{BUNDLE_VERSION}_amd64.crcbundle",
    "microshift": f"crc_microshift_hyperv_{BUNDLE_VERSION}_amd64.crcbundle",
    "okd": f"crc_okd_hyperv_{BUNDLE_VERSION}_amd64.crcbundle",
}


def default_bundle_path(preset: str, home_dir: Path = DEFAULT_HOME_DIR) -> Path:
    """Get the cached bundle location for a preset."""
    return Path(home_dir) / "cache" / BUNDLE_NAMES[preset]
