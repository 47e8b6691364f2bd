"""
Bundle Checks

Validates that the virtual machine bundle is available and extracted.
"""

from pathlib import Path

from ...errors import CheckError
from ..models import CheckDescriptor
from ...platform.operations import HostOperations


def bundle_check(ops: HostOperations, bundle_path: Path, preset: str) -> CheckDescriptor:
    """
    Build the bundle check.

    Args:
        ops: Host operations
        bundle_path: Location of the bundle archive
        preset: Preset the bundle belongs to

    Returns:
        A fixable descriptor extracting the bundle when needed
    """
    bundle_path = Path(bundle_path)

    def check_bundle_extracted() -> None:
        if not ops.bundle_exists(bundle_path):
            raise CheckError(f"{bundle_path} not found, please provide the path to a valid {preset} bundle")
        if not ops.bundle_extracted(bundle_path):
            raise CheckError(f"{bundle_path.name} is not extracted")

    def fix_bundle_extracted() -> None:
        ops.extract_bundle(bundle_path)

    return CheckDescriptor.fixable(
        key="check-bundle-extracted",
        check_description=f"Checking if {preset} bundle is extracted in the cache",
        check=check_bundle_extracted,
        fix_description=f"Extracting bundle {bundle_path.name}",
        fix=fix_bundle_extracted,
    )
