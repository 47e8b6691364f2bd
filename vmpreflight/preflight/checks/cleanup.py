"""Cleanup-only entries shared by every platform."""

from typing import List

from ..models import CheckDescriptor
from ...platform.operations import HostOperations


def generic_cleanup_checks(ops: HostOperations) -> List[CheckDescriptor]:
    return [
        CheckDescriptor.cleanup_only(
            cleanup_description="Removing the virtual machine instance directory",
            cleanup=ops.remove_machine_directory,
        ),
        CheckDescriptor.cleanup_only(
            cleanup_description="Removing cached binaries",
            cleanup=ops.remove_cached_binaries,
        ),
    ]
