"""
Pre-flight Check Models

Shared data types for host validation: check descriptors, their filtering
labels, and the outcome of a run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple


CheckFunc = Callable[[], None]


class Platform(str, Enum):
    """Host operating systems a check can be bound to."""
    WINDOWS = "windows"
    LINUX = "linux"
    DARWIN = "darwin"


class NetworkMode(str, Enum):
    """Networking modes of the virtual machine."""
    SYSTEM = "system"
    USER = "user"


class RunMode(str, Enum):
    """Invocation modes of the executor."""
    CHECK_ONLY = "check-only"
    CHECK_AND_FIX = "check-and-fix"
    CLEANUP = "cleanup"


class CheckRole(str, Enum):
    """What a descriptor is allowed to do."""
    VERIFY_ONLY = "verify_only"
    VERIFY_AND_FIX = "verify_and_fix"
    CLEANUP_ONLY = "cleanup_only"


class CheckStatus(str, Enum):
    """Status of a single executed descriptor."""
    PASSED = "passed"
    FIXED = "fixed"
    FAILED = "failed"
    WARNED = "warned"
    SKIPPED = "skipped"
    CLEANED = "cleaned"


class OutcomeKind(str, Enum):
    """Overall result of a run."""
    ALL_PASSED = "all_passed"
    PASSED_WITH_FIXES = "passed_with_fixes"
    FAILED = "failed"
    REBOOT_REQUIRED = "reboot_required"


@dataclass(frozen=True)
class Labels:
    """Filtering labels. None matches any value."""
    os: Optional[Platform] = None
    network_mode: Optional[NetworkMode] = None

    def matches(self, platform: Platform, network_mode: NetworkMode) -> bool:
        if self.os is not None and self.os != platform:
            return False
        if self.network_mode is not None and self.network_mode != network_mode:
            return False
        return True

    def __str__(self) -> str:
        os_label = self.os.value if self.os else "*"
        mode_label = self.network_mode.value if self.network_mode else "*"
        return f"{os_label}/{mode_label}"


@dataclass(frozen=True)
class CheckDescriptor:
    """
    A single host validation rule.

    The role decides which callables may be set:

    - VERIFY_ONLY: ``check`` and optionally ``cleanup``; ``fix_description``
      holds the manual remediation shown to the user.
    - VERIFY_AND_FIX: ``check`` and ``fix``, optionally ``cleanup``.
    - CLEANUP_ONLY: ``cleanup`` only.

    Invalid combinations raise ValueError on construction.
    """
    key: str
    role: CheckRole
    check_description: str = ""
    fix_description: str = ""
    cleanup_description: str = ""
    check: Optional[CheckFunc] = None
    fix: Optional[CheckFunc] = None
    cleanup: Optional[CheckFunc] = None
    startup_only: bool = False
    labels: Labels = Labels()

    def __post_init__(self):
        if self.role == CheckRole.CLEANUP_ONLY:
            if self.cleanup is None or self.check is not None or self.fix is not None:
                raise ValueError(f"cleanup-only check '{self.name}' must only define cleanup")
            if self.startup_only:
                raise ValueError(f"cleanup-only check '{self.name}' cannot be startup-only")
            return

        if not self.key:
            raise ValueError("verifying checks require a key")
        if self.check is None:
            raise ValueError(f"check '{self.key}' has no verify function")
        if self.role == CheckRole.VERIFY_ONLY and self.fix is not None:
            raise ValueError(f"check '{self.key}' is verify-only but defines a fix")
        if self.role == CheckRole.VERIFY_AND_FIX and self.fix is None:
            raise ValueError(f"check '{self.key}' is fixable but defines no fix")

    @classmethod
    def verify_only(
        cls,
        key: str,
        check_description: str,
        check: CheckFunc,
        fix_description: str = "",
        cleanup_description: str = "",
        cleanup: Optional[CheckFunc] = None,
        startup_only: bool = False,
        labels: Labels = Labels(),
    ) -> "CheckDescriptor":
        return cls(
            key=key,
            role=CheckRole.VERIFY_ONLY,
            check_description=check_description,
            check=check,
            fix_description=fix_description,
            cleanup_description=cleanup_description,
            cleanup=cleanup,
            startup_only=startup_only,
            labels=labels,
        )

    @classmethod
    def fixable(
        cls,
        key: str,
        check_description: str,
        check: CheckFunc,
        fix_description: str,
        fix: CheckFunc,
        cleanup_description: str = "",
        cleanup: Optional[CheckFunc] = None,
        startup_only: bool = False,
        labels: Labels = Labels(),
    ) -> "CheckDescriptor":
        return cls(
            key=key,
            role=CheckRole.VERIFY_AND_FIX,
            check_description=check_description,
            check=check,
            fix_description=fix_description,
            fix=fix,
            cleanup_description=cleanup_description,
            cleanup=cleanup,
            startup_only=startup_only,
            labels=labels,
        )

    @classmethod
    def cleanup_only(
        cls,
        cleanup_description: str,
        cleanup: CheckFunc,
        labels: Labels = Labels(),
    ) -> "CheckDescriptor":
        return cls(
            key="",
            role=CheckRole.CLEANUP_ONLY,
            cleanup_description=cleanup_description,
            cleanup=cleanup,
            labels=labels,
        )

    @property
    def name(self) -> str:
        """Key, or the cleanup description for cleanup-only entries."""
        return self.key or self.cleanup_description

    @property
    def can_fix(self) -> bool:
        return self.role == CheckRole.VERIFY_AND_FIX


@dataclass(frozen=True)
class CheckResult:
    """Result of executing one descriptor."""
    key: str
    description: str
    status: CheckStatus
    message: str = ""
    guidance: str = ""

    def __str__(self) -> str:
        text = f"[{self.status.value.upper()}] {self.description}"
        if self.message:
            text += f": {self.message}"
        return text


@dataclass(frozen=True)
class RunOutcome:
    """Complete result of a run, in execution order."""
    kind: OutcomeKind
    mode: RunMode
    results: Tuple[CheckResult, ...] = ()
    reboot_message: str = ""

    @property
    def passed(self) -> bool:
        return self.kind in (OutcomeKind.ALL_PASSED, OutcomeKind.PASSED_WITH_FIXES)

    @property
    def failures(self) -> Tuple[CheckResult, ...]:
        return self._with_status(CheckStatus.FAILED)

    @property
    def applied_fixes(self) -> Tuple[str, ...]:
        """Descriptions of the fixes that were applied."""
        return tuple(r.guidance or r.description for r in self._with_status(CheckStatus.FIXED))

    @property
    def warnings(self) -> Tuple[CheckResult, ...]:
        return self._with_status(CheckStatus.WARNED)

    @property
    def skipped(self) -> Tuple[CheckResult, ...]:
        return self._with_status(CheckStatus.SKIPPED)

    def _with_status(self, status: CheckStatus) -> Tuple[CheckResult, ...]:
        return tuple(r for r in self.results if r.status == status)

    def summary(self) -> str:
        """Get summary string."""
        total = len(self.results)
        if self.kind == OutcomeKind.REBOOT_REQUIRED:
            return f"REBOOT REQUIRED after {total} checks"

        done = len([r for r in self.results if r.status != CheckStatus.FAILED])
        if self.kind == OutcomeKind.FAILED:
            status = "FAILED"
        elif self.kind == OutcomeKind.PASSED_WITH_FIXES:
            status = f"PASSED with {len(self.applied_fixes)} fixes"
        else:
            status = "PASSED"

        return (
            f"{status}: {done}/{total} {self.mode.value} steps succeeded "
            f"({len(self.failures)} failed, {len(self.warnings)} warnings, "
            f"{len(self.skipped)} skipped)"
        )
