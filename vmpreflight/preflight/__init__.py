"""
Pre-flight Check Module

Validates, fixes and cleans up the host environment before a virtual
machine is created.
"""

from .models import (
    CheckDescriptor,
    CheckResult,
    CheckRole,
    CheckStatus,
    Labels,
    NetworkMode,
    OutcomeKind,
    Platform,
    RunMode,
    RunOutcome,
)
from ..errors import CheckError, PreflightError, RebootRequiredError, UnsupportedOperationError
from .filter import CheckFilter, cleanup_checks
from .registry import RegistryOptions, build_checks, get_all_checks, get_preflight_checks
from .checker import PreflightChecker, run_preflight

__all__ = [
    "CheckDescriptor",
    "CheckResult",
    "CheckRole",
    "CheckStatus",
    "Labels",
    "NetworkMode",
    "OutcomeKind",
    "Platform",
    "RunMode",
    "RunOutcome",
    "CheckError",
    "PreflightError",
    "RebootRequiredError",
    "UnsupportedOperationError",
    "CheckFilter",
    "cleanup_checks",
    "RegistryOptions",
    "build_checks",
    "get_all_checks",
    "get_preflight_checks",
    "PreflightChecker",
    "run_preflight",
]
