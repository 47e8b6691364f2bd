"""
Pre-flight Checker

Runs filtered checks in registration order according to the invocation
mode and aggregates the outcome.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from ..errors import CheckError, PreflightError, RebootRequiredError
from .filter import cleanup_checks
from .models import (
    CheckDescriptor,
    CheckResult,
    CheckStatus,
    NetworkMode,
    OutcomeKind,
    Platform,
    RunMode,
    RunOutcome,
)
from .registry import RegistryOptions, get_preflight_checks
from ..platform.operations import HostOperations

logger = logging.getLogger(__name__)


class PreflightChecker:
    """
    Executes check descriptors.

    In check modes the first unresolved failure stops the run, unless the
    check key is listed in ``warn_keys``. A fix raising
    RebootRequiredError stops the run with a reboot-required outcome.
    In cleanup mode every cleanup is attempted and all failures are
    collected.
    """

    def __init__(
        self,
        skip_keys: Iterable[str] = (),
        warn_keys: Iterable[str] = (),
    ):
        """
        Initialize the checker.

        Args:
            skip_keys: Check keys that are not executed
            warn_keys: Check keys whose failure only produces a warning
        """
        self.skip_keys = frozenset(skip_keys)
        self.warn_keys = frozenset(warn_keys)

    def run(self, checks: Sequence[CheckDescriptor], mode: RunMode) -> RunOutcome:
        """
        Run checks in the given mode.

        Args:
            checks: Filtered descriptors, in dependency order
            mode: Invocation mode

        Returns:
            RunOutcome for the whole run
        """
        if mode == RunMode.CLEANUP:
            return self.cleanup(checks)
        return self._run_checks(checks, mode)

    def check_only(self, checks: Sequence[CheckDescriptor]) -> RunOutcome:
        return self._run_checks(checks, RunMode.CHECK_ONLY)

    def check_and_fix(self, checks: Sequence[CheckDescriptor]) -> RunOutcome:
        return self._run_checks(checks, RunMode.CHECK_AND_FIX)

    def cleanup(self, checks: Sequence[CheckDescriptor]) -> RunOutcome:
        """Run every cleanup, collecting failures instead of stopping."""
        results: List[CheckResult] = []

        for check in cleanup_checks(checks):
            logger.info(check.cleanup_description)
            try:
                check.cleanup()
            except PreflightError as e:
                logger.debug("Cleanup '%s' failed: %s", check.name, e)
                results.append(CheckResult(
                    key=check.key,
                    description=check.cleanup_description,
                    status=CheckStatus.FAILED,
                    message=str(e),
                ))
                continue

            results.append(CheckResult(
                key=check.key,
                description=check.cleanup_description,
                status=CheckStatus.CLEANED,
            ))

        return _build_outcome(RunMode.CLEANUP, results)

    def _run_checks(self, checks: Sequence[CheckDescriptor], mode: RunMode) -> RunOutcome:
        results: List[CheckResult] = []

        for check in checks:
            if check.check is None:
                continue

            if check.key in self.skip_keys:
                logger.warning("Skipping check: %s", check.check_description)
                results.append(CheckResult(
                    key=check.key,
                    description=check.check_description,
                    status=CheckStatus.SKIPPED,
                ))
                continue

            try:
                result = self._check_one(check, mode)
            except RebootRequiredError as e:
                logger.debug("Fix for '%s' requires a reboot", check.key)
                return RunOutcome(
                    kind=OutcomeKind.REBOOT_REQUIRED,
                    mode=mode,
                    results=tuple(results),
                    reboot_message=str(e),
                )

            if result.status == CheckStatus.FAILED and check.key in self.warn_keys:
                logger.warning("%s: %s", check.check_description, result.message)
                result = CheckResult(
                    key=result.key,
                    description=result.description,
                    status=CheckStatus.WARNED,
                    message=result.message,
                    guidance=result.guidance,
                )

            results.append(result)
            if result.status == CheckStatus.FAILED:
                break

        return _build_outcome(mode, results)

    def _check_one(self, check: CheckDescriptor, mode: RunMode) -> CheckResult:
        """Verify a descriptor, fixing it when the mode and role allow."""
        logger.info(check.check_description)
        error = _verify(check)
        if error is None:
            return _result(check, CheckStatus.PASSED)

        if mode != RunMode.CHECK_AND_FIX or not check.can_fix:
            return _result(check, CheckStatus.FAILED, error, check.fix_description)

        logger.info(check.fix_description)
        try:
            check.fix()
        except CheckError as e:
            logger.debug("Fix for '%s' failed: %s", check.key, e)
            return _result(check, CheckStatus.FAILED, str(e), check.fix_description)

        error = _verify(check)
        if error is not None:
            return _result(check, CheckStatus.FAILED, error, check.fix_description)

        return _result(check, CheckStatus.FIXED, guidance=check.fix_description)


def run_preflight(
    ops: HostOperations,
    options: RegistryOptions,
    mode: RunMode,
    platform: Platform,
    network_mode: NetworkMode,
    cold_start: bool = True,
    skip_keys: Iterable[str] = (),
    warn_keys: Iterable[str] = (),
) -> RunOutcome:
    """
    Assemble, filter and run the checks for one invocation.

    Cleanup runs never drop startup-only descriptors.
    """
    if mode == RunMode.CLEANUP:
        cold_start = True
    checks = get_preflight_checks(ops, options, platform, network_mode, cold_start)
    logger.debug("Running %d checks in %s mode", len(checks), mode.value)

    checker = PreflightChecker(skip_keys=skip_keys, warn_keys=warn_keys)
    return checker.run(checks, mode)


def _verify(check: CheckDescriptor) -> Optional[str]:
    try:
        check.check()
    except CheckError as e:
        logger.debug("Check '%s' failed: %s", check.key, e)
        return str(e) or check.check_description
    return None


def _result(
    check: CheckDescriptor,
    status: CheckStatus,
    message: str = "",
    guidance: str = "",
) -> CheckResult:
    return CheckResult(
        key=check.key,
        description=check.check_description,
        status=status,
        message=message,
        guidance=guidance,
    )


def _build_outcome(mode: RunMode, results: List[CheckResult]) -> RunOutcome:
    statuses = {r.status for r in results}
    if CheckStatus.FAILED in statuses:
        kind = OutcomeKind.FAILED
    elif CheckStatus.FIXED in statuses:
        kind = OutcomeKind.PASSED_WITH_FIXES
    else:
        kind = OutcomeKind.ALL_PASSED
    return RunOutcome(kind=kind, mode=mode, results=tuple(results))
