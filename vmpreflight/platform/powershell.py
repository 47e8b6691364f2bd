"""
PowerShell Runner

Executes PowerShell commands for the Windows host operations, either in the
current shell or elevated through a UAC prompt.
"""

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from typing import List, Optional

from ..errors import CheckError

logger = logging.getLogger(__name__)

POWERSHELL = "powershell.exe"
DEFAULT_TIMEOUT = 120

_BASE_ARGS = ["-NoProfile", "-NonInteractive", "-ExecutionPolicy", "Bypass"]


class CommandError(CheckError):
    """A PowerShell command failed or could not be started."""

    def __init__(self, message: str, stdout: str = "", stderr: str = "", return_code: int = -1):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
        self.return_code = return_code

    def __str__(self) -> str:
        text = super().__str__()
        if self.stderr.strip():
            text += f": {self.stderr.strip()}"
        return text


@dataclass
class CommandResult:
    """Output of a PowerShell command."""
    stdout: str
    stderr: str
    return_code: int

    @property
    def success(self) -> bool:
        return self.return_code == 0


def execute(command: str, timeout: Optional[int] = DEFAULT_TIMEOUT) -> CommandResult:
    """
    Run a PowerShell command in the current user context.

    Args:
        command: PowerShell script text
        timeout: Seconds before the command is abandoned

    Returns:
        CommandResult of a successful command

    Raises:
        CommandError: If PowerShell is unavailable, times out or exits non-zero
    """
    return _run([POWERSHELL, *_BASE_ARGS, "-Command", command], command, timeout)


def execute_as_admin(reason: str, command: str, timeout: Optional[int] = DEFAULT_TIMEOUT) -> CommandResult:
    """
    Run a PowerShell command with administrator rights.

    The command is written to a temporary script and launched through
    Start-Process -Verb RunAs, which shows a UAC prompt to the user.

    Args:
        reason: Short description of what the command does
        command: PowerShell script text
        timeout: Seconds before the command is abandoned
    """
    logger.debug("Will run as admin: %s", reason)

    fd, script_path = tempfile.mkstemp(prefix="vmpreflight-", suffix=".ps1")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(command)
            f.write("\n")

        args = ", ".join(f"'{arg}'" for arg in [*_BASE_ARGS, "-File", script_path])
        elevate = (
            f"$p = Start-Process {POWERSHELL} -ArgumentList {args} "
            f"-Verb RunAs -Wait -PassThru -WindowStyle Hidden; exit $p.ExitCode"
        )
        try:
            return _run([POWERSHELL, *_BASE_ARGS, "-Command", elevate], reason, timeout)
        except CommandError as e:
            raise CommandError(
                f"Failed while {reason}",
                stdout=e.stdout,
                stderr=e.stderr,
                return_code=e.return_code,
            ) from e
    finally:
        os.unlink(script_path)


def is_admin() -> bool:
    """Check if the current shell has administrator rights."""
    command = (
        "([Security.Principal.WindowsPrincipal]"
        "[Security.Principal.WindowsIdentity]::GetCurrent())"
        ".IsInRole([Security.Principal.WindowsBuiltInRole]::Administrator)"
    )
    try:
        result = execute(command)
    except CommandError as e:
        logger.debug("Cannot determine administrator rights: %s", e)
        return False
    return result.stdout.strip() == "True"


def _run(args: List[str], label: str, timeout: Optional[int]) -> CommandResult:
    logger.debug("Running PowerShell: %s", label)
    try:
        proc = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise CommandError(f"PowerShell is not available: {e}")
    except subprocess.TimeoutExpired:
        raise CommandError(f"PowerShell command timed out after {timeout}s: {label}")

    result = CommandResult(stdout=proc.stdout or "", stderr=proc.stderr or "", return_code=proc.returncode)
    if not result.success:
        raise CommandError(
            f"PowerShell command exited with code {result.return_code}",
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.return_code,
        )
    return result
