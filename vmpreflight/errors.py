"""Errors raised by check, fix and cleanup functions."""


class PreflightError(Exception):
    """Base class for pre-flight errors."""
    pass


class CheckError(PreflightError):
    """A verify, fix or cleanup step failed."""
    pass


class UnsupportedOperationError(CheckError):
    """The host platform cannot perform the requested operation."""
    pass


class RebootRequiredError(PreflightError):
    """
    Raised by a fix whose effect needs a host restart.

    The executor stops the run and reports a reboot-required outcome
    instead of a failure.
    """

    def __init__(self, message: str = "Please reboot your system and run 'vmpreflight setup' to complete the setup process"):
        super().__init__(message)
