"""Host pre-flight validation and remediation for virtual machines."""

__version__ = "1.0.0"
