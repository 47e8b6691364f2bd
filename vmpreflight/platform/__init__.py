"""Host platform probes and operations."""
