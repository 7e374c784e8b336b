"""Exceptions for conditions that abort a whole teardown run.

Per-environment failures are reported as TeardownOutcome values, not
exceptions. Only losing the process or mount table is fatal, since no
teardown decision can be trusted without them.
"""


class TeardownError(RuntimeError):
    """Base exception for fatal teardown errors."""


class ProcessScanError(TeardownError):
    """Raised when the process table cannot be enumerated at all."""


class MountTableError(TeardownError):
    """Raised when the live mount table cannot be read."""
