"""Data models for chrootctl.

This module exports the core data structures used throughout the application.
"""

from chrootctl.models.environment import Environment
from chrootctl.models.mount import MountEntry
from chrootctl.models.process import ProcessRecord
from chrootctl.models.teardown import (
    Decision,
    DecisionContext,
    RetryState,
    SignalStrength,
    TeardownOutcome,
    TeardownResult,
    TeardownSummary,
)

__all__ = [
    "Decision",
    "DecisionContext",
    "Environment",
    "MountEntry",
    "ProcessRecord",
    "RetryState",
    "SignalStrength",
    "TeardownOutcome",
    "TeardownResult",
    "TeardownSummary",
]
