"""Operators that change system state during teardown.

This module exports the mount and signal operators.
"""

from chrootctl.operators.mount import MountTeardown
from chrootctl.operators.signal import SignalSender

__all__ = ["MountTeardown", "SignalSender"]
