"""Scanners for the live process and mount tables.

This module exports the scanner classes polled on every teardown pass.
"""

from chrootctl.scanners.base import ProcessScanner
from chrootctl.scanners.mounts import MountTable
from chrootctl.scanners.process import ProcScanner

__all__ = ["MountTable", "ProcScanner", "ProcessScanner"]
