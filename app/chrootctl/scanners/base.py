"""Abstract base class for process scanners.

This module defines the ProcessScanner interface. The /proc implementation
lives in chrootctl.scanners.process; other platforms can expose the same
ProcessRecord shape through their native process listing.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from chrootctl.models.process import ProcessRecord


class ProcessScanner(ABC):
    """Abstract base class for process table scanners.

    Each call to scan() is a fresh snapshot; nothing is cached between
    calls since the process table changes between teardown passes.

    Example:
        >>> scanner = ProcScanner()
        >>> for proc in scanner.scan():
        ...     print(f"{proc.pid}: {proc.root}")
    """

    @abstractmethod
    def scan(self) -> Iterator[ProcessRecord]:
        """Yield a record for every process visible to the caller.

        Processes that exit mid-scan or cannot be inspected are skipped.

        Yields:
            ProcessRecord instances.

        Raises:
            ProcessScanError: If the process table cannot be enumerated.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this scanner can enumerate processes on the system.

        Returns:
            True if the scanner can be used, False otherwise.
        """
