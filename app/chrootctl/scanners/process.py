"""/proc based process scanner.

Reads the root link, parent pid, command line, and environment of every
process under /proc. The process table is inherently racy, so per-process
read failures (exited mid-scan, permission denied) skip that process.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from chrootctl.core.errors import ProcessScanError
from chrootctl.models.process import ProcessRecord
from chrootctl.scanners.base import ProcessScanner

logger = logging.getLogger(__name__)

# Default sentinel marking infrastructure helpers
DEFAULT_CORE_MARKER = "CHROOTCTL=CORE"


class ProcScanner(ProcessScanner):
    """Process scanner backed by the /proc filesystem.

    Attributes:
        proc_root: Mount point of procfs (overridable for tests).
        core_marker: KEY=VALUE environment entry that marks a process
            as a core helper.
    """

    def __init__(
        self,
        proc_root: Path = Path("/proc"),
        core_marker: str = DEFAULT_CORE_MARKER,
    ) -> None:
        """Initialize the scanner.

        Args:
            proc_root: Mount point of procfs.
            core_marker: KEY=VALUE entry that marks core helpers.
        """
        self._proc_root = proc_root
        self._core_marker = core_marker.encode()

    @property
    def proc_root(self) -> Path:
        """Mount point of procfs."""
        return self._proc_root

    def is_available(self) -> bool:
        """Check if procfs is mounted and readable."""
        return self._proc_root.is_dir()

    def scan(self) -> Iterator[ProcessRecord]:
        """Scan all processes under procfs.

        Yields:
            ProcessRecord for each readable process.

        Raises:
            ProcessScanError: If procfs cannot be listed.
        """
        try:
            pid_dirs = list(self._pid_dirs())
        except OSError as e:
            msg = f"Cannot enumerate processes in {self._proc_root}: {e}"
            raise ProcessScanError(msg) from e

        for pid_dir in pid_dirs:
            record = self._read_process(pid_dir)
            if record is not None:
                yield record

    def _pid_dirs(self) -> Iterator[Path]:
        """Yield the numeric per-process directories."""
        for entry in self._proc_root.iterdir():
            if entry.name.isdigit():
                yield entry

    def _read_process(self, pid_dir: Path) -> ProcessRecord | None:
        """Read one process directory into a record.

        Args:
            pid_dir: /proc/<pid> directory.

        Returns:
            ProcessRecord, or None if the process vanished or is unreadable.
        """
        pid = int(pid_dir.name)
        try:
            root = os.readlink(pid_dir / "root")
            environ = (pid_dir / "environ").read_bytes()
        except OSError as e:
            logger.debug("Skipping pid %d: %s", pid, e)
            return None

        if not root:
            return None

        return ProcessRecord(
            pid=pid,
            ppid=self._read_ppid(pid_dir),
            root=root,
            cmdline=self._read_cmdline(pid_dir),
            core_marked=self._core_marker in environ.split(b"\0"),
        )

    @staticmethod
    def _read_ppid(pid_dir: Path) -> int | None:
        """Parse the parent pid from /proc/<pid>/stat.

        The command name field may itself contain spaces and parentheses,
        so fields are split after the last closing parenthesis.
        """
        try:
            stat = (pid_dir / "stat").read_text(errors="replace")
        except OSError:
            return None

        _, sep, rest = stat.rpartition(")")
        if not sep:
            return None
        fields = rest.split()
        # fields[0] is the state, fields[1] the ppid
        if len(fields) < 2 or not fields[1].isdigit():
            return None
        return int(fields[1])

    @staticmethod
    def _read_cmdline(pid_dir: Path) -> str:
        """Read the NUL-separated command line as a single string."""
        try:
            raw = (pid_dir / "cmdline").read_bytes()
        except OSError:
            return ""
        parts = [p.decode(errors="replace") for p in raw.split(b"\0") if p]
        return " ".join(parts)
