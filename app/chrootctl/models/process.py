"""Process models for environment usage detection.

This module defines the snapshot record produced for every live process
when scanning the process table.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ProcessRecord:
    """Represents a single process seen during a process table scan.

    Records are ephemeral: they are re-read on every scan and never
    cached across teardown passes.

    Attributes:
        pid: Process ID.
        ppid: Parent process ID, or None if it could not be determined.
        root: Resolved path of the process's root directory.
        cmdline: Command line with arguments joined by spaces.
        core_marked: True if the process carries the core marker variable.
    """

    pid: int
    ppid: int | None
    root: str
    cmdline: str = field(default="")
    core_marked: bool = field(default=False)

    def __post_init__(self) -> None:
        """Validate process data after initialization."""
        if self.pid <= 0:
            msg = f"Process ID must be positive, got {self.pid}"
            raise ValueError(msg)
        if not self.root:
            msg = "Process root cannot be empty"
            raise ValueError(msg)

    @property
    def is_orphan(self) -> bool:
        """Check if the process has no live launcher (parent absent or init)."""
        return self.ppid is None or self.ppid <= 1

    @property
    def display_command(self) -> str:
        """Return the command line, or a placeholder for kernel threads."""
        return self.cmdline or f"[{self.pid}]"
