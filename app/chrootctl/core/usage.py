"""Environment usage detection.

Decides whether an environment is still in use by processes running
inside it, as opposed to host processes or stragglers that merely share
its path.
"""

import logging
import os
from dataclasses import dataclass

from chrootctl.models.process import ProcessRecord
from chrootctl.scanners.base import ProcessScanner
from chrootctl.utils.paths import is_within, normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UsageReport:
    """Result of a usage check.

    Attributes:
        in_use: True if at least one blocker was found.
        blockers: Processes that keep the environment in use.
    """

    in_use: bool
    blockers: tuple[ProcessRecord, ...] = ()

    @property
    def pids(self) -> set[int]:
        """Pids of all blockers."""
        return {p.pid for p in self.blockers}


class UsageDetector:
    """Detects processes that keep an environment in use.

    A contained process (root equal to or beneath the environment path)
    is a blocker unless one of these holds:

    - its parent is gone or is init (it was reparented, not launched by a
      live session inside the environment);
    - its parent has a different root than its own (a background process
      that outlived its launcher with another effective root);
    - it carries the core marker (an internal helper of the environment).

    Every call takes a fresh process snapshot.
    """

    def __init__(self, scanner: ProcessScanner, own_pid: int | None = None) -> None:
        """Initialize the detector.

        Args:
            scanner: Process scanner polled on every check.
            own_pid: Pid never reported (defaults to the current process).
        """
        self._scanner = scanner
        self._own_pid = own_pid if own_pid is not None else os.getpid()

    def is_in_use(self, canonical_path: str, force: bool = False) -> UsageReport:
        """Check whether an environment is in use.

        Args:
            canonical_path: Symlink-resolved environment root.
            force: If True, report not-in-use unconditionally.

        Returns:
            UsageReport with the blocking processes.

        Raises:
            ProcessScanError: If the process table cannot be enumerated.
        """
        if force:
            return UsageReport(in_use=False)

        root = normalize(canonical_path)
        snapshot = [p for p in self._scanner.scan() if p.pid != self._own_pid]
        roots = {p.pid: normalize(p.root) for p in snapshot}

        blockers: list[ProcessRecord] = []
        for proc in snapshot:
            if not is_within(proc.root, root):
                continue
            if proc.is_orphan or proc.ppid not in roots:
                logger.debug("Ignoring orphaned pid %d in %s", proc.pid, root)
                continue
            if roots[proc.ppid] != normalize(proc.root):
                logger.debug(
                    "Ignoring pid %d: parent %d has root %s", proc.pid, proc.ppid, roots[proc.ppid]
                )
                continue
            if proc.core_marked:
                logger.debug("Ignoring core helper pid %d (%s)", proc.pid, proc.display_command)
                continue
            blockers.append(proc)

        return UsageReport(in_use=bool(blockers), blockers=tuple(blockers))

    def list_processes(self, canonical_path: str) -> list[ProcessRecord]:
        """List every process inside an environment, without exclusions.

        Used to print blockers and to pick signal targets: helpers exempt
        from the in-use decision still hold mounts open.

        Args:
            canonical_path: Symlink-resolved environment root.

        Returns:
            Contained processes ordered by pid.

        Raises:
            ProcessScanError: If the process table cannot be enumerated.
        """
        root = normalize(canonical_path)
        procs = [
            p for p in self._scanner.scan() if p.pid != self._own_pid and is_within(p.root, root)
        ]
        return sorted(procs, key=lambda p: p.pid)

    def any_in_use(self, roots: list[str]) -> bool:
        """Check whether any process lives under any of the given roots.

        Args:
            roots: Canonical directories to check.

        Returns:
            True if at least one process is contained in one of them.
        """
        normalized = [normalize(r) for r in roots]
        return any(
            p.pid != self._own_pid and any(is_within(p.root, r) for r in normalized)
            for p in self._scanner.scan()
        )
