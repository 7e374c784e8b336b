"""Live mount table reader.

Parses /proc/mounts on every call. Mount points containing whitespace or
backslashes are encoded there as three-digit octal escapes (e.g. '\\040'
for a space), which are decoded before any path comparison.
"""

import logging
import re
from pathlib import Path

from chrootctl.core.errors import MountTableError
from chrootctl.models.mount import MountEntry
from chrootctl.utils.paths import is_within, normalize

logger = logging.getLogger(__name__)

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


def decode_mount_path(raw: str) -> str:
    """Decode the octal escapes used in /proc/mounts fields.

    Args:
        raw: Field as it appears in the mount table.

    Returns:
        Decoded path.
    """
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), raw)


class MountTable:
    """Reader for the live mount table.

    Attributes:
        mounts_path: File listing active mounts (overridable for tests).
    """

    def __init__(self, mounts_path: Path = Path("/proc/mounts")) -> None:
        """Initialize the mount table reader.

        Args:
            mounts_path: File listing active mounts.
        """
        self._mounts_path = mounts_path

    @property
    def mounts_path(self) -> Path:
        """File listing active mounts."""
        return self._mounts_path

    def entries(self) -> list[MountEntry]:
        """Read every active mount in table order.

        Returns:
            List of MountEntry with decoded source and target.

        Raises:
            MountTableError: If the mount table cannot be read.
        """
        try:
            content = self._mounts_path.read_text(errors="surrogateescape")
        except OSError as e:
            msg = f"Cannot read mount table {self._mounts_path}: {e}"
            raise MountTableError(msg) from e

        entries: list[MountEntry] = []
        for line in content.splitlines():
            fields = line.split()
            if len(fields) < 2:
                logger.debug("Skipping malformed mount line: %r", line[:100])
                continue
            entries.append(
                MountEntry(
                    source=decode_mount_path(fields[0]),
                    target=decode_mount_path(fields[1]),
                )
            )
        return entries

    def targets_under(self, path: str) -> list[str]:
        """List mount targets at or beneath a canonical path.

        Targets are returned deepest first so nested mounts are detached
        before their parents. A target mounted more than once is listed once.

        Args:
            path: Canonical (symlink-resolved) directory.

        Returns:
            Mount target paths, deepest first.
        """
        root = normalize(path)
        targets: set[str] = set()
        for entry in self.entries():
            if is_within(entry.target, root):
                targets.add(normalize(entry.target))
        return sorted(targets, key=lambda t: (-t.count("/"), t))

    def is_mounted(self, target: str) -> bool:
        """Check if a path is currently a mount point.

        Args:
            target: Absolute path to check.

        Returns:
            True if some active mount has exactly this target.
        """
        wanted = normalize(target)
        return any(normalize(entry.target) == wanted for entry in self.entries())
