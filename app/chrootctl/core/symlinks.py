"""Shared symlink-restriction exemption for the chroots directory.

Hosts that restrict symlink traversal keep a policy file listing
directories exempt from the restriction. Every environment under the
chroots directory relies on the same entry, so it may only be removed
once a fresh process scan shows no environment in use anywhere.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class SymlinkOverride:
    """The chroots directory's entry in a symlink policy file.

    Attributes:
        policy_path: Policy file with one exempt directory per line.
        chroots_dir: Directory whose exemption this object manages.
    """

    def __init__(self, policy_path: Path, chroots_dir: Path) -> None:
        """Initialize the override.

        Args:
            policy_path: Policy file with one exempt directory per line.
            chroots_dir: Directory whose exemption is managed.
        """
        self._policy_path = policy_path
        self._chroots_dir = chroots_dir

    @property
    def policy_path(self) -> Path:
        """Policy file path."""
        return self._policy_path

    @property
    def entry(self) -> str:
        """Line identifying the chroots directory in the policy file."""
        return str(self._chroots_dir.resolve())

    def _read_lines(self) -> list[str]:
        try:
            return self._policy_path.read_text().splitlines()
        except FileNotFoundError:
            return []

    def is_active(self) -> bool:
        """Check if the policy file currently exempts the chroots directory."""
        return self.entry in (line.strip() for line in self._read_lines())

    def release(self) -> bool:
        """Remove the chroots directory from the policy file.

        Returns:
            True if an entry was removed.

        Raises:
            OSError: If the policy file cannot be rewritten.
        """
        lines = self._read_lines()
        kept = [line for line in lines if line.strip() != self.entry]
        if len(kept) == len(lines):
            return False

        self._policy_path.write_text("".join(f"{line}\n" for line in kept))
        logger.info("Released symlink exemption for %s", self.entry)
        return True
