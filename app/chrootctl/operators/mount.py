"""Mount teardown operator.

Detaches mount targets in bulk with the umount command and reports which
targets survived. Also switches shared host bind mounts to slave
propagation so that unmounting them inside an environment never detaches
the host-wide mount they were bound from.
"""

import logging
import posixpath
import subprocess

from chrootctl.scanners.mounts import MountTable
from chrootctl.utils.paths import normalize
from chrootctl.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)


class MountTeardown:
    """Unmounts environment mount targets.

    Attributes:
        mount_table: Live mount table re-read after every pass.
    """

    def __init__(self, mount_table: MountTable) -> None:
        """Initialize the operator.

        Args:
            mount_table: Live mount table re-read after every pass.
        """
        self._mount_table = mount_table

    @property
    def mount_table(self) -> MountTable:
        """Live mount table used to verify results."""
        return self._mount_table

    def is_available(self) -> bool:
        """Check if the umount and mount commands are available."""
        return command_exists("umount") and command_exists("mount")

    def unmount(self, targets: list[str]) -> list[str]:
        """Unmount all targets in a single pass.

        umount keeps going after a target fails (busy, or already gone),
        so one call handles the whole batch. Success is judged by the
        mount table afterwards, not by the exit code.

        Args:
            targets: Mount targets, ideally deepest first.

        Returns:
            Targets that are still mounted after the pass.

        Raises:
            MountTableError: If the mount table cannot be re-read.
        """
        if not targets:
            return []

        try:
            result = run_command(["umount", *targets])
        except subprocess.TimeoutExpired:
            # Hung on a busy target; the mount table says what went through
            logger.warning("umount timed out on %d target(s)", len(targets))
        else:
            if not result.success:
                logger.debug("umount exited %d: %s", result.returncode, result.stderr.strip())

        mounted = {normalize(entry.target) for entry in self._mount_table.entries()}
        remaining = [t for t in targets if normalize(t) in mounted]
        logger.debug("Unmount pass: %d of %d target(s) remain", len(remaining), len(targets))
        return remaining

    def make_slave(self, target: str) -> bool:
        """Switch a mount point to slave propagation.

        Does nothing if the target is not currently mounted. Running it
        again on an already-slave mount is harmless.

        Args:
            target: Mount point to reclassify.

        Returns:
            True if the target is mounted and was switched.
        """
        if not self._mount_table.is_mounted(target):
            return False

        result = run_command(["mount", "--make-rslave", target])
        if not result.success:
            logger.warning("Failed to make %s a slave mount: %s", target, result.stderr.strip())
            return False

        logger.debug("Marked %s as slave mount", target)
        return True

    def guard_shared_mounts(self, root: str, shared_mounts: list[str]) -> list[str]:
        """Make every mounted shared bind point under root a slave mount.

        Args:
            root: Environment mount root.
            shared_mounts: Bind points relative to root (e.g. 'var/host/media').

        Returns:
            Absolute targets that were switched.
        """
        guarded: list[str] = []
        for relative in shared_mounts:
            target = posixpath.join(normalize(root), relative.strip("/"))
            if self.make_slave(target):
                guarded.append(target)
        return guarded
