"""Unit tests for MountTeardown.

The umount/mount commands are patched; the mount table is a real file
rewritten by the fake command to simulate detaching.
"""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from chrootctl.operators.mount import MountTeardown
from chrootctl.scanners.mounts import MountTable
from chrootctl.utils.shell import CommandResult

MOUNTS = """/dev/sda1 / ext4 rw 0 0
/dev/sdb1 /media/usb vfat rw 0 0
/dev/sda1 /chroots/baz ext4 rw 0 0
proc /chroots/baz/proc proc rw 0 0
/dev/sdb1 /chroots/baz/var/host/media vfat rw 0 0
"""


@pytest.fixture
def mounts_file(tmp_path: Path) -> Path:
    path = tmp_path / "mounts"
    path.write_text(MOUNTS)
    return path


@pytest.fixture
def teardown(mounts_file: Path) -> MountTeardown:
    return MountTeardown(MountTable(mounts_path=mounts_file))


def _detach(mounts_file: Path, *targets: str) -> None:
    lines = mounts_file.read_text().splitlines()
    kept = [line for line in lines if line.split()[1] not in targets]
    mounts_file.write_text("".join(f"{line}\n" for line in kept))


class TestMountTeardownAvailability:
    """Tests for is_available."""

    def test_available_with_both_commands(self, teardown: MountTeardown) -> None:
        with patch("chrootctl.operators.mount.command_exists", return_value=True):
            assert teardown.is_available() is True

    def test_unavailable_without_umount(self, teardown: MountTeardown) -> None:
        with patch("chrootctl.operators.mount.command_exists", side_effect=lambda c: c == "mount"):
            assert teardown.is_available() is False


class TestUnmount:
    """Tests for MountTeardown.unmount."""

    def test_empty_batch_runs_nothing(self, teardown: MountTeardown) -> None:
        with patch("chrootctl.operators.mount.run_command") as mock_run:
            assert teardown.unmount([]) == []
        mock_run.assert_not_called()

    def test_batch_in_single_call(self, teardown: MountTeardown, mounts_file: Path) -> None:
        """All targets go to one umount invocation."""
        targets = ["/chroots/baz/var/host/media", "/chroots/baz/proc", "/chroots/baz"]

        def fake_umount(args: list[str]) -> CommandResult:
            _detach(mounts_file, *args[1:])
            return CommandResult(stdout="", stderr="", returncode=0)

        with patch("chrootctl.operators.mount.run_command", side_effect=fake_umount) as mock_run:
            remaining = teardown.unmount(targets)

        assert remaining == []
        mock_run.assert_called_once_with(["umount", *targets])

    def test_partial_failure_returns_remaining(
        self, teardown: MountTeardown, mounts_file: Path
    ) -> None:
        """A busy target does not abort the batch; survivors are reported."""

        def fake_umount(args: list[str]) -> CommandResult:
            _detach(mounts_file, "/chroots/baz/proc")
            return CommandResult(stdout="", stderr="umount: target is busy", returncode=32)

        with patch("chrootctl.operators.mount.run_command", side_effect=fake_umount):
            remaining = teardown.unmount(["/chroots/baz/proc", "/chroots/baz"])

        assert remaining == ["/chroots/baz"]

    def test_already_unmounted_is_noop(self, teardown: MountTeardown) -> None:
        """Unmounting a target that is already gone is not an error."""
        with patch(
            "chrootctl.operators.mount.run_command",
            return_value=CommandResult(stdout="", stderr="not mounted", returncode=32),
        ):
            assert teardown.unmount(["/chroots/gone/proc"]) == []

    def test_timeout_falls_back_to_mount_table(
        self, teardown: MountTeardown, mounts_file: Path
    ) -> None:
        """A hung umount still reports what the mount table shows as detached."""

        def hung_umount(args: list[str]) -> CommandResult:
            _detach(mounts_file, "/chroots/baz/proc")
            raise subprocess.TimeoutExpired(cmd=args, timeout=60)

        with patch("chrootctl.operators.mount.run_command", side_effect=hung_umount):
            remaining = teardown.unmount(["/chroots/baz/proc", "/chroots/baz"])

        assert remaining == ["/chroots/baz"]


class TestSharedMounts:
    """Tests for slave reclassification of shared bind mounts."""

    def test_make_slave_when_mounted(self, teardown: MountTeardown) -> None:
        with patch(
            "chrootctl.operators.mount.run_command",
            return_value=CommandResult(stdout="", stderr="", returncode=0),
        ) as mock_run:
            assert teardown.make_slave("/chroots/baz/var/host/media") is True

        mock_run.assert_called_once_with(["mount", "--make-rslave", "/chroots/baz/var/host/media"])

    def test_make_slave_skips_unmounted(self, teardown: MountTeardown) -> None:
        with patch("chrootctl.operators.mount.run_command") as mock_run:
            assert teardown.make_slave("/chroots/baz/var/host/other") is False
        mock_run.assert_not_called()

    def test_make_slave_failure(self, teardown: MountTeardown) -> None:
        with patch(
            "chrootctl.operators.mount.run_command",
            return_value=CommandResult(stdout="", stderr="denied", returncode=1),
        ):
            assert teardown.make_slave("/chroots/baz/var/host/media") is False

    def test_guard_shared_mounts(self, teardown: MountTeardown) -> None:
        """Only mounted bind points under the root are reclassified."""
        with patch(
            "chrootctl.operators.mount.run_command",
            return_value=CommandResult(stdout="", stderr="", returncode=0),
        ) as mock_run:
            guarded = teardown.guard_shared_mounts(
                "/chroots/baz/", ["var/host/media", "/var/host/missing/"]
            )

        assert guarded == ["/chroots/baz/var/host/media"]
        mock_run.assert_called_once()

    def test_host_mount_survives_teardown(
        self, teardown: MountTeardown, mounts_file: Path
    ) -> None:
        """Unmounting the slave bind point leaves the host media mount in place."""
        calls: list[list[str]] = []

        def fake_run(args: list[str]) -> CommandResult:
            calls.append(args)
            if args[0] == "umount":
                _detach(mounts_file, *args[1:])
            return CommandResult(stdout="", stderr="", returncode=0)

        with patch("chrootctl.operators.mount.run_command", side_effect=fake_run):
            teardown.guard_shared_mounts("/chroots/baz", ["var/host/media"])
            remaining = teardown.unmount(teardown.mount_table.targets_under("/chroots/baz"))

        assert remaining == []
        assert calls[0][:2] == ["mount", "--make-rslave"]
        assert teardown.mount_table.is_mounted("/media/usb") is True
