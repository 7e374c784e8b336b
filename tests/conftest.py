"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from chrootctl.models.process import ProcessRecord
from chrootctl.scanners.base import ProcessScanner


class StaticScanner(ProcessScanner):
    """Process scanner returning a fixed (mutable) list of records."""

    def __init__(self, records: list[ProcessRecord] | None = None) -> None:
        self.records = list(records or [])

    def scan(self) -> Iterator[ProcessRecord]:
        yield from list(self.records)

    def is_available(self) -> bool:
        return True


@pytest.fixture
def static_scanner() -> type[StaticScanner]:
    """Factory class for scanners with canned process records."""
    return StaticScanner


@pytest.fixture
def fake_proc(tmp_path: Path) -> Callable[..., Path]:
    """Build a fake /proc tree and return a function adding processes."""
    proc_root = tmp_path / "proc"
    proc_root.mkdir()

    def add_process(
        pid: int,
        ppid: int,
        root: str,
        cmdline: list[str] | None = None,
        environ: list[str] | None = None,
        comm: str = "cmd",
    ) -> Path:
        pid_dir = proc_root / str(pid)
        pid_dir.mkdir()
        os.symlink(root, pid_dir / "root")
        (pid_dir / "stat").write_text(f"{pid} ({comm}) S {ppid} {pid} {pid} 0 -1 4194304\n")
        (pid_dir / "cmdline").write_bytes(b"".join(a.encode() + b"\0" for a in cmdline or []))
        (pid_dir / "environ").write_bytes(b"".join(e.encode() + b"\0" for e in environ or []))
        return proc_root

    return add_process


@pytest.fixture
def mock_mounts_output() -> str:
    """Sample /proc/mounts content with an environment tree."""
    return """sysfs /sys sysfs rw,nosuid,nodev,noexec,relatime 0 0
proc /proc proc rw,nosuid,nodev,noexec,relatime 0 0
/dev/sda1 / ext4 rw,relatime 0 0
/dev/sdb1 /media/usb vfat rw,relatime 0 0
/dev/sda1 /chroots/bar ext4 rw,relatime 0 0
proc /chroots/bar/proc proc rw,nosuid,nodev,noexec,relatime 0 0
devpts /chroots/bar/dev/pts devpts rw,nosuid,noexec,relatime 0 0
/dev/sdb1 /chroots/bar/var/host/media vfat rw,relatime 0 0
/dev/sda1 /chroots/bar/home/my\\040docs ext4 rw,relatime 0 0
/dev/sda1 /chroots/barbecue ext4 rw,relatime 0 0
"""
