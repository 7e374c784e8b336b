"""Unit tests for ProcessRecord."""

import pytest
from chrootctl.models.process import ProcessRecord


class TestProcessRecord:
    """Tests for ProcessRecord dataclass."""

    def test_create_record(self) -> None:
        """ProcessRecord stores all fields."""
        proc = ProcessRecord(pid=42, ppid=7, root="/chroots/bar", cmdline="bash -l")

        assert proc.pid == 42
        assert proc.ppid == 7
        assert proc.root == "/chroots/bar"
        assert proc.core_marked is False

    def test_rejects_non_positive_pid(self) -> None:
        """ProcessRecord requires a positive pid."""
        with pytest.raises(ValueError, match="positive"):
            ProcessRecord(pid=0, ppid=1, root="/")

    def test_rejects_empty_root(self) -> None:
        """ProcessRecord requires a root path."""
        with pytest.raises(ValueError, match="root"):
            ProcessRecord(pid=5, ppid=1, root="")

    @pytest.mark.parametrize(("ppid", "expected"), [(None, True), (0, True), (1, True), (2, False)])
    def test_is_orphan(self, ppid: int | None, expected: bool) -> None:
        """Processes whose parent is absent or init are orphans."""
        assert ProcessRecord(pid=10, ppid=ppid, root="/").is_orphan is expected

    def test_display_command_placeholder(self) -> None:
        """Processes without a command line show their pid."""
        assert ProcessRecord(pid=10, ppid=2, root="/").display_command == "[10]"

    def test_is_immutable(self) -> None:
        """ProcessRecord is frozen."""
        proc = ProcessRecord(pid=10, ppid=2, root="/")
        with pytest.raises(AttributeError):
            proc.pid = 11  # type: ignore[misc]
