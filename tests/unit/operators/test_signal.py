"""Unit tests for SignalSender."""

import signal
from unittest.mock import patch

from chrootctl.models.teardown import SignalStrength
from chrootctl.operators.signal import SignalSender


class TestSignalSender:
    """Tests for SignalSender.send."""

    def test_sends_to_every_pid(self) -> None:
        with patch("chrootctl.operators.signal.os.kill") as mock_kill:
            delivered = SignalSender().send([10, 11], SignalStrength.GRACEFUL)

        assert delivered == [10, 11]
        mock_kill.assert_any_call(10, signal.SIGTERM)
        mock_kill.assert_any_call(11, signal.SIGTERM)

    def test_forceful_sends_sigkill(self) -> None:
        with patch("chrootctl.operators.signal.os.kill") as mock_kill:
            SignalSender().send([10], SignalStrength.FORCEFUL)

        mock_kill.assert_called_once_with(10, signal.SIGKILL)

    def test_exited_process_ignored(self) -> None:
        """A pid that exited before delivery is skipped without error."""

        def fake_kill(pid: int, sig: int) -> None:
            if pid == 10:
                raise ProcessLookupError

        with patch("chrootctl.operators.signal.os.kill", side_effect=fake_kill):
            delivered = SignalSender().send([10, 11], SignalStrength.GRACEFUL)

        assert delivered == [11]

    def test_permission_denied_ignored(self) -> None:
        with patch("chrootctl.operators.signal.os.kill", side_effect=PermissionError("nope")):
            assert SignalSender().send([10], SignalStrength.FORCEFUL) == []

    def test_no_pids(self) -> None:
        with patch("chrootctl.operators.signal.os.kill") as mock_kill:
            assert SignalSender().send([], SignalStrength.GRACEFUL) == []
        mock_kill.assert_not_called()
