"""Unit tests for the interactive decision provider."""

from unittest.mock import MagicMock, patch

import pytest
from chrootctl.cli.prompt import InteractiveDecisionProvider
from chrootctl.models.environment import Environment
from chrootctl.models.process import ProcessRecord
from chrootctl.models.teardown import Decision, DecisionContext, SignalStrength

CONTEXT = DecisionContext(
    environment=Environment(name="baz", path="/c/baz", canonical_path="/c/baz"),
    attempts=5,
    signal=SignalStrength.GRACEFUL,
    remaining=("/c/baz/proc", "/c/baz"),
    blockers=(ProcessRecord(pid=300, ppid=1, root="/c/baz", cmdline="sshd"),),
)


class TestInteractiveDecisionProvider:
    """Tests for InteractiveDecisionProvider.decide."""

    @pytest.mark.parametrize(
        ("answer", "expected"),
        [
            ("y", Decision.PROCEED),
            ("YES", Decision.PROCEED),
            ("k", Decision.ESCALATE),
            ("kill", Decision.ESCALATE),
            ("l", Decision.LIST_ONLY),
            (" n ", Decision.ABORT),
            ("no", Decision.ABORT),
        ],
    )
    @patch("chrootctl.cli.prompt.console")
    @patch("chrootctl.cli.prompt.typer.prompt")
    def test_answers(
        self,
        mock_prompt: MagicMock,
        _mock_console: MagicMock,
        answer: str,
        expected: Decision,
    ) -> None:
        mock_prompt.return_value = answer

        assert InteractiveDecisionProvider().decide(CONTEXT) is expected

    @patch("chrootctl.cli.prompt.console")
    @patch("chrootctl.cli.prompt.typer.prompt")
    def test_question_names_signal_and_count(
        self, mock_prompt: MagicMock, _mock_console: MagicMock
    ) -> None:
        mock_prompt.return_value = "y"

        InteractiveDecisionProvider().decide(CONTEXT)

        question = mock_prompt.call_args.args[0]
        assert "baz" in question
        assert "SIGTERM" in question
        assert "1 process(es)" in question
        assert mock_prompt.call_args.kwargs["default"] == "y"

    @patch("chrootctl.cli.prompt.console")
    @patch("chrootctl.cli.prompt.typer.prompt")
    def test_reasks_on_invalid_answer(
        self, mock_prompt: MagicMock, mock_console: MagicMock
    ) -> None:
        mock_prompt.side_effect = ["maybe", "n"]

        assert InteractiveDecisionProvider().decide(CONTEXT) is Decision.ABORT
        assert mock_prompt.call_count == 2
        assert "Please answer" in mock_console.print.call_args_list[0].args[0]

    @patch("chrootctl.cli.prompt.create_process_table")
    @patch("chrootctl.cli.prompt.console")
    @patch("chrootctl.cli.prompt.typer.prompt", return_value="l")
    def test_list_prints_blockers(
        self, _mock_prompt: MagicMock, _mock_console: MagicMock, mock_table: MagicMock
    ) -> None:
        InteractiveDecisionProvider().decide(CONTEXT)

        assert mock_table.call_args.args[0] == list(CONTEXT.blockers)
