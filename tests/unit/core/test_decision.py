"""Unit tests for decision providers."""

import pytest
from chrootctl.core.decision import DecisionProvider, FixedDecisionProvider
from chrootctl.models.environment import Environment
from chrootctl.models.teardown import Decision, DecisionContext, SignalStrength


@pytest.fixture
def context() -> DecisionContext:
    return DecisionContext(
        environment=Environment(name="baz", path="/c/baz", canonical_path="/c/baz"),
        attempts=5,
        signal=SignalStrength.GRACEFUL,
        remaining=("/c/baz",),
        blockers=(),
    )


class TestFixedDecisionProvider:
    """Tests for FixedDecisionProvider."""

    @pytest.mark.parametrize("answer", list(Decision))
    def test_returns_fixed_answer(self, answer: Decision, context: DecisionContext) -> None:
        provider = FixedDecisionProvider(answer)

        assert provider.decide(context) is answer
        assert provider.answer is answer

    def test_is_decision_provider(self) -> None:
        assert isinstance(FixedDecisionProvider(Decision.ABORT), DecisionProvider)

    def test_abstract_base(self) -> None:
        with pytest.raises(TypeError):
            DecisionProvider()  # type: ignore[abstract]
