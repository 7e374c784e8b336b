"""Decision providers consulted when the retry budget is exhausted.

The escalation controller never performs I/O itself. When unmounting
keeps failing it asks a DecisionProvider what to do; the interactive
terminal provider lives in chrootctl.cli.prompt.
"""

from abc import ABC, abstractmethod

from chrootctl.models.teardown import Decision, DecisionContext


class DecisionProvider(ABC):
    """Capability answering what to do with processes blocking teardown.

    Example:
        >>> provider = FixedDecisionProvider(Decision.PROCEED)
        >>> provider.decide(context)
        <Decision.PROCEED: 'proceed'>
    """

    @abstractmethod
    def decide(self, context: DecisionContext) -> Decision:
        """Choose how to continue a stalled teardown.

        Args:
            context: Environment, attempt count, signal, and blockers.

        Returns:
            The chosen Decision.
        """


class FixedDecisionProvider(DecisionProvider):
    """Non-interactive provider that always gives the same answer."""

    def __init__(self, answer: Decision) -> None:
        """Initialize with the fixed policy answer.

        Args:
            answer: Decision returned for every context.
        """
        self._answer = answer

    @property
    def answer(self) -> Decision:
        """The fixed policy answer."""
        return self._answer

    def decide(self, context: DecisionContext) -> Decision:
        """Return the fixed answer regardless of context."""
        return self._answer
