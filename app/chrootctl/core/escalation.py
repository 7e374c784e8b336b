"""Retry budget and signal escalation for stalled teardowns.

The EscalationController is consulted after every failed unmount pass.
It re-validates usage to catch new claimants, counts consecutive
failures against the retry budget, and once the budget is exhausted
either signals blocking processes or aborts.

State machine (one controller per environment):

    TRYING --budget exhausted--> AWAITING_DECISION
    AWAITING_DECISION --proceed/escalate--> ESCALATING --> TRYING
    AWAITING_DECISION --list only--> TRYING (attempts kept)
    any --race, decline, or no decision--> ABORTED
    TRYING --no targets left--> CLEARED
"""

import logging
import time
from collections.abc import Callable
from enum import Enum

from chrootctl.core.decision import DecisionProvider
from chrootctl.core.usage import UsageDetector
from chrootctl.models.environment import Environment
from chrootctl.models.process import ProcessRecord
from chrootctl.models.teardown import (
    Decision,
    DecisionContext,
    RetryState,
    SignalStrength,
    TeardownOutcome,
)
from chrootctl.operators.signal import SignalSender

logger = logging.getLogger(__name__)


class EscalationState(Enum):
    """States of the per-environment escalation state machine."""

    TRYING = "trying"
    AWAITING_DECISION = "awaiting_decision"
    ESCALATING = "escalating"
    CLEARED = "cleared"
    ABORTED = "aborted"


class EscalationController:
    """Drives retries and signal escalation for one environment.

    Attributes:
        state: Current EscalationState.
        retry_state: Attempt counter, signal strength, and confirmation mode.
        blockers: Processes behind the most recent abort, if any.
    """

    def __init__(
        self,
        environment: Environment,
        retry_state: RetryState,
        detector: UsageDetector,
        sender: SignalSender,
        decider: DecisionProvider | None = None,
        retries: int | None = 5,
        pause_seconds: float = 0.1,
        force: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the controller.

        Args:
            environment: Environment being torn down.
            retry_state: Mutable state owned by the orchestrator.
            detector: Usage detector, re-queried on every pass.
            sender: Signal delivery operator.
            decider: Provider asked once the budget is exhausted. None means
                no decision is available (non-interactive, no policy).
            retries: Failed passes before a decision is needed. None never
                asks and keeps retrying.
            pause_seconds: Pause between consecutive passes.
            force: Skip usage re-validation.
            sleep: Sleep function (injectable for tests).
        """
        self._environment = environment
        self._retry_state = retry_state
        self._detector = detector
        self._sender = sender
        self._decider = decider
        self._retries = retries
        self._pause_seconds = pause_seconds
        self._force = force
        self._sleep = sleep
        self._state = EscalationState.TRYING
        self._blockers: tuple[ProcessRecord, ...] = ()

    @property
    def state(self) -> EscalationState:
        """Current state of the state machine."""
        return self._state

    @property
    def retry_state(self) -> RetryState:
        """Attempt counter and signal strength for this run."""
        return self._retry_state

    @property
    def blockers(self) -> tuple[ProcessRecord, ...]:
        """Processes behind the most recent abort."""
        return self._blockers

    @property
    def _root(self) -> str:
        return self._environment.mount_root

    def mark_cleared(self) -> None:
        """Record that no mount targets remain."""
        self._state = EscalationState.CLEARED

    def on_failed_pass(self, remaining: list[str]) -> TeardownOutcome | None:
        """Handle an unmount pass that left targets behind.

        Args:
            remaining: Targets still mounted after the pass.

        Returns:
            A terminal TeardownOutcome if the run must abort, or None to
            keep trying.
        """
        state = self._retry_state
        state.attempts += 1
        logger.debug(
            "%s: %d target(s) still mounted after attempt %d",
            self._environment.name,
            len(remaining),
            state.attempts,
        )

        outcome = self._check_race()
        if outcome is not None:
            return outcome

        if self._retries is not None and state.attempts >= self._retries:
            self._state = EscalationState.AWAITING_DECISION
            outcome = self._decide(remaining)
            if outcome is not None:
                return outcome

        self._state = EscalationState.TRYING
        self._sleep(self._pause_seconds)
        return None

    def _check_race(self) -> TeardownOutcome | None:
        """Abort if processes we never signaled now keep the environment in use."""
        report = self._detector.is_in_use(self._root, force=self._force)
        newcomers = [p for p in report.blockers if p.pid not in self._retry_state.signaled_pids]
        if not newcomers:
            return None

        logger.info(
            "%s: new usage detected by pid(s) %s, aborting",
            self._environment.name,
            ", ".join(str(p.pid) for p in newcomers),
        )
        self._blockers = tuple(newcomers)
        self._state = EscalationState.ABORTED
        return TeardownOutcome.RACE_DETECTED

    def _decide(self, remaining: list[str]) -> TeardownOutcome | None:
        """Resolve AWAITING_DECISION into a signal, a listing, or an abort."""
        state = self._retry_state
        processes = self._detector.list_processes(self._root)

        if state.auto_confirm:
            # Proceeds even with nobody inside; the loop ends on unmount or race
            decision = Decision.PROCEED
        elif self._decider is None:
            self._blockers = tuple(processes)
            self._state = EscalationState.ABORTED
            return TeardownOutcome.BUDGET_EXHAUSTED
        else:
            decision = self._decider.decide(
                DecisionContext(
                    environment=self._environment,
                    attempts=state.attempts,
                    signal=state.signal,
                    remaining=tuple(remaining),
                    blockers=tuple(processes),
                )
            )

        logger.debug("%s: decision %s", self._environment.name, decision.value)

        if decision is Decision.ABORT:
            self._blockers = tuple(processes)
            self._state = EscalationState.ABORTED
            return TeardownOutcome.USER_DECLINED
        if decision is Decision.LIST_ONLY:
            return None
        if decision is Decision.ESCALATE:
            state.raise_signal(SignalStrength.FORCEFUL)

        self._escalate()
        return None

    def _escalate(self) -> None:
        """Signal every process currently inside the environment."""
        self._state = EscalationState.ESCALATING
        state = self._retry_state

        pids = [p.pid for p in self._detector.list_processes(self._root)]
        delivered = self._sender.send(pids, state.signal)
        state.record_signaled(pids)
        logger.info(
            "%s: sent %s to %d process(es)",
            self._environment.name,
            state.signal.label,
            len(delivered),
        )

        if state.auto_escalate:
            state.raise_signal(SignalStrength.FORCEFUL)
        state.attempts = 0
