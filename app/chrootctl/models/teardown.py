"""Teardown models for retry, escalation, and per-environment results.

This module defines the data structures shared by the escalation
controller and the teardown orchestrator: signal strengths, operator
decisions, the per-environment retry state, and teardown outcomes.
"""

import signal
from dataclasses import dataclass, field
from enum import Enum

from chrootctl.models.environment import Environment
from chrootctl.models.process import ProcessRecord


class SignalStrength(Enum):
    """Strength of the termination signal sent to blocking processes.

    Attributes:
        GRACEFUL: Ask processes to exit (SIGTERM).
        FORCEFUL: Kill processes outright (SIGKILL).
    """

    GRACEFUL = "graceful"
    FORCEFUL = "forceful"

    @property
    def level(self) -> int:
        """Numeric level used to compare strengths."""
        return 0 if self is SignalStrength.GRACEFUL else 1

    @property
    def signum(self) -> signal.Signals:
        """The POSIX signal delivered for this strength."""
        if self is SignalStrength.GRACEFUL:
            return signal.SIGTERM
        return signal.SIGKILL

    @property
    def label(self) -> str:
        """Signal name for display (e.g. 'SIGTERM')."""
        return self.signum.name


class Decision(Enum):
    """Answer given when the retry budget is exhausted.

    Attributes:
        PROCEED: Signal blockers with the current strength.
        ESCALATE: Signal blockers with the strongest strength.
        LIST_ONLY: List blockers without signaling and keep trying.
        ABORT: Give up on this environment.
    """

    PROCEED = "proceed"
    ESCALATE = "escalate"
    LIST_ONLY = "list"
    ABORT = "abort"


class TeardownOutcome(Enum):
    """Final outcome of tearing down one environment.

    Attributes:
        CLEARED: No mounts remain under the environment.
        NOT_FOUND: The environment path does not exist.
        IN_USE: Usage was detected before teardown and force was not set.
        RACE_DETECTED: A new claimant appeared while tearing down.
        USER_DECLINED: The operator declined to signal blockers.
        BUDGET_EXHAUSTED: Retries ran out with no way to decide.
    """

    CLEARED = "cleared"
    NOT_FOUND = "not_found"
    IN_USE = "in_use"
    RACE_DETECTED = "race_detected"
    USER_DECLINED = "user_declined"
    BUDGET_EXHAUSTED = "budget_exhausted"

    @property
    def success(self) -> bool:
        """Check if this outcome counts as a successful teardown."""
        return self is TeardownOutcome.CLEARED


@dataclass(frozen=True, slots=True)
class DecisionContext:
    """Information handed to a decision provider at a confirmation point.

    Attributes:
        environment: Environment being torn down.
        attempts: Consecutive failed unmount passes so far.
        signal: Strength that PROCEED would send.
        remaining: Mount targets still present.
        blockers: Processes currently inside the environment.
    """

    environment: Environment
    attempts: int
    signal: SignalStrength
    remaining: tuple[str, ...]
    blockers: tuple[ProcessRecord, ...]


@dataclass(slots=True)
class RetryState:
    """Mutable retry and escalation state for one environment's teardown.

    Owned by the orchestrator for the duration of a single environment
    and discarded afterwards.

    Attributes:
        attempts: Consecutive failed unmount passes since the last signal.
        signal: Current signal strength. Never decreases.
        auto_confirm: Signal without asking once the budget is exhausted.
        auto_escalate: Move to the strongest signal after the first one.
        signals_sent: Number of escalation cycles that sent signals.
        signaled_pids: Every pid signaled during this run.
    """

    attempts: int = 0
    signal: SignalStrength = SignalStrength.GRACEFUL
    auto_confirm: bool = False
    auto_escalate: bool = False
    signals_sent: int = 0
    signaled_pids: set[int] = field(default_factory=set)

    def raise_signal(self, strength: SignalStrength) -> None:
        """Raise the signal strength; lower strengths are ignored."""
        if strength.level > self.signal.level:
            self.signal = strength

    def record_signaled(self, pids: list[int]) -> None:
        """Remember pids that received a signal in this run."""
        self.signaled_pids.update(pids)
        self.signals_sent += 1


@dataclass(frozen=True, slots=True)
class TeardownResult:
    """Result of tearing down a single environment.

    Attributes:
        environment: The environment that was processed.
        outcome: Final outcome.
        blockers: Processes that blocked teardown (for IN_USE / races).
        signals_sent: Number of signal cycles that were needed.
        remaining: Mount targets left behind on failure.
    """

    environment: Environment
    outcome: TeardownOutcome
    blockers: tuple[ProcessRecord, ...] = ()
    signals_sent: int = 0
    remaining: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        """Check if the environment was fully unmounted."""
        return self.outcome.success


@dataclass(slots=True)
class TeardownSummary:
    """Aggregated results of a teardown run across environments.

    Attributes:
        results: Per-environment results in processing order.
    """

    results: list[TeardownResult] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        """True if any environment was not cleared or could not be found."""
        return any(not r.success for r in self.results)

    @property
    def exit_code(self) -> int:
        """Process exit code: 0 when every environment was cleared."""
        return 1 if self.failed else 0
