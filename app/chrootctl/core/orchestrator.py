"""Per-environment teardown control flow.

For each environment the orchestrator resolves its canonical path, gates
on usage, guards shared host bind mounts, then unmounts everything under
it, handing stalls to an EscalationController. Environments are processed
one at a time and every failure is recorded rather than raised.
"""

import logging
import time
from collections.abc import Callable
from pathlib import Path

from chrootctl.core.decision import DecisionProvider
from chrootctl.core.environments import missing_environment, resolve_environment
from chrootctl.core.escalation import EscalationController
from chrootctl.core.settings import TeardownSettings
from chrootctl.core.symlinks import SymlinkOverride
from chrootctl.core.usage import UsageDetector
from chrootctl.models.environment import Environment
from chrootctl.models.teardown import (
    RetryState,
    SignalStrength,
    TeardownOutcome,
    TeardownResult,
    TeardownSummary,
)
from chrootctl.operators.mount import MountTeardown
from chrootctl.operators.signal import SignalSender

logger = logging.getLogger(__name__)


class TeardownOrchestrator:
    """Tears down environments sequentially and aggregates the outcome.

    Example:
        >>> orchestrator = TeardownOrchestrator(settings, detector, teardown, sender)
        >>> summary = orchestrator.run(["focal", "jammy"])
        >>> summary.exit_code
        0
    """

    def __init__(
        self,
        settings: TeardownSettings,
        detector: UsageDetector,
        teardown: MountTeardown,
        sender: SignalSender,
        decider: DecisionProvider | None = None,
        *,
        force: bool = False,
        auto_confirm: bool = False,
        auto_escalate: bool = False,
        initial_signal: SignalStrength = SignalStrength.GRACEFUL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            settings: Retry budget, pause, shared mounts, and paths.
            detector: Usage detector.
            teardown: Mount teardown operator.
            sender: Signal sender.
            decider: Provider asked when retries run out (None = no one to ask).
            force: Tear down even if the environment is in use.
            auto_confirm: Signal blockers without asking.
            auto_escalate: Switch to the forceful signal after the first one.
            initial_signal: Signal strength for the first escalation.
            sleep: Sleep function (injectable for tests).
        """
        self._settings = settings
        self._detector = detector
        self._teardown = teardown
        self._sender = sender
        self._decider = decider
        self._force = force
        self._auto_confirm = auto_confirm
        self._auto_escalate = auto_escalate
        self._initial_signal = initial_signal
        self._sleep = sleep

    def run(
        self,
        names: list[str],
        on_result: Callable[[TeardownResult], None] | None = None,
    ) -> TeardownSummary:
        """Tear down each named environment in order.

        Args:
            names: Environment names or paths.
            on_result: Called with each result as soon as it is known.

        Returns:
            TeardownSummary with one result per name.

        Raises:
            TeardownError: If the process or mount table cannot be read.
        """
        summary = TeardownSummary()
        for name in names:
            environment = resolve_environment(name, self._settings)
            if environment is None:
                result = TeardownResult(
                    environment=missing_environment(name, self._settings),
                    outcome=TeardownOutcome.NOT_FOUND,
                )
            else:
                result = self.teardown(environment)

            logger.debug("%s: %s", name, result.outcome.value)
            summary.results.append(result)
            if on_result is not None:
                on_result(result)
        return summary

    def teardown(self, environment: Environment) -> TeardownResult:
        """Tear down a single resolved environment.

        Args:
            environment: Environment to unmount.

        Returns:
            TeardownResult describing the outcome.

        Raises:
            TeardownError: If the process or mount table cannot be read.
        """
        root = environment.mount_root

        report = self._detector.is_in_use(root, force=self._force)
        if report.in_use:
            return TeardownResult(
                environment=environment,
                outcome=TeardownOutcome.IN_USE,
                blockers=report.blockers,
            )

        retry_state = RetryState(
            signal=self._initial_signal,
            auto_confirm=self._auto_confirm,
            auto_escalate=self._auto_escalate,
        )
        controller = EscalationController(
            environment,
            retry_state,
            self._detector,
            self._sender,
            decider=self._decider,
            retries=self._settings.retries,
            pause_seconds=self._settings.pause_seconds,
            force=self._force,
            sleep=self._sleep,
        )

        while True:
            self._teardown.guard_shared_mounts(root, self._settings.shared_mounts)

            targets = self._teardown.mount_table.targets_under(root)
            if not targets:
                controller.mark_cleared()
                return TeardownResult(
                    environment=environment,
                    outcome=TeardownOutcome.CLEARED,
                    signals_sent=retry_state.signals_sent,
                )

            remaining = self._teardown.unmount(targets)
            if not remaining:
                continue

            outcome = controller.on_failed_pass(remaining)
            if outcome is not None:
                return TeardownResult(
                    environment=environment,
                    outcome=outcome,
                    blockers=controller.blockers,
                    signals_sent=retry_state.signals_sent,
                    remaining=tuple(remaining),
                )

    def release_symlink_override(self) -> bool:
        """Release the shared symlink exemption if nothing still needs it.

        The decision is usage based: a fresh scan must show no process
        rooted anywhere under the chroots directory (or the encrypted
        mount root).

        Returns:
            True if the exemption was released.

        Raises:
            ProcessScanError: If the process table cannot be enumerated.
            OSError: If the policy file cannot be rewritten.
        """
        policy = self._settings.symlink_policy
        if policy is None:
            return False

        override = SymlinkOverride(policy, self._settings.chroots_dir)
        if not override.is_active():
            return False

        roots = [
            str(Path(self._settings.chroots_dir).resolve()),
            str(self._settings.encrypted_mount_root),
        ]
        if self._detector.any_in_use(roots):
            logger.debug("Keeping symlink exemption: environments still in use")
            return False

        return override.release()
