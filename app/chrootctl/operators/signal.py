"""Signal delivery to blocking processes."""

import logging
import os

from chrootctl.models.teardown import SignalStrength

logger = logging.getLogger(__name__)


class SignalSender:
    """Sends termination signals to processes.

    Processes that exit before the signal arrives are ignored.
    """

    def send(self, pids: list[int], strength: SignalStrength) -> list[int]:
        """Send a signal of the given strength to every pid.

        Args:
            pids: Target process IDs.
            strength: Signal strength to deliver.

        Returns:
            Pids that were signaled successfully.
        """
        delivered: list[int] = []
        for pid in pids:
            try:
                os.kill(pid, strength.signum)
            except ProcessLookupError:
                logger.debug("Pid %d exited before %s", pid, strength.label)
                continue
            except PermissionError as e:
                logger.warning("Cannot send %s to pid %d: %s", strength.label, pid, e)
                continue
            delivered.append(pid)

        logger.debug("Sent %s to %d of %d process(es)", strength.label, len(delivered), len(pids))
        return delivered
