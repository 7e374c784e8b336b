"""Interactive decision provider for stalled teardowns."""

import typer

from chrootctl.cli.display import create_process_table
from chrootctl.core.decision import DecisionProvider
from chrootctl.models.teardown import Decision, DecisionContext, SignalStrength
from chrootctl.utils.formatting import console

_ANSWERS: dict[str, Decision] = {
    "y": Decision.PROCEED,
    "yes": Decision.PROCEED,
    "k": Decision.ESCALATE,
    "kill": Decision.ESCALATE,
    "l": Decision.LIST_ONLY,
    "list": Decision.LIST_ONLY,
    "n": Decision.ABORT,
    "no": Decision.ABORT,
}


class InteractiveDecisionProvider(DecisionProvider):
    """Asks the operator on the terminal what to do with blockers.

    Answers: [y]es sends the current signal, [k]ill sends SIGKILL,
    [l]ist shows the processes and keeps trying, [n]o aborts.
    """

    def decide(self, context: DecisionContext) -> Decision:
        """Prompt until a valid answer is given."""
        count = len(context.blockers)
        question = (
            f"Failed to unmount {context.environment.name} "
            f"({len(context.remaining)} mount(s) busy). "
            f"Send {context.signal.label} to {count} process(es)? [y/k/l/n]"
        )

        while True:
            answer = typer.prompt(question, default="y", show_default=False)
            decision = _ANSWERS.get(answer.strip().lower())
            if decision is None:
                console.print("[warning]Please answer y, k, l, or n.[/warning]")
                continue

            if decision is Decision.LIST_ONLY:
                console.print(
                    create_process_table(
                        list(context.blockers),
                        title=f"Processes in {context.environment.name}",
                    )
                )
            elif decision is Decision.ESCALATE:
                console.print(f"[warning]Sending {SignalStrength.FORCEFUL.label}.[/warning]")
            return decision
