"""Shared Rich display functions for processes and teardown results."""

from rich.markup import escape
from rich.table import Table

from chrootctl.models.process import ProcessRecord
from chrootctl.models.teardown import TeardownOutcome, TeardownResult, TeardownSummary
from chrootctl.utils.formatting import console, print_success

_OUTCOME_TEXT: dict[TeardownOutcome, str] = {
    TeardownOutcome.CLEARED: "[success]unmounted[/success]",
    TeardownOutcome.NOT_FOUND: "[error]not found[/error]",
    TeardownOutcome.IN_USE: "[warning]in use[/warning]",
    TeardownOutcome.RACE_DETECTED: "[error]claimed during teardown[/error]",
    TeardownOutcome.USER_DECLINED: "[warning]aborted[/warning]",
    TeardownOutcome.BUDGET_EXHAUSTED: "[error]still busy[/error]",
}


def create_process_table(processes: list[ProcessRecord], title: str = "Processes") -> Table:
    """Create a Rich table listing processes inside an environment.

    Core helpers are shown muted; everything else is highlighted as a
    blocker.

    Args:
        processes: Processes to list.
        title: Table title.

    Returns:
        Rich Table configured for process display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("PID", justify="right")
    table.add_column("PPID", justify="right", style="muted")
    table.add_column("Root", style="muted")
    table.add_column("Command", overflow="ellipsis")

    for proc in processes:
        style = "process_core" if proc.core_marked else "process_blocker"
        table.add_row(
            f"[{style}]{proc.pid}[/{style}]",
            str(proc.ppid) if proc.ppid is not None else "-",
            escape(proc.root),
            escape(proc.display_command),
        )

    return table


def describe_result(result: TeardownResult) -> str:
    """Format a single teardown result as one line of Rich markup."""
    text = f"{escape(result.environment.name)}: {_OUTCOME_TEXT[result.outcome]}"
    if result.signals_sent:
        text += f" [muted](after {result.signals_sent} signal round(s))[/muted]"
    return text


def print_summary(summary: TeardownSummary) -> None:
    """Print the overall outcome of a teardown run.

    Args:
        summary: Aggregated results.
    """
    cleared = sum(1 for r in summary.results if r.success)
    failed = len(summary.results) - cleared

    if failed == 0:
        print_success(f"All {cleared} environment(s) unmounted.")
    else:
        console.print(
            f"\n[success]{cleared} unmounted[/success], [error]{failed} failed[/error]"
        )
