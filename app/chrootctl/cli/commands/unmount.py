"""Unmount command implementation.

Tears down one or more environments: refuses environments that are in
use, unmounts everything beneath them, and signals blocking processes
when unmounting stalls.
"""

import sys
from pathlib import Path
from typing import Annotated

import typer

from chrootctl.cli.display import create_process_table, describe_result, print_summary
from chrootctl.cli.prompt import InteractiveDecisionProvider
from chrootctl.core.decision import DecisionProvider
from chrootctl.core.environments import list_environments
from chrootctl.core.errors import TeardownError
from chrootctl.core.orchestrator import TeardownOrchestrator
from chrootctl.core.settings import SettingsError, TeardownSettings, load_settings
from chrootctl.core.usage import UsageDetector
from chrootctl.models.teardown import SignalStrength, TeardownOutcome, TeardownResult
from chrootctl.operators.mount import MountTeardown
from chrootctl.operators.signal import SignalSender
from chrootctl.scanners.mounts import MountTable
from chrootctl.scanners.process import ProcScanner
from chrootctl.utils.formatting import console, print_error, print_info, print_warning


def _load_effective_settings(
    chroots: Path | None,
    retries: int | None,
    patient: bool,
) -> TeardownSettings:
    """Load settings from disk and apply command-line overrides.

    Raises:
        typer.Exit: If the settings file is invalid.
    """
    try:
        settings = load_settings()
    except SettingsError as e:
        print_error(f"Failed to load settings: {e}")
        raise typer.Exit(code=1) from e

    updates: dict[str, object] = {}
    if chroots is not None:
        updates["chroots_dir"] = chroots
    if patient:
        updates["retries"] = None
    elif retries is not None:
        updates["retries"] = retries
    return settings.model_copy(update=updates)


def _select_decider(yes: bool) -> DecisionProvider | None:
    """Pick who answers when retries run out.

    With --yes no one is asked. Otherwise the operator is asked on a
    terminal; without one there is no way to decide.
    """
    if yes:
        return None
    if sys.stdin.isatty():
        return InteractiveDecisionProvider()
    return None


def _report(result: TeardownResult, print_procs: bool, quiet: bool) -> None:
    """Print one environment's outcome as soon as it is known."""
    if not quiet or not result.success:
        console.print(describe_result(result))

    if result.outcome is TeardownOutcome.NOT_FOUND:
        print_warning(f"No environment at {result.environment.path}")
    elif result.outcome is TeardownOutcome.BUDGET_EXHAUSTED and not result.blockers:
        print_info(f"{len(result.remaining)} mount(s) still busy under {result.environment.name}.")

    if print_procs and result.blockers:
        console.print(
            create_process_table(
                list(result.blockers),
                title=f"Processes blocking {result.environment.name}",
            )
        )


def unmount_environments(
    ctx: typer.Context,
    names: Annotated[
        list[str] | None,
        typer.Argument(help="Environment names (or paths) to unmount."),
    ] = None,
    all_environments: Annotated[
        bool,
        typer.Option("--all", "-a", help="Unmount every environment in the chroots directory."),
    ] = False,
    chroots: Annotated[
        Path | None,
        typer.Option("--chroots", "-c", help="Directory holding the environments."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Unmount even if the environment is in use by another session.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Signal remaining processes without asking, escalating to SIGKILL.",
        ),
    ] = False,
    kill: Annotated[
        bool,
        typer.Option("--kill", "-k", help="Start with SIGKILL instead of SIGTERM."),
    ] = False,
    print_procs: Annotated[
        bool,
        typer.Option("--print", "-p", help="List the processes blocking an environment."),
    ] = False,
    retries: Annotated[
        int | None,
        typer.Option(
            "--retries",
            "-r",
            min=1,
            help="Failed unmount passes before signaling processes.",
        ),
    ] = None,
    patient: Annotated[
        bool,
        typer.Option("--patient", help="Never signal processes; keep retrying."),
    ] = False,
) -> None:
    """Unmount chroot environments.

    Environments in use by another session are skipped unless --force is
    given. If unmounting stalls, the processes inside the environment are
    signaled after confirmation (or automatically with --yes).

    Examples:
        chrootctl unmount focal             # Unmount one environment
        chrootctl unmount --all --yes       # Unmount everything, no prompts
        chrootctl unmount -p jammy          # Show what keeps jammy busy
    """
    quiet = bool((ctx.obj or {}).get("quiet", False))
    settings = _load_effective_settings(chroots, retries, patient)

    targets = list(names or [])
    if all_environments:
        targets.extend(n for n in list_environments(settings.chroots_dir) if n not in targets)
        if not targets:
            print_info(f"No environments found in {settings.chroots_dir}.")
            return
    if not targets:
        print_error("No environments given. Pass names or use --all.")
        raise typer.Exit(code=1)

    mount_table = MountTable()
    teardown = MountTeardown(mount_table)
    if not teardown.is_available():
        print_error("The mount and umount commands are required but were not found.")
        raise typer.Exit(code=1)

    detector = UsageDetector(ProcScanner(core_marker=settings.core_marker))
    orchestrator = TeardownOrchestrator(
        settings,
        detector,
        teardown,
        SignalSender(),
        _select_decider(yes),
        force=force,
        auto_confirm=yes,
        auto_escalate=yes,
        initial_signal=SignalStrength.FORCEFUL if kill else SignalStrength.GRACEFUL,
    )

    try:
        summary = orchestrator.run(targets, on_result=lambda r: _report(r, print_procs, quiet))
        orchestrator.release_symlink_override()
    except TeardownError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except OSError as e:
        # Only the policy file rewrite raises OSError here
        print_error(f"Could not release symlink exemption: {e}")
        raise typer.Exit(code=1) from e

    if not quiet:
        print_summary(summary)

    if summary.failed:
        raise typer.Exit(code=summary.exit_code)
