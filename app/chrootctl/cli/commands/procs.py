"""Procs command implementation.

Lists the processes running inside an environment and whether each one
keeps it in use.
"""

from typing import Annotated

import typer

from chrootctl.cli.display import create_process_table
from chrootctl.core.environments import resolve_environment
from chrootctl.core.errors import TeardownError
from chrootctl.core.settings import SettingsError, load_settings
from chrootctl.core.usage import UsageDetector
from chrootctl.scanners.process import ProcScanner
from chrootctl.utils.formatting import console, print_error, print_success


def list_procs(
    name: Annotated[str, typer.Argument(help="Environment name (or path).")],
) -> None:
    """List processes running inside an environment.

    Core helpers are shown muted; they never block teardown on their own
    but are still signaled when unmounting stalls.
    """
    try:
        settings = load_settings()
    except SettingsError as e:
        print_error(f"Failed to load settings: {e}")
        raise typer.Exit(code=1) from e

    environment = resolve_environment(name, settings)
    if environment is None:
        print_error(f"Environment not found: {name}")
        raise typer.Exit(code=1)

    detector = UsageDetector(ProcScanner(core_marker=settings.core_marker))
    try:
        processes = detector.list_processes(environment.mount_root)
        report = detector.is_in_use(environment.mount_root)
    except TeardownError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not processes:
        print_success(f"No processes running in {environment.name}.")
        return

    console.print(create_process_table(processes, title=f"Processes in {environment.name}"))
    state = "[warning]in use[/warning]" if report.in_use else "[success]not in use[/success]"
    console.print(
        f"\n[dim]{len(processes)} process(es), {len(report.blockers)} blocking:[/dim] {state}"
    )
