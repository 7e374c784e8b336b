"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from chrootctl import __version__
from chrootctl.cli.commands import config, procs, unmount
from chrootctl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="chrootctl",
    help="Safe teardown of bind-mounted chroot environments.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"chrootctl version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route log records to stderr through Rich when verbose."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """chrootctl - Safe teardown of bind-mounted chroot environments.

    Checks whether an environment is still in use, unmounts its tree,
    and signals the processes holding it open when unmounting stalls.
    """
    _configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="unmount")(unmount.unmount_environments)
app.command(name="procs")(procs.list_procs)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
