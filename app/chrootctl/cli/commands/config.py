"""Config command implementation.

Shows the effective teardown settings and writes a default settings file.
"""

from typing import Annotated

import tomli_w
import typer

from chrootctl.core.paths import get_settings_path
from chrootctl.core.settings import (
    SettingsError,
    TeardownSettings,
    load_settings,
    save_settings,
    settings_to_dict,
)
from chrootctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize teardown settings.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective settings as TOML."""
    try:
        settings = load_settings()
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    path = get_settings_path()
    source = str(path) if path.exists() else "built-in defaults"
    console.print(f"[dim]# from {source}[/dim]")
    console.print(tomli_w.dumps(settings_to_dict(settings)), markup=False, highlight=False)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file with the default values."""
    path = get_settings_path()
    if path.exists() and not force:
        print_error(f"Settings file already exists: {path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_settings(TeardownSettings(), path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Wrote default settings to {saved}")
