"""CLI package for chrootctl.

This package contains the Typer application and all subcommands.
"""

from chrootctl.cli.main import app

__all__ = ["app"]
