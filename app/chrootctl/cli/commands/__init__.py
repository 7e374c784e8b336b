"""CLI commands for chrootctl.

This package contains all subcommand implementations.
"""

from chrootctl.cli.commands import config, procs, unmount

__all__ = ["config", "procs", "unmount"]
