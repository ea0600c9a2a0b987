"""CLI commands for brewctl.

This package contains all subcommand implementations.
"""

from brewctl.cli.commands import brewfile, check, config, maintenance, watch

__all__ = ["brewfile", "check", "config", "maintenance", "watch"]
