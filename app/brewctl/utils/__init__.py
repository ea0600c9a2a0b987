"""Utility modules for brewctl.

This module exports commonly used utility functions.
"""

from brewctl.utils.formatting import (
    console,
    err_console,
    format_list,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from brewctl.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_list",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
