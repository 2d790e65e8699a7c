"""Utility modules for dotsync.

This module exports commonly used utility functions.
"""

from dotsync.utils.formatting import (
    console,
    err_console,
    print_dry_run,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from dotsync.utils.shell import CommandResult, command_exists, run_command, run_selector

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "print_dry_run",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "run_selector",
]
