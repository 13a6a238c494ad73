"""Utility modules for gpobackup.

This module exports commonly used utility functions.
"""

from gpobackup.utils.formatting import (
    console,
    create_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from gpobackup.utils.shell import (
    CommandResult,
    find_powershell,
    powershell_command,
    quote_powershell,
    run_command,
)

__all__ = [
    "CommandResult",
    "console",
    "create_table",
    "err_console",
    "find_powershell",
    "powershell_command",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "quote_powershell",
    "run_command",
]
