"""Utility modules for cleanctl.

This module exports commonly used utility functions.
"""

from cleanctl.utils.formatting import (
    console,
    create_file_table,
    create_tree,
    err_console,
    format_bytes,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_file_table",
    "create_tree",
    "err_console",
    "format_bytes",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
