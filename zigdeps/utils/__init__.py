"""
Utility helpers for zigdeps.

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from zigdeps.utils.filesystem import (
    ensure_directory,
    exceeds_size_limit,
    file_size,
    probe_files,
    safe_read_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from zigdeps.utils.logger import (
    get_logger,
    setup_logging,
    verbosity_to_level,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from zigdeps.utils.console import (
    print_error,
    print_success,
    print_table,
    print_tree,
    print_warning,
    reconfigure_console,
)

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_tree",
    "print_success",
    "print_warning",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "verbosity_to_level",
    # Filesystem
    "ensure_directory",
    "exceeds_size_limit",
    "file_size",
    "probe_files",
    "safe_read_file",
]
