"""
Utility helpers for kiwiko.

This package provides reusable utilities used across kiwiko, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Manifest-aware filesystem helpers
- Async HTTP client utilities
- Subprocess execution for the Node.js toolchain
- Version parsing and comparison helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from kiwiko.utils.filesystem import (
    find_manifest,
    installed_manifest_path,
    read_json_file,
    safe_read_file,
    validate_path,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from kiwiko.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from kiwiko.utils.console import (
    colorize_update_type,
    confirm,
    format_flag,
    get_raw_console,
    print_error,
    print_info,
    print_section,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from kiwiko.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Process utilities
# ---------------------------------------------------------------------------

from kiwiko.utils.process import CommandResult, run_command

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from kiwiko.utils.version_utils import get_update_type, is_safe_update, parse_version

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "confirm",
    "format_flag",
    "print_error",
    "print_info",
    "print_section",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "verbosity_to_level",
    # Filesystem
    "find_manifest",
    "installed_manifest_path",
    "read_json_file",
    "safe_read_file",
    "validate_path",
    # HTTP
    "HTTPClient",
    # Process
    "CommandResult",
    "run_command",
    # Version utilities
    "get_update_type",
    "is_safe_update",
    "parse_version",
]
