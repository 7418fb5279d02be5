"""
Executable module for kiwiko.

Running:
    python -m kiwiko

is equivalent to:
    kiwiko

This module simply forwards execution to the CLI entrypoint defined in
`kiwiko.cli`.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Write diagnostics for a CLI import failure to stderr."""
    sys.stderr.write("kiwiko CLI could not be loaded.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from kiwiko.__version__ import __version__

        sys.stderr.write(f"kiwiko version: {__version__}\n")
    except ImportError:
        sys.stderr.write("kiwiko version: <unknown>\n")
    sys.stderr.write("\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """
    Main entrypoint when executing `python -m kiwiko`.

    Returns:
        Exit code returned by the CLI.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from kiwiko.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
