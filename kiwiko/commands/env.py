"""Env command implementation for kiwiko.

Sets up a project-local Node.js toolchain with `Volta <https://volta.sh>`_:

1. Check whether ``volta`` is available (``volta --version``).
2. If it is not, offer to install it with ``npm install -g volta``.
3. Pin the project to a Node.js version (``volta pin node@<version>``).
4. Install the project's dependencies (``npm install``).

The Node.js version defaults to the lowest release satisfying the
manifest's ``engines.node`` range and can be overridden with ``--node``.

Typical usage::

    # Pin the minimum supported Node.js and install dependencies
    $ kiwiko env

    # Pin a specific version without prompting
    $ kiwiko env ./app --node 20.11.1 --yes

    # Show the commands that would run
    $ kiwiko env --dry-run
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import click

from kiwiko.exceptions import KiwikoError
from kiwiko.core import ManifestReader
from kiwiko.core.node_compat import minimum_node_version
from kiwiko.context import pass_context, KiwikoContext
from kiwiko.utils import (
    CommandResult,
    confirm,
    get_logger,
    get_raw_console,
    parse_version,
    print_error,
    print_info,
    print_success,
    print_warning,
    run_command,
)

logger = get_logger("commands.env")

VOLTA_VERSION_COMMAND = ["volta", "--version"]
VOLTA_INSTALL_COMMAND = ["npm", "install", "-g", "volta"]
NPM_INSTALL_COMMAND = ["npm", "install"]


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=".",
)
@click.option(
    "--node",
    "node_version",
    metavar="VERSION",
    help="Node.js version to pin (default: minimum satisfying engines.node).",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Install Volta without asking if it is missing.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the commands instead of running them.",
)
@pass_context
def env(
    ctx: KiwikoContext,
    directory: Path,
    node_version: Optional[str],
    yes: bool,
    dry_run: bool,
) -> None:
    """Pin Node.js for the project with Volta and install dependencies.

    DIRECTORY is the project directory (default: current directory).

    Exits:
        0 when the environment was set up (or the dry run printed), 1 on
        any failure or when the user declines to install Volta.
    """
    try:
        version = _resolve_node_version(directory, node_version)
    except KiwikoError as e:
        print_error(f"{e}")
        sys.exit(1)

    plan = _build_plan(version)

    if dry_run:
        console = get_raw_console()
        console.print("[bold]Commands that would run:[/bold]")
        for command in plan:
            console.print(f"  $ {' '.join(command)}")
        sys.exit(0)

    if not _ensure_volta(skip_confirm=yes):
        sys.exit(1)

    for command in plan:
        result = _run_step(command, directory)
        if not result.success:
            print_error(f"'{' '.join(command)}' failed: {_failure_reason(result)}")
            sys.exit(1)

    print_success(f"Environment ready: Node.js {version} pinned with Volta")
    print_info("Open a new terminal for the pinned toolchain to take effect.")
    sys.exit(0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_node_version(directory: Path, override: Optional[str]) -> str:
    """Pick the Node.js version to pin.

    Raises:
        KiwikoError: *override* is not a version, or no version can be
            derived from the manifest.
    """
    if override:
        parsed = parse_version(override)
        if parsed is None:
            raise KiwikoError(f"Invalid Node.js version: {override!r}")
        return str(parsed)

    manifest = ManifestReader().read(directory)
    required = manifest.required_node_version()
    if required is None:
        raise KiwikoError(
            "package.json declares no engines.node; pass --node to choose a version",
            {"manifest": manifest.source_path},
        )

    minimum = minimum_node_version(required)
    if minimum is None:
        raise KiwikoError(
            f"No Node.js version satisfies engines.node {required!r}",
            {"manifest": manifest.source_path},
        )

    logger.info("Using Node.js %s (minimum for %s)", minimum, required)
    return minimum


def _build_plan(version: str) -> List[List[str]]:
    return [
        ["volta", "pin", f"node@{version}"],
        list(NPM_INSTALL_COMMAND),
    ]


def _ensure_volta(*, skip_confirm: bool) -> bool:
    """Return True once Volta is available, installing it if allowed."""
    detected = run_command(VOLTA_VERSION_COMMAND)
    if detected.success:
        logger.info("Volta %s is installed", detected.stdout)
        return True

    print_warning("Volta is not installed")
    if not skip_confirm and not confirm(
        "Install Volta to manage this project's Node.js version?"
    ):
        print_info("Skipping. Volta can be installed manually from https://volta.sh")
        return False

    installed = run_command(VOLTA_INSTALL_COMMAND)
    if not installed.success:
        print_error(f"Failed to install Volta: {_failure_reason(installed)}")
        return False

    print_success("Volta installed")
    return True


def _run_step(command: List[str], directory: Path) -> CommandResult:
    logger.info("Running: %s", " ".join(command))
    return run_command(command, cwd=directory)


def _failure_reason(result: CommandResult) -> str:
    return result.error or result.stderr or f"exit status {result.returncode}"
