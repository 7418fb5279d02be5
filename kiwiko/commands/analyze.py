"""Analyze command implementation for kiwiko.

Reads a project's ``package.json`` and reports Node.js compatibility,
version conflicts between the project and its dependencies, available
updates, and installation hints.

The command orchestrates:

1. **ManifestReader**: loads and validates ``package.json``.
2. **NpmRegistryStore**: shared registry cache (one fetch per package),
   skipped entirely with ``--offline``.
3. **ProjectAnalyzer**: runs every check and builds the report.

Typical usage::

    # Analyze the project in the current directory
    $ kiwiko analyze

    # Machine-readable JSON output
    $ kiwiko analyze ./app --format json > report.json

    # No network access: only installed packages are inspected
    $ kiwiko analyze --offline
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from kiwiko.config import KiwikoConfig
from kiwiko.exceptions import KiwikoError
from kiwiko.models import AnalysisReport, ConflictRecord, PackageUpdate
from kiwiko.context import pass_context, KiwikoContext
from kiwiko.core import ManifestReader, NpmRegistryStore, ProjectAnalyzer
from kiwiko.utils import (
    HTTPClient,
    get_logger,
    print_success,
    print_error,
    print_warning,
    print_section,
    print_table,
    get_raw_console,
    colorize_update_type,
    format_flag,
)

logger = get_logger("commands.analyze")


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=True, dir_okay=True, path_type=Path),
    default=".",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--no-updates",
    is_flag=True,
    help="Do not query the registry for newer releases.",
)
@click.option(
    "--no-conflicts",
    is_flag=True,
    help="Skip version-conflict detection.",
)
@click.option(
    "--include-dev/--prod-only",
    default=None,
    help="Include devDependencies in conflict and update checks.",
)
@click.option(
    "--offline",
    is_flag=True,
    help="Never contact the registry (implies --no-updates).",
)
@click.option(
    "--node-version",
    metavar="VERSION",
    help="Check compatibility against this Node.js version instead of `node --version`.",
)
@pass_context
def analyze(
    ctx: KiwikoContext,
    directory: Path,
    format: str,
    no_updates: bool,
    no_conflicts: bool,
    include_dev: Optional[bool],
    offline: bool,
    node_version: Optional[str],
) -> None:
    """Analyze a Node.js project's package.json.

    DIRECTORY is the project directory or the manifest itself (default:
    current directory).

    Exits:
        0 if no problems were found, 1 if Node.js is incompatible, any
        version conflict exists, or an error occurred.
    """
    config = _effective_config(
        ctx.get_config(),
        no_updates=no_updates or offline,
        no_conflicts=no_conflicts,
        include_dev=include_dev,
    )

    try:
        report = asyncio.run(
            _analyze_async(directory, config, offline=offline, node_version=node_version)
        )
    except KiwikoError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in analyze command")
        sys.exit(1)

    format = format.lower()
    if format == "json":
        _display_json(report)
    elif format == "simple":
        _display_simple(report)
    else:
        _display_table(report)

    sys.exit(1 if report.has_problems() else 0)


def _effective_config(
    config: KiwikoConfig,
    *,
    no_updates: bool,
    no_conflicts: bool,
    include_dev: Optional[bool],
) -> KiwikoConfig:
    """Apply CLI flags on top of the file configuration."""
    return KiwikoConfig(
        check_conflicts=config.check_conflicts and not no_conflicts,
        check_updates=config.check_updates and not no_updates,
        include_dev=config.include_dev if include_dev is None else include_dev,
        registry_url=config.registry_url,
        probe_major_limit=config.probe_major_limit,
        probe_minor_limit=config.probe_minor_limit,
        probe_patch_limit=config.probe_patch_limit,
        source_path=config.source_path,
    )


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _analyze_async(
    directory: Path,
    config: KiwikoConfig,
    *,
    offline: bool,
    node_version: Optional[str],
) -> AnalysisReport:
    """Read the manifest and run :class:`ProjectAnalyzer` on it.

    Raises:
        KiwikoError: The manifest is missing or invalid.
    """
    manifest = ManifestReader().read(directory)
    logger.info("Analyzing %s (%s)", manifest, manifest.source_path)

    if offline:
        analyzer = ProjectAnalyzer.from_config(config)
        return await analyzer.analyze(manifest, node_version=node_version)

    async with HTTPClient() as http:
        store = NpmRegistryStore(http, registry_url=config.registry_url)
        analyzer = ProjectAnalyzer.from_config(config, data_store=store)
        return await analyzer.analyze(manifest, node_version=node_version)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_table(report: AnalysisReport) -> None:
    """Render the report as Rich tables and sections."""
    console = get_raw_console()
    console.print(f"\n[bold]kiwiko report for {report.project}[/bold]")

    node = report.node
    print_table(
        [
            {
                "Required": node.required_range,
                "Current": node.current_version or "[dim]unknown[/dim]",
                "Compatible": format_flag(node.is_compatible),
            }
        ],
        title="Node.js Compatibility",
        column_styles={"Compatible": {"justify": "center"}},
    )
    if node.recommendation:
        print_warning(node.recommendation)

    if report.conflicts:
        print_table(
            [_conflict_row(record) for record in report.conflicts],
            title="Version Conflicts",
            column_styles={
                "Package": {"style": "bold cyan", "no_wrap": True},
                "Declared": {"justify": "center"},
                "Required By": {"no_wrap": False},
                "Recommended": {"justify": "center", "style": "bright_cyan"},
            },
            show_row_lines=True,
        )
    else:
        print_success("No version conflicts found")

    if report.updates:
        print_table(
            [_update_row(update) for update in report.updates],
            title="Available Updates",
            column_styles=_UPDATE_COLUMN_STYLES,
            show_row_lines=True,
        )
    else:
        print_success("All dependencies are up to date")

    print_section("Optimization suggestions", report.optimizations)
    _print_summary(report)


_UPDATE_COLUMN_STYLES: Dict[str, Dict[str, Any]] = {
    "Package": {"style": "bold cyan", "no_wrap": True},
    "Current": {"justify": "center", "style": "dim"},
    "Latest": {"justify": "center", "style": "bold green"},
    "Update Type": {"justify": "center"},
    "Safe": {"justify": "center"},
    "Notes": {"no_wrap": False},
}


def _conflict_row(record: ConflictRecord) -> Dict[str, str]:
    return {
        "Package": record.package,
        "Declared": record.top_level_range,
        "Required By": "\n".join(
            f"[red]⚠[/red] {d.declarer} needs {d.required_range}"
            for d in record.conflicting_declarers
        ),
        "Recommended": record.recommended_version or "[red]none[/red]",
    }


def _update_row(update: PackageUpdate) -> Dict[str, str]:
    return {
        "Package": update.package,
        "Current": update.current_version,
        "Latest": update.available_version,
        "Update Type": colorize_update_type(update.update_type),
        "Safe": format_flag(update.is_safe),
        "Notes": "\n".join(update.changes) or "[dim]-[/dim]",
    }


def _display_simple(report: AnalysisReport) -> None:
    """Render the report as plain lines, one finding per line."""
    console = get_raw_console()
    node = report.node

    status = "OK" if node.is_compatible else "INCOMPATIBLE"
    console.print(
        f"[{status}] node {node.current_version or 'unknown'} (requires {node.required_range})"
    )
    if node.recommendation:
        console.print(f"       {node.recommendation}")

    for record in report.conflicts:
        console.print(f"[CONFLICT] {record.to_display_string()}")

    for update in report.updates:
        tag = "SAFE" if update.is_safe else update.update_type.upper()
        console.print(
            f"[{tag}] {update.package:20} {update.current_version:10} → {update.available_version}"
        )

    for suggestion in report.optimizations:
        console.print(f"[HINT] {suggestion}")


def _display_json(report: AnalysisReport) -> None:
    """Render the report as formatted JSON for machine consumption."""
    click.echo(json.dumps(report.to_json(), indent=2))


def _print_summary(report: AnalysisReport) -> None:
    lines: List[str] = [
        f"Node.js: {format_flag(report.node.is_compatible, yes='compatible', no='incompatible')}",
        f"Conflicts: {len(report.conflicts)}",
        f"Updates available: {len(report.updates)}",
        f"Suggestions: {len(report.optimizations)}",
    ]
    print_section("Summary", lines)

    if report.has_problems():
        print_warning("\nProblems found; see above for details")
    else:
        print_success("\nNo problems found")
