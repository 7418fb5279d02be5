"""
Console output utilities for kiwiko using Rich.

Everything a command shows the user goes through this module; diagnostics
belong in :mod:`kiwiko.utils.logger` and end up on stderr instead.

- print_* functions: one-line status messages with an ``[OK]``-style prefix
- print_table / print_section: report blocks for ``kiwiko analyze``
- confirm: yes/no prompts for ``kiwiko env``
- colorize_update_type / format_flag: markup snippets for table cells
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

KIWIKO_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
        "section": "bold underline",
    }
)

#: Markup color per update classification from ``get_update_type``.
UPDATE_TYPE_COLORS: Mapping[str, str] = {
    "major": "red",
    "minor": "yellow",
    "patch": "green",
    "new": "cyan",
    "downgrade": "red",
    "update": "yellow",
    "same": "dim",
}

_YES_ANSWERS = ("y", "yes", "s", "si")
_NO_ANSWERS = ("n", "no")

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Color only on an interactive terminal outside CI, unless NO_COLOR is set."""
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=KIWIKO_THEME,
                    no_color=not use_color,
                    highlight=use_color,
                )
    return _console


def reconfigure_console() -> None:
    """Drop the cached console so the next call re-reads ``NO_COLOR``."""
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the shared Rich console for free-form output."""
    return _get_console()


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def _print_status(prefix: str, message: str, style: str) -> None:
    _get_console().print(f"{prefix} {message}", style=style)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _print_status(prefix, message, "success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _print_status(prefix, message, "error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _print_status(prefix, message, "warning")


def print_info(message: str, *, prefix: str = "[INFO]") -> None:
    _print_status(prefix, message, "info")


# ---------------------------------------------------------------------------
# Report blocks
# ---------------------------------------------------------------------------


def print_section(title: str, lines: Iterable[str], *, empty: str = "None") -> None:
    """Print a titled block of bullet lines.

    Args:
        title: Section heading.
        lines: Rich-markup lines to print under the heading.
        empty: Text shown (dimmed) when *lines* is empty.
    """
    console = _get_console()
    console.print(f"\n{title}", style="section")

    items = list(lines)
    if not items:
        console.print(f"  [dim]{empty}[/dim]")
        return

    for line in items:
        console.print(f"  • {line}")


def print_table(
    rows: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    show_row_lines: bool = False,
) -> None:
    """Render report rows as a Rich table.

    Nothing is printed for an empty *rows* list.

    Args:
        rows: One dictionary per row, keyed by column header.
        headers: Column order; defaults to the keys of the first row.
            Missing cells render empty.
        title: Table title.
        column_styles: Per-column ``style``, ``justify``, ``no_wrap``,
            ``width`` and ``overflow`` settings.
        show_row_lines: Draw separators between rows.
    """
    if not rows:
        return

    columns = headers if headers is not None else list(rows[0])
    styles = column_styles or {}

    table = Table(
        title=title,
        show_header=True,
        header_style="bold",
        show_lines=show_row_lines,
    )
    for column in columns:
        settings = styles.get(column, {})
        table.add_column(
            column,
            style=settings.get("style"),
            justify=settings.get("justify", "default"),
            no_wrap=settings.get("no_wrap", False),
            width=settings.get("width"),
            overflow=settings.get("overflow", "fold"),
        )

    for row in rows:
        table.add_row(*(str(row.get(column, "")) for column in columns))

    _get_console().print(table)


# ---------------------------------------------------------------------------
# User interaction
# ---------------------------------------------------------------------------


def confirm(message: str, *, default: bool = False) -> bool:
    """Prompt the user for a yes/no confirmation.

    Accepts ``y``/``yes``/``s``/``si`` as yes and ``n``/``no`` as no.
    Empty or unrecognized input returns *default*; Ctrl+C or EOF returns
    ``False``.
    """
    console = _get_console()
    suffix = " [Y/n]: " if default else " [y/N]: "
    console.print(f"{message}{suffix}", end="", style="info")

    try:
        response = input().strip().lower()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False

    if response in _YES_ANSWERS:
        return True
    if response in _NO_ANSWERS:
        return False
    return default


# ---------------------------------------------------------------------------
# Markup helpers
# ---------------------------------------------------------------------------


def colorize_update_type(update_type: str) -> str:
    """Wrap *update_type* in its color markup; unknown labels pass through."""
    color = UPDATE_TYPE_COLORS.get(update_type.lower())
    return f"[{color}]{update_type}[/{color}]" if color else update_type


def format_flag(ok: bool, *, yes: str = "✓", no: str = "✗") -> str:
    """Return a green *yes* or red *no* marker."""
    return f"[green]{yes}[/green]" if ok else f"[red]{no}[/red]"
