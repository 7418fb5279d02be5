"""
Command-line interface for kiwiko.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from kiwiko.config import load_config
from kiwiko.__version__ import __version__
from kiwiko.context import KiwikoContext
from kiwiko.exceptions import ConfigError, KiwikoError
from kiwiko.utils.logger import get_logger, setup_logging, verbosity_to_level
from kiwiko.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="KIWIKO_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="KIWIKO_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="kiwiko",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """kiwiko: compatibility, conflict and update analysis for Node.js projects.

    \b
    Available commands:
      kiwiko analyze               Analyze a project's package.json
      kiwiko env                   Pin Node.js for the project with Volta

    \b
    Examples:
      kiwiko analyze
      kiwiko analyze ./my-app --format json
      kiwiko -v env --dry-run

    Use ``kiwiko COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for the console and log formatter
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    kiwiko_ctx = KiwikoContext()
    kiwiko_ctx.config_path = config or loaded_config.source_path
    kiwiko_ctx.color = color
    kiwiko_ctx.verbose = verbose
    kiwiko_ctx.config = loaded_config
    ctx.obj = kiwiko_ctx

    logger.debug("kiwiko v%s", __version__)
    logger.debug("Config path: %s", kiwiko_ctx.config_path)
    if loaded_config.source_path:
        logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
from kiwiko.commands.analyze import analyze  # noqa: E402
from kiwiko.commands.env import env  # noqa: E402

cli.add_command(analyze)
cli.add_command(env)


def main() -> int:
    """Main entry point for the kiwiko CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error, or problems found
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        result = cli(standalone_mode=False)
        return result if isinstance(result, int) else 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except KiwikoError as exc:
        print_error(str(exc))
        logger.debug(
            "KiwikoError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
