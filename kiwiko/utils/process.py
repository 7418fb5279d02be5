"""
Subprocess helpers for kiwiko.

Thin wrapper around :func:`subprocess.run` used to query and drive the
external Node.js toolchain (``node``, ``npm``, ``volta``).  Commands never
go through a shell.  Failures to start a program are reported in the
returned :class:`CommandResult` instead of raising, so callers can treat
"tool not installed" as an ordinary outcome.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from kiwiko.utils.logger import get_logger

logger = get_logger("process")

#: Default timeout (seconds) for external commands.
DEFAULT_COMMAND_TIMEOUT: float = 300.0


@dataclass(frozen=True)
class CommandResult:
    """Outcome of an external command.

    Attributes:
        success: ``True`` when the process ran and exited with status 0.
        stdout: Captured standard output, stripped.
        stderr: Captured standard error, stripped.
        returncode: Exit status, or ``None`` if the process never started.
        error: Description of a launch failure or timeout.
    """

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: Optional[int] = None
    error: Optional[str] = None


def run_command(
    command: Union[str, Sequence[str]],
    *,
    cwd: Optional[Union[str, Path]] = None,
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
) -> CommandResult:
    """Run *command* and capture its output.

    Args:
        command: Either an argument list or a command line that is split
            with :func:`shlex.split`.
        cwd: Working directory for the process.
        timeout: Seconds to wait before the process is killed.

    Returns:
        A :class:`CommandResult`; never raises for missing programs,
        non-zero exits or timeouts.

    Example::

        >>> result = run_command("node --version")
        >>> result.success, result.stdout
        (True, 'v20.11.1')
    """
    argv = shlex.split(command) if isinstance(command, str) else list(command)
    if not argv:
        return CommandResult(success=False, error="empty command")

    logger.debug("Running %s (cwd=%s)", " ".join(argv), cwd or ".")

    try:
        completed = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        logger.debug("Program not found: %s", argv[0])
        return CommandResult(success=False, error=str(exc))
    except subprocess.TimeoutExpired as exc:
        logger.warning("Command timed out after %.0fs: %s", timeout, " ".join(argv))
        return CommandResult(success=False, error=f"timed out: {exc}")
    except OSError as exc:
        logger.warning("Failed to start %s: %s", argv[0], exc)
        return CommandResult(success=False, error=str(exc))

    return CommandResult(
        success=completed.returncode == 0,
        stdout=(completed.stdout or "").strip(),
        stderr=(completed.stderr or "").strip(),
        returncode=completed.returncode,
    )
