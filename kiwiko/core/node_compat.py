"""Node.js engine compatibility checks for kiwiko.

Compares the Node.js version in use against the project's
``engines.node`` range and, when they disagree, suggests what to do.
"""

from __future__ import annotations

from typing import Optional

from kiwiko.utils.logger import get_logger
from kiwiko.utils.process import run_command
from kiwiko.utils.version_utils import parse_version
from kiwiko.models.report import NodeCompatibility
from kiwiko.core.ranges import ProbeBounds, RangeCompatibilityChecker, parse_range, satisfies
from kiwiko.constants import (
    NODE_PROBE_MAJOR_LIMIT,
    NODE_PROBE_MINOR_LIMIT,
    NODE_PROBE_PATCH_LIMIT,
)

logger = get_logger("node_compat")

__all__ = ["analyze_node_compatibility", "detect_node_version", "minimum_node_version"]

NODE_PROBE_BOUNDS = ProbeBounds(
    NODE_PROBE_MAJOR_LIMIT,
    NODE_PROBE_MINOR_LIMIT,
    NODE_PROBE_PATCH_LIMIT,
)

_node_checker = RangeCompatibilityChecker(NODE_PROBE_BOUNDS)


def minimum_node_version(required: str) -> Optional[str]:
    """Return the lowest Node.js release satisfying *required*.

    Example::

        >>> minimum_node_version(">=18.17.0")
        '18.17.0'
        >>> minimum_node_version("^16.0.0 || ^18.0.0")
        '16.0.0'
    """
    found = _node_checker.min_satisfying([required])
    return str(found) if found is not None else None


def analyze_node_compatibility(
    required: Optional[str],
    current: Optional[str],
) -> NodeCompatibility:
    """Check *current* Node.js against the *required* range.

    Args:
        required: The manifest's ``engines.node`` range, if any.
        current: Node.js version in use (``"v20.11.1"`` or ``"20.11.1"``),
            or ``None`` when it could not be determined.

    Returns:
        A :class:`NodeCompatibility` verdict.  With no requirement the
        project is compatible with any Node.js (``"*"``).
    """
    if not required or not required.strip():
        return NodeCompatibility(
            required_range="*",
            current_version=current,
            is_compatible=True,
        )

    required = required.strip()

    if current is None:
        return NodeCompatibility(
            required_range=required,
            current_version=None,
            is_compatible=False,
            recommendation=f"Node.js was not found; install a version matching {required}",
        )

    if satisfies(current, required):
        return NodeCompatibility(
            required_range=required,
            current_version=current,
            is_compatible=True,
        )

    recommendation = f"Use a Node.js version matching {required}"
    if parse_range(required) is not None:
        minimum = minimum_node_version(required)
        current_parsed = parse_version(current)
        minimum_parsed = parse_version(minimum)
        if current_parsed is not None and minimum_parsed is not None:
            if current_parsed < minimum_parsed:
                recommendation = f"Upgrade Node.js to {minimum} or newer"
    else:
        logger.warning("Invalid engines.node range: %r", required)

    return NodeCompatibility(
        required_range=required,
        current_version=current,
        is_compatible=False,
        recommendation=recommendation,
    )


def detect_node_version() -> Optional[str]:
    """Return the installed Node.js version without its ``v`` prefix.

    Returns:
        A version string such as ``"20.11.1"``, or ``None`` when ``node``
        is not on ``PATH`` or prints something unexpected.
    """
    result = run_command(["node", "--version"], timeout=15)
    if not result.success:
        logger.debug("node --version failed: %s", result.error or result.stderr)
        return None

    parsed = parse_version(result.stdout)
    if parsed is None:
        logger.debug("Unrecognized node --version output: %r", result.stdout)
        return None
    return str(parsed)
