"""
kiwiko: Node.js project dependency analyzer

kiwiko inspects a Node.js project's ``package.json`` and reports on the
health of its dependency declarations.

Features include:
    • Node.js engine compatibility checks
    • Version-range conflict detection between declarers
    • Upstream update discovery from the npm registry
    • Installation optimization hints
    • Volta-managed environment setup

The range engine is importable on its own::

    >>> from kiwiko import compatible, find_conflicts, is_safe_update
    >>> compatible("^1.0.0", "^1.2.0")
    True
"""

from __future__ import annotations

from kiwiko.__version__ import __version__
from kiwiko.core.ranges import compatible
from kiwiko.core.conflict_analyzer import find_conflicts
from kiwiko.utils.version_utils import is_safe_update

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "kiwiko Contributors"
__license__ = "MIT"
__description__ = "Compatibility, conflict and update analysis for Node.js projects."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
    "compatible",
    "find_conflicts",
    "is_safe_update",
]
