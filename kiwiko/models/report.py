"""
Analysis report models for kiwiko.

This module defines the Node.js compatibility verdict and the aggregate
report returned by :class:`kiwiko.core.analyzer.ProjectAnalyzer`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from kiwiko.models.conflict import ConflictRecord
from kiwiko.models.update import PackageUpdate


@dataclass(frozen=True)
class NodeCompatibility:
    """
    Whether the running Node.js satisfies the project's ``engines.node``.

    Attributes:
        required_range: Required range (``*`` when none is declared).
        current_version: Node.js version checked, or None if unknown.
        is_compatible: Verdict.
        recommendation: Advice when incompatible.
    """

    required_range: str
    current_version: Optional[str]
    is_compatible: bool
    recommendation: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "required": self.required_range,
            "current": self.current_version,
            "compatible": self.is_compatible,
            "recommendation": self.recommendation,
        }


@dataclass
class AnalysisReport:
    """
    Everything kiwiko found out about one project.

    Attributes:
        project: ``name@version`` of the analyzed manifest.
        node: Node.js compatibility verdict.
        conflicts: Version conflicts, in top-level declaration order.
        updates: Available updates, in declaration order.
        optimizations: Installation hints and obsolete-package notices.
    """

    project: str
    node: NodeCompatibility
    conflicts: List[ConflictRecord] = field(default_factory=list)
    updates: List[PackageUpdate] = field(default_factory=list)
    optimizations: List[str] = field(default_factory=list)

    def has_problems(self) -> bool:
        """True when Node.js is incompatible or any conflict was found."""
        return not self.node.is_compatible or bool(self.conflicts)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "project": self.project,
            "nodeCompatibility": self.node.to_json(),
            "conflicts": [c.to_json() for c in self.conflicts],
            "updates": [u.to_json() for u in self.updates],
            "optimizations": list(self.optimizations),
        }
