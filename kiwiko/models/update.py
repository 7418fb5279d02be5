"""
Update advisory model for kiwiko.

A :class:`PackageUpdate` describes a newer upstream release of a declared
dependency together with a safety verdict and human-readable notes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from kiwiko.utils.version_utils import get_update_type


@dataclass
class PackageUpdate:
    """
    An available update for one dependency.

    Attributes:
        package: Package name.
        current_version: Version derived from the declared range.
        available_version: Latest version published on the registry.
        is_safe: True when the update stays within the same major.minor.
        changes: Notes describing the update, headline first.
    """

    package: str
    current_version: str
    available_version: str
    is_safe: bool = False
    changes: List[str] = field(default_factory=list)

    @property
    def update_type(self) -> str:
        """Semantic classification of the version delta."""
        return get_update_type(self.current_version, self.available_version)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "package": self.package,
            "current_version": self.current_version,
            "available_version": self.available_version,
            "update_type": self.update_type,
            "is_safe": self.is_safe,
            "changes": list(self.changes),
        }

    def __str__(self) -> str:
        return f"{self.package}: {self.current_version} → {self.available_version}"
