"""
Version-conflict data models for kiwiko.

This module defines the records produced by the conflict analyzer when a
package's top-level range cannot be reconciled with the ranges other
packages declare for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple


@dataclass(frozen=True)
class ConflictingDeclarer:
    """A package whose declared range clashes with the top-level one.

    Args:
        declarer: Name of the package declaring the dependency.
        required_range: Range the declarer requires.
    """

    declarer: str
    required_range: str

    def to_display_string(self) -> str:
        """Return a human-readable description of the requirement."""
        return f"{self.declarer} requires {self.required_range}"

    def to_json(self) -> Dict[str, str]:
        """Return a JSON-serializable representation."""
        return {
            "declarer": self.declarer,
            "required_range": self.required_range,
        }

    def __str__(self) -> str:
        return self.to_display_string()


@dataclass(frozen=True)
class ConflictRecord:
    """All conflicting requirements found for one package.

    Args:
        package: Name of the affected package.
        top_level_range: Range declared in the project manifest.
        conflicting_declarers: Declarers whose ranges do not intersect
            *top_level_range*, in the order they were examined.
        recommended_version: Highest version satisfying every involved
            range, or ``None`` when no such version was found.
    """

    package: str
    top_level_range: str
    conflicting_declarers: Tuple[ConflictingDeclarer, ...] = ()
    recommended_version: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "conflicting_declarers", tuple(self.conflicting_declarers)
        )

    @property
    def has_solution(self) -> bool:
        """True when a version satisfying every range was found."""
        return self.recommended_version is not None

    @property
    def ranges(self) -> Tuple[str, ...]:
        """Top-level range followed by every conflicting range."""
        return (self.top_level_range,) + tuple(
            d.required_range for d in self.conflicting_declarers
        )

    def to_display_string(self) -> str:
        """Return a one-line summary of the conflict."""
        declarers = ", ".join(str(d) for d in self.conflicting_declarers)
        summary = f"{self.package}@{self.top_level_range} conflicts with {declarers}"
        if self.recommended_version:
            return f"{summary}; recommended {self.recommended_version}"
        return f"{summary}; no common version found"

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "package": self.package,
            "top_level_range": self.top_level_range,
            "conflicting_declarers": [d.to_json() for d in self.conflicting_declarers],
            "recommended_version": self.recommended_version,
        }

    def __str__(self) -> str:
        return self.to_display_string()

    def __len__(self) -> int:
        return len(self.conflicting_declarers)

    def __iter__(self) -> Iterator[ConflictingDeclarer]:
        return iter(self.conflicting_declarers)
