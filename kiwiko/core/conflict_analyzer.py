"""Version-conflict detection across dependency declarers for kiwiko.

Given the project's own (top-level) ranges and the ranges that each
installed package declares for its dependencies, this module reports every
package whose top-level range cannot be reconciled with at least one
declarer, and proposes a concrete version that satisfies all of them.

The analysis is a pure function of its inputs.  It performs no I/O, never
raises on malformed ranges (they simply count as incompatible), and its
output order is fully determined by the input mappings:

* records follow the insertion order of *top_level*;
* declarers inside a record follow the insertion order of *nested*.

Typical usage::

    >>> records = find_conflicts(
    ...     {"a": "^1.0.0"},
    ...     {"dep1": {"a": "^2.0.0"}},
    ... )
    >>> records[0].conflicting_declarers[0].declarer
    'dep1'
    >>> records[0].recommended_version is None
    True
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Set

from kiwiko.utils.logger import get_logger
from kiwiko.core.ranges import DEFAULT_PROBE_BOUNDS, ProbeBounds, RangeCompatibilityChecker
from kiwiko.models.conflict import ConflictingDeclarer, ConflictRecord

logger = get_logger("conflict_analyzer")

# Public API
__all__ = ["ConflictAnalyzer", "find_conflicts"]

NestedDeclarations = Mapping[str, Mapping[str, str]]


class ConflictAnalyzer:
    """Find packages whose ranges are inconsistent across declarers.

    Args:
        checker: Range checker used for both the pairwise compatibility
            test and the recommendation search.  Defaults to one built on
            the default probe bounds.

    Example::

        >>> analyzer = ConflictAnalyzer()
        >>> analyzer.find_conflicts({"a": "~1.2.0"}, {"dep1": {"a": "^1.0.0"}})
        []
    """

    def __init__(self, checker: Optional[RangeCompatibilityChecker] = None) -> None:
        self.checker: RangeCompatibilityChecker = checker or RangeCompatibilityChecker()

    @classmethod
    def with_bounds(cls, bounds: ProbeBounds = DEFAULT_PROBE_BOUNDS) -> "ConflictAnalyzer":
        """Build an analyzer probing the given cube."""
        return cls(RangeCompatibilityChecker(bounds))

    def find_conflicts(
        self,
        top_level: Mapping[str, str],
        nested: NestedDeclarations,
    ) -> List[ConflictRecord]:
        """Return one :class:`ConflictRecord` per conflicting package.

        Args:
            top_level: Package name to range, as declared by the project.
            nested: Declarer name to its own ``package -> range`` mapping.

        Returns:
            Conflict records in top-level order; empty when every
            declarer agrees with the project.
        """
        seen: Set[str] = set()
        records: List[ConflictRecord] = []

        for package, top_range in top_level.items():
            if package in seen:
                continue
            seen.add(package)

            record = self._analyze_package(package, top_range, nested)
            if record is not None:
                records.append(record)

        if records:
            logger.info("Found %d version conflict(s)", len(records))
        return records

    def _analyze_package(
        self,
        package: str,
        top_range: str,
        nested: NestedDeclarations,
    ) -> Optional[ConflictRecord]:
        """Compare *top_range* against every declarer of *package*."""
        conflicting: List[ConflictingDeclarer] = []

        for declarer, declared in nested.items():
            required = declared.get(package)
            if required is None:
                continue
            if not self.checker.compatible(top_range, required):
                logger.debug(
                    "%s: %s requires %s, incompatible with %s",
                    package,
                    declarer,
                    required,
                    top_range,
                )
                conflicting.append(ConflictingDeclarer(declarer, required))

        if not conflicting:
            return None

        ranges = [top_range] + [d.required_range for d in conflicting]
        best = self.checker.max_satisfying(ranges)

        return ConflictRecord(
            package=package,
            top_level_range=top_range,
            conflicting_declarers=tuple(conflicting),
            recommended_version=str(best) if best is not None else None,
        )


_default_analyzer = ConflictAnalyzer()


def find_conflicts(
    top_level: Mapping[str, str],
    nested: NestedDeclarations,
) -> List[ConflictRecord]:
    """Module-level shortcut for :meth:`ConflictAnalyzer.find_conflicts`
    with the default probe bounds."""
    return _default_analyzer.find_conflicts(top_level, nested)
