"""npm version-range evaluation and bounded intersection search.

Range expressions follow npm's semver grammar (``^1.2.0``, ``~1.2``,
``>=1.0.0 <2.0.0``, ``1.x``, ``1.2.3 - 1.4.0``, ``a || b``) and are
evaluated with :class:`semantic_version.NpmSpec`.

Deciding whether two ranges intersect is done by **bounded probing**
rather than symbolic interval arithmetic: every plain release
``major.minor.patch`` inside a :class:`ProbeBounds` cube is generated, and
two ranges are compatible when at least one probed version satisfies
both.  With the default bounds (20 × 20 × 5) this is exactly 2000
candidates.

The probe is an approximation.  It never reports a false intersection,
but it misses overlaps that exist only outside the cube (``>=20.0.0``,
``1.25.x``) or only among pre-releases.  Version ``19.19.4`` is the last
probed candidate; nothing with a component at or above a bound is ever
considered.

Nothing in this module raises on bad input: an unparseable version or
range is treated as satisfying nothing.

Typical usage::

    >>> compatible("^1.0.0", "^1.2.0")
    True
    >>> compatible("^1.0.0", "^2.0.0")
    False
    >>> checker = RangeCompatibilityChecker()
    >>> str(checker.max_satisfying(["^1.0.0", "~1.2.0"]))
    '1.2.4'
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from semantic_version import NpmSpec, Version

from kiwiko.utils.version_utils import VersionLike, parse_version
from kiwiko.constants import PROBE_MAJOR_LIMIT, PROBE_MINOR_LIMIT, PROBE_PATCH_LIMIT

__all__ = [
    "ProbeBounds",
    "DEFAULT_PROBE_BOUNDS",
    "RangeCompatibilityChecker",
    "compatible",
    "parse_range",
    "parse_version",
    "probe_versions",
    "satisfies",
]


class ProbeBounds(NamedTuple):
    """Exclusive upper bounds of the probed version cube."""

    major: int = PROBE_MAJOR_LIMIT
    minor: int = PROBE_MINOR_LIMIT
    patch: int = PROBE_PATCH_LIMIT

    @property
    def size(self) -> int:
        """Number of candidate versions inside the cube."""
        return max(self.major, 0) * max(self.minor, 0) * max(self.patch, 0)


DEFAULT_PROBE_BOUNDS = ProbeBounds()

# npm accepts ``>= 1.0.0``, ``^ 1.2.0`` and ``~> 1.2``; NpmSpec does not.
_TILDE_ARROW = re.compile(r"~>\s*")
_OPERATOR_SPACE = re.compile(r"(<=|>=|<|>|=|~|\^)\s+")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _normalize_range(expression: str) -> str:
    """Glue operators to their versions and spell ``~>`` as ``~``."""
    text = _TILDE_ARROW.sub("~", expression.strip())
    return _OPERATOR_SPACE.sub(r"\1", text)


@lru_cache(maxsize=1024)
def _parse_range_cached(expression: str) -> Optional[NpmSpec]:
    try:
        return NpmSpec(expression)
    except ValueError:
        return None


def parse_range(expression: object) -> Optional[NpmSpec]:
    """Parse an npm range expression.

    Whitespace between an operator and its version is dropped and ``~>``
    is read as ``~``, the way npm itself reads them.

    Args:
        expression: Range string, e.g. ``"^1.2.0"`` or ``">= 1.0.0"``.

    Returns:
        The compiled :class:`NpmSpec`, or ``None`` when *expression* is not
        a string or is not valid npm range syntax.
    """
    if not isinstance(expression, str):
        return None
    return _parse_range_cached(_normalize_range(expression))


def satisfies(version: VersionLike, expression: str) -> bool:
    """Return True when *version* lies inside the range *expression*.

    Invalid versions and invalid ranges both yield ``False``.
    """
    parsed = parse_version(version)
    spec = parse_range(expression)
    if parsed is None or spec is None:
        return False
    return spec.match(parsed)


# ---------------------------------------------------------------------------
# Probe cube
# ---------------------------------------------------------------------------


@lru_cache(maxsize=8)
def probe_versions(bounds: ProbeBounds = DEFAULT_PROBE_BOUNDS) -> Tuple[Version, ...]:
    """Return every release version inside *bounds*, in ascending order.

    Example::

        >>> versions = probe_versions()
        >>> len(versions), str(versions[0]), str(versions[-1])
        (2000, '0.0.0', '19.19.4')
    """
    return tuple(
        Version(f"{major}.{minor}.{patch}")
        for major in range(bounds.major)
        for minor in range(bounds.minor)
        for patch in range(bounds.patch)
    )


# ---------------------------------------------------------------------------
# Checker
# ---------------------------------------------------------------------------


class RangeCompatibilityChecker:
    """Answer intersection questions about npm ranges by bounded probing.

    Args:
        bounds: Probe cube to enumerate.  The defaults (20, 20, 5) should
            only be changed deliberately, since they decide which overlaps
            can be found at all.

    Example::

        >>> checker = RangeCompatibilityChecker()
        >>> checker.compatible(">=1.0.0", "<2.0.0")
        True
        >>> checker.max_satisfying(["^1.0.0", "^2.0.0"]) is None
        True
    """

    def __init__(self, bounds: ProbeBounds = DEFAULT_PROBE_BOUNDS) -> None:
        self.bounds: ProbeBounds = ProbeBounds(*bounds)

    @property
    def candidates(self) -> Tuple[Version, ...]:
        """Versions probed by this checker, ascending."""
        return probe_versions(self.bounds)

    def compatible(self, range_a: str, range_b: str) -> bool:
        """Return True when some probed version satisfies both ranges.

        Unparseable ranges are incompatible with everything, themselves
        included.  Two valid, textually identical ranges are always
        compatible, even when no version inside the cube satisfies them.
        """
        spec_a = parse_range(range_a)
        spec_b = parse_range(range_b)
        if spec_a is None or spec_b is None:
            return False

        if _normalize_range(range_a) == _normalize_range(range_b):
            return True

        return any(
            spec_a.match(candidate) and spec_b.match(candidate)
            for candidate in self.candidates
        )

    def satisfying_versions(self, ranges: Iterable[str]) -> List[Version]:
        """Return every probed version that satisfies all *ranges*.

        An empty list is returned when any range is unparseable or when
        *ranges* is empty.
        """
        specs: List[NpmSpec] = []
        for expression in ranges:
            spec = parse_range(expression)
            if spec is None:
                return []
            specs.append(spec)

        if not specs:
            return []

        return [
            candidate
            for candidate in self.candidates
            if all(spec.match(candidate) for spec in specs)
        ]

    def max_satisfying(self, ranges: Sequence[str]) -> Optional[Version]:
        """Return the highest probed version satisfying all *ranges*."""
        found = self.satisfying_versions(ranges)
        return max(found) if found else None

    def min_satisfying(self, ranges: Sequence[str]) -> Optional[Version]:
        """Return the lowest probed version satisfying all *ranges*."""
        found = self.satisfying_versions(ranges)
        return min(found) if found else None


_default_checker = RangeCompatibilityChecker()


def compatible(range_a: str, range_b: str) -> bool:
    """Module-level shortcut for :meth:`RangeCompatibilityChecker.compatible`
    with the default probe bounds."""
    return _default_checker.compatible(range_a, range_b)
