"""
Version comparison utilities for kiwiko.

This module provides helpers for parsing npm-style semantic versions and
classifying the change between two of them.  Parsing is delegated to
:class:`semantic_version.Version`; a leading ``v`` or ``=`` (as printed by
``node --version`` or found in manifests) is tolerated.
"""

from __future__ import annotations

from typing import Optional, Union

from semantic_version import Version

VersionLike = Union[str, Version]


def parse_version(value: Optional[VersionLike]) -> Optional[Version]:
    """Parse a strict semantic version.

    Args:
        value: Version string such as ``"1.2.3"`` or ``"v18.17.0"``, or an
            already-parsed :class:`Version`.

    Returns:
        The parsed version, or ``None`` when *value* is not valid semver.

    Examples:
        >>> str(parse_version("v18.17.0"))
        '18.17.0'
        >>> parse_version("^1.2.0") is None
        True
    """
    if isinstance(value, Version):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text[:1] == "v":
        text = text[1:]
    if text[:1] == "=":
        text = text[1:].strip()

    try:
        return Version(text)
    except ValueError:
        return None


def is_safe_update(current: Optional[VersionLike], candidate: Optional[VersionLike]) -> bool:
    """Return True when moving from *current* to *candidate* is patch-only.

    An update is safe when both versions parse and share the same major
    and minor components.  Equal versions count as safe.

    Examples:
        >>> is_safe_update("1.2.3", "1.2.5")
        True
        >>> is_safe_update("1.2.3", "1.3.0")
        False
        >>> is_safe_update("1.2.3", "not-a-version")
        False
    """
    current_parsed = parse_version(current)
    candidate_parsed = parse_version(candidate)
    if current_parsed is None or candidate_parsed is None:
        return False

    return (
        current_parsed.major == candidate_parsed.major
        and current_parsed.minor == candidate_parsed.minor
    )


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the semantic update type between two versions.

    Args:
        current_version: Currently declared version, or ``None`` if absent.
        target_version: Target version to compare against.

    Returns:
        One of:
            - ``"new"``       : No current version exists
            - ``"same"``      : Versions are identical
            - ``"downgrade"`` : Target version is lower than current
            - ``"major"``     : Major version change
            - ``"minor"``     : Minor version change
            - ``"patch"``     : Patch-level change
            - ``"update"``    : Pre-release or build-only change
            - ``"unknown"``   : Invalid or unsupported version comparison

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type(None, "1.0.0")
        'new'
        >>> get_update_type("1.2.3", "1.2.3")
        'same'
    """
    if current_version is None and target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    if target_version is None:
        return "unknown"

    current = parse_version(current_version)
    target = parse_version(target_version)
    if current is None or target is None:
        return "unknown"

    if target == current:
        return "same"

    if target < current:
        return "downgrade"

    return _classify_upgrade(current, target)


def _classify_upgrade(current: Version, target: Version) -> str:
    """Classify an upgrade between two valid versions."""
    if current.major != target.major:
        return "major"

    if current.minor != target.minor:
        return "minor"

    if current.patch != target.patch:
        return "patch"

    # Pre-release → release, or build metadata only
    return "update"
