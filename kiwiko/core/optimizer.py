"""Installation hints for kiwiko.

Static checks over a manifest's dependency sections that point out
duplicated or misplaced packages, heavy dependency trees, and packages
known to be obsolete.  Every function returns plain suggestion strings in
a stable order.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from kiwiko.constants import (
    COMMON_DEV_DEPENDENCIES,
    KNOWN_OBSOLETE_PACKAGES,
    MAX_RECOMMENDED_DEPENDENCIES,
)

__all__ = [
    "analyze_install_optimizations",
    "analyze_obsolete_packages",
    "is_dev_tool",
]

PNPM_SUGGESTION = (
    "Consider using pnpm instead of npm for faster installs and less disk usage."
)
CI_CACHE_SUGGESTION = (
    "In CI/CD pipelines, cache node_modules (or the package manager cache) "
    "to speed up installs."
)


def is_dev_tool(
    name: str,
    tools: Sequence[str] = COMMON_DEV_DEPENDENCIES,
) -> bool:
    """Return True when *name* is build or test tooling.

    A package counts as tooling when it is one of *tools*, a plugin named
    ``<tool>-...``, or any ``@types/`` package.

    Example::

        >>> is_dev_tool("eslint-plugin-react")
        True
        >>> is_dev_tool("@types/node")
        True
        >>> is_dev_tool("express")
        False
    """
    if name.startswith("@types/"):
        return True
    return any(name == tool or name.startswith(f"{tool}-") for tool in tools)


def analyze_install_optimizations(
    dependencies: Optional[Mapping[str, str]] = None,
    dev_dependencies: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """Suggest ways to make installing the project cheaper.

    Args:
        dependencies: The manifest's ``dependencies``.
        dev_dependencies: The manifest's ``devDependencies``.

    Returns:
        Suggestions in this order: duplicates, misplaced tooling, too
        many dependencies, then the pnpm and CI-cache hints, which are
        always present.
    """
    dependencies = dependencies or {}
    dev_dependencies = dev_dependencies or {}
    suggestions: List[str] = []

    duplicated = [name for name in dependencies if name in dev_dependencies]
    if duplicated:
        suggestions.append(
            "Found packages in both 'dependencies' and 'devDependencies': "
            f"{', '.join(duplicated)}. Keep each one in a single section."
        )

    misplaced = [name for name in dependencies if is_dev_tool(name)]
    if misplaced:
        suggestions.append(
            "These packages belong in 'devDependencies' rather than "
            f"'dependencies': {', '.join(misplaced)}"
        )

    total = len(dependencies) + len(dev_dependencies)
    if total > MAX_RECOMMENDED_DEPENDENCIES:
        suggestions.append(
            f"The project declares {total} dependencies, which can slow down "
            "installation. Review whether all of them are needed or can be "
            "consolidated."
        )

    suggestions.append(PNPM_SUGGESTION)
    suggestions.append(CI_CACHE_SUGGESTION)
    return suggestions


def analyze_obsolete_packages(
    dependencies: Mapping[str, str],
    obsolete: Mapping[str, str] = KNOWN_OBSOLETE_PACKAGES,
) -> List[str]:
    """Flag dependencies that are obsolete or unmaintained.

    Args:
        dependencies: Package name to range; only the names are used.
        obsolete: Obsolete package name to suggested alternatives.

    Returns:
        One suggestion per obsolete package, in *dependencies* order.
    """
    return [
        f"The package '{name}' is obsolete or unmaintained. "
        f"Consider {obsolete[name]} instead."
        for name in dependencies
        if name in obsolete
    ]
