"""Upstream update discovery for kiwiko.

For every declared dependency this module looks up the ``latest`` dist-tag
on the npm registry (through the shared
:class:`~kiwiko.core.registry.NpmRegistryStore`) and reports an update when
the published version is newer than the one the manifest declares.

The "current" version is derived from the declared range by stripping a
leading ``^``, ``~``, ``=`` or ``v``; ranges that do not reduce to a single
version (``>=1 <2``, ``1.x``, ``latest``, git URLs) are skipped.

Typical usage::

    from kiwiko.utils.http import HTTPClient
    from kiwiko.core.registry import NpmRegistryStore
    from kiwiko.core.update_checker import UpdateChecker

    async with HTTPClient() as http:
        checker = UpdateChecker(NpmRegistryStore(http))
        updates = await checker.check_updates({"express": "^4.17.0"})
        for update in updates:
            print(update, "(safe)" if update.is_safe else "")
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Mapping, Optional, Tuple

from kiwiko.exceptions import KiwikoError
from kiwiko.models.update import PackageUpdate
from kiwiko.utils.logger import get_logger
from kiwiko.utils.version_utils import is_safe_update, parse_version
from kiwiko.core.registry import NpmPackageData, NpmRegistryStore

logger = get_logger("update_checker")

# Public API
__all__ = ["UpdateChecker", "normalize_declared_version", "describe_changes"]


def normalize_declared_version(declared: Optional[str]) -> Optional[str]:
    """Reduce a declared range to the version it pins or starts from.

    Example::

        >>> normalize_declared_version("^1.2.3")
        '1.2.3'
        >>> normalize_declared_version(" ~v2.0.0 ")
        '2.0.0'
        >>> normalize_declared_version(">=1.0.0 <2.0.0") is None
        True
    """
    if not isinstance(declared, str):
        return None

    text = declared.strip()
    if text[:1] in ("^", "~"):
        text = text[1:].strip()

    parsed = parse_version(text)
    return str(parsed) if parsed is not None else None


def describe_changes(
    pkg_data: NpmPackageData,
    current_version: str,
    available_version: str,
) -> List[str]:
    """Summarize what moving from *current_version* to *available_version* means.

    The first entry is a headline based on the kind of update; it is
    followed by one line per deprecated release in
    ``(current_version, available_version]``, oldest first.  An empty list
    is returned when no published version lies in that interval.
    """
    between = pkg_data.versions_between(current_version, available_version)
    if not between:
        return []

    current = parse_version(current_version)
    available = parse_version(available_version)
    changes: List[str] = []

    if current is not None and available is not None:
        if available.major > current.major:
            changes.append(
                f"Major version change ({current.major} -> {available.major}): "
                "may contain breaking changes"
            )
        elif available.minor > current.minor:
            changes.append(f"New features added in {available_version}")
        else:
            changes.append("Bug fixes and performance improvements")

    for version in reversed(between):
        message = pkg_data.deprecations.get(version)
        if message:
            changes.append(f"Version {version} is deprecated: {message}")

    return changes


class UpdateChecker:
    """Async update checker backed by :class:`NpmRegistryStore`.

    Args:
        data_store: Shared registry metadata cache.  **Required**.

    Raises:
        TypeError: If *data_store* is ``None``.

    Example::

        >>> checker = UpdateChecker(data_store=store)
        >>> updates = await checker.check_updates({"lodash": "^4.17.0"})
        >>> updates[0].available_version
        '4.17.21'
    """

    def __init__(self, data_store: NpmRegistryStore) -> None:
        if data_store is None:
            raise TypeError(
                "data_store must not be None; pass an NpmRegistryStore instance"
            )
        self.data_store: NpmRegistryStore = data_store

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def check_updates(
        self,
        dependencies: Mapping[str, str],
    ) -> List[PackageUpdate]:
        """Return available updates for *dependencies*, in input order.

        Packages are checked concurrently.  A package that cannot be
        fetched is logged and skipped so that one failure does not block
        the rest.

        Args:
            dependencies: Package name to declared range.

        Returns:
            One :class:`PackageUpdate` per package with a newer release.
        """
        items: List[Tuple[str, str]] = list(dependencies.items())
        results = await asyncio.gather(
            *(self.check_package(name, declared) for name, declared in items),
            return_exceptions=True,
        )
        return self._process_results(items, results)

    async def check_package(self, name: str, declared: str) -> Optional[PackageUpdate]:
        """Check one dependency.

        Returns:
            A :class:`PackageUpdate`, or ``None`` when the declared range
            does not pin a version or the package is already current.

        Raises:
            RegistryError: The package is not on the registry.
            NetworkError: The registry could not be reached.
        """
        current = normalize_declared_version(declared)
        if current is None:
            logger.debug("Skipping %s: cannot derive a version from %r", name, declared)
            return None

        pkg_data = await self.data_store.get_package_data(name)
        latest = pkg_data.latest_version

        latest_parsed = parse_version(latest)
        current_parsed = parse_version(current)
        if latest is None or latest_parsed is None or current_parsed is None:
            return None

        if latest_parsed <= current_parsed:
            return None

        return PackageUpdate(
            package=name,
            current_version=current,
            available_version=latest,
            is_safe=is_safe_update(current, latest),
            changes=describe_changes(pkg_data, current, latest),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _process_results(
        items: List[Tuple[str, str]],
        results: List[Any],
    ) -> List[PackageUpdate]:
        """Flatten :func:`asyncio.gather` output, logging failures."""
        updates: List[PackageUpdate] = []

        for (name, _), result in zip(items, results):
            if isinstance(result, KiwikoError):
                logger.warning("Could not check updates for %s: %s", name, result)
            elif isinstance(result, BaseException):
                raise result
            elif result is not None:
                updates.append(result)

        return updates
