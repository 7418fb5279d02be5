"""Centralized npm registry data store for kiwiko.

Provides a unified, async-safe cache for npm package metadata
("packuments") so that the update checker and the nested-dependency
resolver share a single HTTP fetch per package.  All public helpers on
:class:`NpmRegistryStore` are either ``async`` (may trigger a network
round-trip) or synchronous accessors that return only what has already
been cached.

Typical usage::

    from kiwiko.utils.http import HTTPClient
    from kiwiko.core.registry import NpmRegistryStore

    async with HTTPClient() as client:
        store = NpmRegistryStore(client)
        data  = await store.get_package_data("express")
        print(data.latest_version)          # e.g. "4.19.2"
        print(data.all_versions[:3])        # newest-first, no pre-releases
"""

from __future__ import annotations

import asyncio
from urllib.parse import quote
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from semantic_version import Version

from kiwiko.exceptions import RegistryError
from kiwiko.utils.http import HTTPClient
from kiwiko.utils.logger import get_logger
from kiwiko.utils.version_utils import VersionLike, parse_version
from kiwiko.core.ranges import parse_range
from kiwiko.constants import NPM_REGISTRY_URL

logger = get_logger("registry")

# Public API
__all__ = ["NpmRegistryStore", "NpmPackageData", "packument_url"]

#: Accept header selecting npm's abbreviated ("corgi") packument format.
ABBREVIATED_PACKUMENT = "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8"


# ---------------------------------------------------------------------------
# Data container
# ---------------------------------------------------------------------------


@dataclass
class NpmPackageData:
    """Immutable-by-convention snapshot of one npm package.

    Populated once by :pymeth:`NpmRegistryStore._parse_package_data` and
    then shared across every caller that requests the same package.

    Attributes:
        name: Package name as published (scope included).
        latest_version: Version tagged ``latest`` in ``dist-tags``.
        all_versions: Stable (non-pre-release) versions, newest first.
        parsed_versions: Every version that could be parsed, as
            ``(raw_str, Version)`` pairs sorted descending.
        deprecations: Maps version string to its deprecation message.
        dependencies: Maps version string to its declared ``dependencies``.
        publish_times: Maps version string to its ISO publish timestamp
            (empty for abbreviated packuments).
    """

    name: str
    latest_version: Optional[str] = None
    all_versions: List[str] = field(default_factory=list)
    parsed_versions: List[Tuple[str, Version]] = field(default_factory=list)
    deprecations: Dict[str, str] = field(default_factory=dict)
    dependencies: Dict[str, Dict[str, str]] = field(default_factory=dict)
    publish_times: Dict[str, str] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def versions_between(self, low: VersionLike, high: VersionLike) -> List[str]:
        """Return stable versions in the half-open interval ``(low, high]``.

        Args:
            low: Exclusive lower bound.
            high: Inclusive upper bound.

        Returns:
            Version strings, newest first.  Empty when either bound is not
            a valid version.

        Example::

            >>> data.all_versions
            ['2.1.0', '2.0.0', '1.4.0', '1.3.2']
            >>> data.versions_between("1.3.2", "2.0.0")
            ['2.0.0', '1.4.0']
        """
        low_parsed = parse_version(low)
        high_parsed = parse_version(high)
        if low_parsed is None or high_parsed is None:
            return []

        return [
            raw
            for raw, parsed in self.parsed_versions
            if not parsed.prerelease and low_parsed < parsed <= high_parsed
        ]

    def max_satisfying(self, expression: str) -> Optional[str]:
        """Return the highest stable published version inside *expression*.

        Example::

            >>> data.max_satisfying("^1.0.0")
            '1.4.0'
            >>> data.max_satisfying("not a range") is None
            True
        """
        spec = parse_range(expression)
        if spec is None:
            return None

        for raw, parsed in self.parsed_versions:
            if not parsed.prerelease and spec.match(parsed):
                return raw
        return None

    def get_dependencies(self, version: str) -> Dict[str, str]:
        """Return the ``dependencies`` declared by *version* (empty if unknown)."""
        return dict(self.dependencies.get(version, {}))

    def deprecated_between(self, low: VersionLike, high: VersionLike) -> Dict[str, str]:
        """Return deprecation messages for versions in ``(low, high]``."""
        return {
            version: self.deprecations[version]
            for version in self.versions_between(low, high)
            if version in self.deprecations
        }


# ---------------------------------------------------------------------------
# Async data-store with double-checked locking
# ---------------------------------------------------------------------------


class NpmRegistryStore:
    """Async-safe, per-process cache for npm package metadata.

    Each unique package name triggers **at most one** HTTP request to
    ``{registry}/{name}``.  A :class:`asyncio.Semaphore` limits concurrent
    outbound fetches, and a double-checked lookup inside the semaphore
    prevents duplicate requests when several coroutines ask for the same
    package simultaneously.

    Args:
        http_client: A pre-configured :class:`HTTPClient` instance.
        registry_url: Base URL of the registry.
        concurrent_limit: Maximum number of registry fetches that may be
            in-flight at once.  Defaults to ``10``.
        abbreviated: Request the abbreviated packument format, which is
            much smaller but carries no publish times.

    Example::

        async with HTTPClient() as client:
            store = NpmRegistryStore(client, concurrent_limit=5)
            await store.prefetch_packages(["react", "react-dom"])
            react = await store.get_package_data("react")
            print(react.latest_version)
    """

    def __init__(
        self,
        http_client: HTTPClient,
        registry_url: str = NPM_REGISTRY_URL,
        concurrent_limit: int = 10,
        abbreviated: bool = True,
    ) -> None:
        self.http_client = http_client
        self.registry_url = registry_url.rstrip("/")
        self.abbreviated = abbreviated
        self._semaphore = asyncio.Semaphore(concurrent_limit)

        # Primary cache: package name → parsed packument
        self._package_data: Dict[str, NpmPackageData] = {}

    # ------------------------------------------------------------------
    # Public async accessors
    # ------------------------------------------------------------------

    async def get_package_data(self, name: str) -> NpmPackageData:
        """Fetch (or return cached) metadata for *name*.

        Args:
            name: npm package name, scoped or not.

        Returns:
            A :class:`NpmPackageData` built from the registry packument.

        Raises:
            RegistryError: The package does not exist or the registry
                returned an unusable response.
            NetworkError: The registry could not be reached.

        Example::

            >>> data = await store.get_package_data("@types/node")
            >>> data.name
            '@types/node'
        """
        # Fast path: already cached (no lock needed)
        if name in self._package_data:
            return self._package_data[name]

        async with self._semaphore:
            # Second check: another coroutine may have populated while we waited
            if name in self._package_data:
                return self._package_data[name]

            data = await self._fetch_packument(name)
            pkg_data = self._parse_package_data(name, data)
            self._package_data[name] = pkg_data
            return pkg_data

    async def prefetch_packages(self, names: Iterable[str]) -> None:
        """Concurrently warm the cache for a batch of packages.

        Errors for individual packages are silenced so that one bad
        package name does not prevent the rest from being cached.
        """
        await asyncio.gather(
            *(self.get_package_data(name) for name in names),
            return_exceptions=True,
        )

    # ------------------------------------------------------------------
    # Public synchronous accessors (cache-only, no I/O)
    # ------------------------------------------------------------------

    def get_cached_package(self, name: str) -> Optional[NpmPackageData]:
        """Return cached data for *name* without triggering a fetch."""
        return self._package_data.get(name)

    def get_versions(self, name: str) -> List[str]:
        """Return cached stable versions for *name* (newest first), or ``[]``."""
        pkg = self.get_cached_package(name)
        return pkg.all_versions if pkg else []

    # ------------------------------------------------------------------
    # Network helpers (private)
    # ------------------------------------------------------------------

    async def _fetch_packument(self, name: str) -> Dict[str, Any]:
        """Request the packument for *name* and return the JSON body.

        Raises:
            RegistryError: On 404 or when the body is not a packument.
        """
        url = packument_url(name, self.registry_url)
        headers = {"Accept": ABBREVIATED_PACKUMENT} if self.abbreviated else None

        try:
            data = await self.http_client.get_json(url, headers=headers)
        except RegistryError as exc:
            raise RegistryError(
                f"Package '{name}' not found on the npm registry",
                package_name=name,
                url=url,
                status_code=exc.status_code,
            ) from exc

        if not isinstance(data.get("versions"), dict):
            raise RegistryError(
                f"Registry returned no versions for '{name}'",
                package_name=name,
                url=url,
            )

        return data

    # ------------------------------------------------------------------
    # Parsing helpers (private, synchronous)
    # ------------------------------------------------------------------

    def _parse_package_data(
        self,
        name: str,
        data: Dict[str, Any],
    ) -> NpmPackageData:
        """Transform a raw packument into :class:`NpmPackageData`.

        Versions that are not valid semver are skipped.  ``parsed_versions``
        is sorted descending so that index 0 is the newest parseable
        version.
        """
        versions: Dict[str, Any] = data.get("versions") or {}
        dist_tags = data.get("dist-tags") or {}
        times = data.get("time") or {}

        parsed_versions: List[Tuple[str, Version]] = []
        deprecations: Dict[str, str] = {}
        dependencies: Dict[str, Dict[str, str]] = {}

        for version_str, meta in versions.items():
            parsed = parse_version(version_str)
            if parsed is None:
                logger.debug("Skipping unparseable version %s@%s", name, version_str)
                continue

            parsed_versions.append((version_str, parsed))

            if not isinstance(meta, dict):
                continue

            deprecated = meta.get("deprecated")
            if isinstance(deprecated, str) and deprecated:
                deprecations[version_str] = deprecated

            deps = meta.get("dependencies")
            if isinstance(deps, dict):
                dependencies[version_str] = {
                    dep: spec for dep, spec in deps.items() if isinstance(spec, str)
                }

        parsed_versions.sort(key=lambda item: item[1], reverse=True)

        latest = dist_tags.get("latest")
        if not isinstance(latest, str):
            stable = [raw for raw, parsed in parsed_versions if not parsed.prerelease]
            latest = stable[0] if stable else None

        return NpmPackageData(
            name=data.get("name") or name,
            latest_version=latest,
            all_versions=[raw for raw, parsed in parsed_versions if not parsed.prerelease],
            parsed_versions=parsed_versions,
            deprecations=deprecations,
            dependencies=dependencies,
            publish_times={
                version: stamp
                for version, stamp in times.items()
                if version in versions and isinstance(stamp, str)
            },
        )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def packument_url(name: str, registry_url: str = NPM_REGISTRY_URL) -> str:
    """Return the packument URL for *name*.

    Scoped names keep their ``@`` but have the slash encoded, as the
    registry expects.

    Example::

        >>> packument_url("@types/node")
        'https://registry.npmjs.org/@types%2Fnode'
        >>> packument_url("lodash")
        'https://registry.npmjs.org/lodash'
    """
    return f"{registry_url.rstrip('/')}/{quote(name, safe='@')}"
