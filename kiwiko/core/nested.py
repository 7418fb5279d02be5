"""Single-level view of what the project's dependencies themselves require.

For each top-level dependency the resolver collects the ranges that
package declares in its own ``dependencies``.  The installed copy under
``node_modules`` is preferred; when a package is not installed and a
registry store is available, the declarations of the highest published
version satisfying the project's range are used instead.

Only one level is examined.  Transitive declarations are not followed.

Typical usage::

    resolver = NestedDependencyResolver("path/to/project", data_store=store)
    nested = await resolver.resolve({"express": "^4.18.0"})
    # {"express": {"body-parser": "1.20.2", "cookie": "0.6.0", ...}}
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from kiwiko.exceptions import KiwikoError
from kiwiko.utils.logger import get_logger
from kiwiko.utils.filesystem import installed_manifest_path, read_json_file
from kiwiko.core.registry import NpmRegistryStore

logger = get_logger("nested")

__all__ = ["NestedDependencyResolver"]


class NestedDependencyResolver:
    """Collect the dependency ranges declared by each top-level package.

    Args:
        project_dir: Directory containing the project's ``node_modules``.
        data_store: Optional registry store used for packages that are
            not installed.  Without it, such packages are skipped.
    """

    def __init__(
        self,
        project_dir: Union[str, Path],
        data_store: Optional[NpmRegistryStore] = None,
    ) -> None:
        self.project_dir = Path(project_dir)
        self.data_store = data_store

    async def resolve(self, top_level: Mapping[str, str]) -> Dict[str, Dict[str, str]]:
        """Return ``declarer -> {package: range}`` for *top_level*.

        Declarers appear in *top_level* order; packages that declare no
        dependencies, or whose declarations cannot be found, are omitted.
        """
        names: List[str] = list(top_level)
        declared = await asyncio.gather(
            *(self._declarations_for(name, top_level[name]) for name in names)
        )

        nested: Dict[str, Dict[str, str]] = {}
        for name, deps in zip(names, declared):
            if deps:
                nested[name] = deps

        logger.debug("Resolved declarations for %d of %d package(s)", len(nested), len(names))
        return nested

    async def _declarations_for(self, name: str, declared_range: str) -> Optional[Dict[str, str]]:
        loop = asyncio.get_running_loop()
        installed = await loop.run_in_executor(None, self.read_installed, name)
        if installed is not None:
            return installed

        if self.data_store is None:
            logger.debug("%s is not installed; skipping", name)
            return None

        return await self.read_from_registry(name, declared_range)

    def read_installed(self, name: str) -> Optional[Dict[str, str]]:
        """Return the ``dependencies`` of the installed copy of *name*.

        Returns ``None`` when the package is not installed or its manifest
        is unreadable.
        """
        path = installed_manifest_path(self.project_dir, name)
        if not path.is_file():
            return None

        try:
            data = read_json_file(path)
        except KiwikoError as exc:
            logger.warning("Ignoring unreadable manifest for %s: %s", name, exc)
            return None

        if not isinstance(data, dict):
            return None
        return _string_mapping(data.get("dependencies"))

    async def read_from_registry(self, name: str, declared_range: str) -> Optional[Dict[str, str]]:
        """Return the declarations of the newest release matching *declared_range*."""
        assert self.data_store is not None

        try:
            pkg_data = await self.data_store.get_package_data(name)
        except KiwikoError as exc:
            logger.warning("Could not fetch %s from the registry: %s", name, exc)
            return None

        version = pkg_data.max_satisfying(declared_range)
        if version is None:
            logger.debug("No published %s matches %s", name, declared_range)
            return None

        logger.debug("Using registry declarations of %s@%s", name, version)
        return pkg_data.get_dependencies(version)


def _string_mapping(value: object) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, str)}
