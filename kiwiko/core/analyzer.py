"""Whole-project analysis for kiwiko.

:class:`ProjectAnalyzer` runs every check kiwiko knows about against one
manifest and gathers the results into an
:class:`~kiwiko.models.report.AnalysisReport`:

1. **Node.js compatibility** of the running (or given) Node.js version
   with ``engines.node``.
2. **Version conflicts** between the project's ranges and those declared
   by its dependencies (see :mod:`kiwiko.core.conflict_analyzer`).
3. **Available updates** from the npm registry.
4. **Installation hints** and obsolete-package notices.

Registry-backed steps run only when a
:class:`~kiwiko.core.registry.NpmRegistryStore` is supplied; the same store
serves both nested resolution and update checks so each package is
fetched at most once.

Typical usage::

    async with HTTPClient() as http:
        analyzer = ProjectAnalyzer(data_store=NpmRegistryStore(http))
        report = await analyzer.analyze(ManifestReader().read("."))
        print(report.has_problems())
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from kiwiko.models.manifest import PackageManifest
from kiwiko.models.report import AnalysisReport
from kiwiko.models.update import PackageUpdate
from kiwiko.models.conflict import ConflictRecord
from kiwiko.utils.logger import get_logger
from kiwiko.core.ranges import DEFAULT_PROBE_BOUNDS, ProbeBounds
from kiwiko.core.registry import NpmRegistryStore
from kiwiko.core.nested import NestedDependencyResolver
from kiwiko.core.update_checker import UpdateChecker
from kiwiko.core.conflict_analyzer import ConflictAnalyzer
from kiwiko.core.node_compat import analyze_node_compatibility, detect_node_version
from kiwiko.core.optimizer import analyze_install_optimizations, analyze_obsolete_packages

if TYPE_CHECKING:
    from kiwiko.config import KiwikoConfig

logger = get_logger("analyzer")

__all__ = ["ProjectAnalyzer"]


class ProjectAnalyzer:
    """Run all project checks and build an :class:`AnalysisReport`.

    Args:
        data_store: Registry store for update checks and for resolving
            packages missing from ``node_modules``.  ``None`` runs offline.
        check_conflicts: Look for version conflicts.
        check_updates: Look for newer releases (needs *data_store*).
        include_dev: Include ``devDependencies`` in conflict and update
            checks.
        bounds: Probe cube used by the conflict analyzer.
    """

    def __init__(
        self,
        data_store: Optional[NpmRegistryStore] = None,
        *,
        check_conflicts: bool = True,
        check_updates: bool = True,
        include_dev: bool = True,
        bounds: ProbeBounds = DEFAULT_PROBE_BOUNDS,
    ) -> None:
        self.data_store = data_store
        self.check_conflicts = check_conflicts
        self.check_updates = check_updates
        self.include_dev = include_dev
        self.conflict_analyzer = ConflictAnalyzer.with_bounds(bounds)

    @classmethod
    def from_config(
        cls,
        config: "KiwikoConfig",
        data_store: Optional[NpmRegistryStore] = None,
    ) -> "ProjectAnalyzer":
        """Build an analyzer from a loaded :class:`KiwikoConfig`."""
        return cls(
            data_store,
            check_conflicts=config.check_conflicts,
            check_updates=config.check_updates,
            include_dev=config.include_dev,
            bounds=config.probe_bounds,
        )

    async def analyze(
        self,
        manifest: PackageManifest,
        node_version: Optional[str] = None,
    ) -> AnalysisReport:
        """Analyze *manifest*.

        Args:
            manifest: The project manifest.
            node_version: Node.js version to check against; detected with
                ``node --version`` when omitted.

        Returns:
            The aggregated :class:`AnalysisReport`.
        """
        logger.info("Analyzing %s", manifest)

        current_node = node_version
        if not current_node:
            loop = asyncio.get_running_loop()
            current_node = await loop.run_in_executor(None, detect_node_version)
        node = analyze_node_compatibility(manifest.required_node_version(), current_node)

        dependencies = manifest.all_dependencies(include_dev=self.include_dev)

        conflicts: List[ConflictRecord] = []
        if self.check_conflicts and dependencies:
            conflicts = await self._find_conflicts(manifest, dependencies)

        updates: List[PackageUpdate] = []
        if self.check_updates and self.data_store is not None and dependencies:
            updates = await UpdateChecker(self.data_store).check_updates(dependencies)

        optimizations = analyze_install_optimizations(
            manifest.dependencies, manifest.dev_dependencies
        )
        optimizations.extend(analyze_obsolete_packages(dependencies))

        report = AnalysisReport(
            project=str(manifest),
            node=node,
            conflicts=conflicts,
            updates=updates,
            optimizations=optimizations,
        )
        logger.info(
            "Analysis complete: %d conflict(s), %d update(s)",
            len(report.conflicts),
            len(report.updates),
        )
        return report

    async def _find_conflicts(
        self,
        manifest: PackageManifest,
        dependencies: Dict[str, str],
    ) -> List[ConflictRecord]:
        project_dir = (
            Path(manifest.source_path).parent if manifest.source_path else Path.cwd()
        )
        resolver = NestedDependencyResolver(project_dir, data_store=self.data_store)
        nested = await resolver.resolve(dependencies)
        return self.conflict_analyzer.find_conflicts(dependencies, nested)
