"""
Core functionality exports for kiwiko.

This module provides convenient access to the core subsystems of kiwiko.
Importing from here keeps user-facing imports clean and stable:

    from kiwiko.core import ManifestReader, ProjectAnalyzer
"""

from __future__ import annotations

from kiwiko.core.ranges import RangeCompatibilityChecker, ProbeBounds, compatible
from kiwiko.core.conflict_analyzer import ConflictAnalyzer, find_conflicts
from kiwiko.core.manifest_reader import ManifestReader, is_valid_manifest
from kiwiko.core.registry import NpmRegistryStore, NpmPackageData
from kiwiko.core.nested import NestedDependencyResolver
from kiwiko.core.update_checker import UpdateChecker
from kiwiko.core.analyzer import ProjectAnalyzer

__all__ = [
    "RangeCompatibilityChecker",
    "ProbeBounds",
    "compatible",
    "ConflictAnalyzer",
    "find_conflicts",
    "ManifestReader",
    "is_valid_manifest",
    "NpmRegistryStore",
    "NpmPackageData",
    "NestedDependencyResolver",
    "UpdateChecker",
    "ProjectAnalyzer",
]
