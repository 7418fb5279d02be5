"""
Unified data model exports for kiwiko.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``kiwiko.models`` instead of individual submodules.

Example:
    >>> from kiwiko.models import PackageManifest, ConflictRecord
"""

from __future__ import annotations

from kiwiko.models.manifest import PackageManifest
from kiwiko.models.update import PackageUpdate
from kiwiko.models.conflict import ConflictingDeclarer, ConflictRecord
from kiwiko.models.report import AnalysisReport, NodeCompatibility

__all__ = [
    "PackageManifest",
    "PackageUpdate",
    "ConflictingDeclarer",
    "ConflictRecord",
    "AnalysisReport",
    "NodeCompatibility",
]
