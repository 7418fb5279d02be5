"""
Manifest data model for kiwiko.

This module defines a structured representation of a Node.js
``package.json`` as read by :mod:`kiwiko.core.manifest_reader`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class PackageManifest:
    """
    Represents the parts of a ``package.json`` kiwiko analyzes.

    Attributes:
        name: Package name.
        version: Package version.
        description: Optional description.
        dependencies: Runtime dependencies (``dependencies``).
        dev_dependencies: Development dependencies (``devDependencies``).
        peer_dependencies: Peer dependencies (``peerDependencies``).
        engines: Engine requirements such as ``{"node": ">=18"}``.
        source_path: File the manifest was read from, if any.
    """

    name: str
    version: str
    description: Optional[str] = None
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    peer_dependencies: Dict[str, str] = field(default_factory=dict)
    engines: Dict[str, str] = field(default_factory=dict)
    source_path: Optional[str] = None

    def required_node_version(self) -> Optional[str]:
        """Return the ``engines.node`` range, or None if not declared."""
        node = self.engines.get("node")
        if isinstance(node, str) and node.strip():
            return node.strip()
        return None

    def all_dependencies(self, *, include_dev: bool = True) -> Dict[str, str]:
        """
        Merge every dependency section into one mapping.

        Sections are merged in the order runtime, dev, peer. When a package
        appears in more than one section the earliest one wins.

        Args:
            include_dev: Whether ``devDependencies`` take part in the merge.

        Returns:
            Package name to range, in first-seen order.
        """
        sections = [self.dependencies]
        if include_dev:
            sections.append(self.dev_dependencies)
        sections.append(self.peer_dependencies)

        merged: Dict[str, str] = {}
        for section in sections:
            for name, spec in section.items():
                merged.setdefault(name, spec)
        return merged

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "dependencies": dict(self.dependencies),
            "devDependencies": dict(self.dev_dependencies),
            "peerDependencies": dict(self.peer_dependencies),
            "engines": dict(self.engines),
        }

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"
