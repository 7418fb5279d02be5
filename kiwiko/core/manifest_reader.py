"""Reader for Node.js ``package.json`` manifests.

Loads a manifest from disk (or from a string), validates the fields kiwiko
relies on, and returns a :class:`~kiwiko.models.manifest.PackageManifest`.

A manifest is accepted when it is a JSON object with a string ``name`` and
a string ``version``.  Dependency sections, when present, must be objects
mapping package names to range strings.

Typical usage::

    from kiwiko.core.manifest_reader import ManifestReader

    reader = ManifestReader()
    manifest = reader.read("path/to/project")      # directory or file
    print(manifest.required_node_version())        # e.g. ">=18.0.0"

    manifest = reader.parse_string('{"name": "app", "version": "1.0.0"}')
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from kiwiko.models.manifest import PackageManifest
from kiwiko.utils import find_manifest, get_logger, safe_read_file
from kiwiko.exceptions import ParseError

# Public API
__all__ = ["ManifestReader", "is_valid_manifest"]

# Manifest key -> PackageManifest attribute
_DEPENDENCY_SECTIONS = (
    ("dependencies", "dependencies"),
    ("devDependencies", "dev_dependencies"),
    ("peerDependencies", "peer_dependencies"),
)


def is_valid_manifest(data: Any) -> bool:
    """Return True when *data* looks like a ``package.json`` object.

    Example::

        >>> is_valid_manifest({"name": "app", "version": "1.0.0"})
        True
        >>> is_valid_manifest({"name": "app"})
        False
    """
    return (
        isinstance(data, dict)
        and isinstance(data.get("name"), str)
        and isinstance(data.get("version"), str)
    )


class ManifestReader:
    """Load and validate ``package.json`` files.

    The reader is stateless; a single instance may be reused for any number
    of manifests.

    Example::

        >>> reader = ManifestReader()
        >>> manifest = reader.read(".")
        >>> list(manifest.dependencies)
        ['express', 'lodash']
    """

    def __init__(self) -> None:
        self.logger = get_logger("manifest_reader")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read(self, location: Union[str, Path] = ".") -> PackageManifest:
        """Read the manifest at *location*.

        Args:
            location: A project directory (``package.json`` inside it is
                used) or a path to the manifest file itself.

        Returns:
            The parsed :class:`PackageManifest`.

        Raises:
            FileOperationError: No manifest exists or it cannot be read.
            ParseError: The content is not a valid manifest.
        """
        path = find_manifest(location)
        self.logger.debug("Reading manifest: %s", path)

        content = safe_read_file(path)
        return self.parse_string(content, source=str(path))

    def parse_string(
        self,
        content: str,
        source: Optional[str] = None,
    ) -> PackageManifest:
        """Parse manifest JSON from a string.

        Args:
            content: Raw ``package.json`` text.
            source: Optional origin used in error messages.

        Returns:
            The parsed :class:`PackageManifest`.

        Raises:
            ParseError: Invalid JSON, a non-object document, a missing
                ``name``/``version``, or a malformed dependency section.
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ParseError(
                f"Invalid JSON: {exc.msg} at line {exc.lineno} column {exc.colno}",
                file_path=source,
            ) from exc

        if not isinstance(data, dict):
            raise ParseError(
                "Manifest must be a JSON object",
                file_path=source,
            )

        for key in ("name", "version"):
            if not isinstance(data.get(key), str):
                raise ParseError(
                    f"Manifest is missing a string '{key}' field",
                    file_path=source,
                    field=key,
                    value=None if data.get(key) is None else repr(data.get(key)),
                )

        sections = {
            attribute: self._read_section(data, key, source)
            for key, attribute in _DEPENDENCY_SECTIONS
        }
        engines = self._read_section(data, "engines", source)

        description = data.get("description")
        manifest = PackageManifest(
            name=data["name"],
            version=data["version"],
            description=description if isinstance(description, str) else None,
            engines=engines,
            source_path=source,
            **sections,
        )

        self.logger.debug(
            "Parsed manifest %s: %d dependencies, %d dev, %d peer",
            manifest,
            len(manifest.dependencies),
            len(manifest.dev_dependencies),
            len(manifest.peer_dependencies),
        )
        return manifest

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _read_section(
        data: Dict[str, Any],
        key: str,
        source: Optional[str],
    ) -> Dict[str, str]:
        """Return ``data[key]`` as a ``str -> str`` mapping (empty if absent)."""
        section = data.get(key)
        if section is None:
            return {}

        if not isinstance(section, dict):
            raise ParseError(
                f"'{key}' must be an object",
                file_path=source,
                field=key,
                value=repr(section),
            )

        for name, value in section.items():
            if not isinstance(value, str):
                raise ParseError(
                    f"'{key}.{name}' must be a string",
                    file_path=source,
                    field=f"{key}.{name}",
                    value=repr(value),
                )

        return dict(section)
