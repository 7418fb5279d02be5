"""
Filesystem utilities for kiwiko.

This module provides safe helpers for locating and reading Node.js
manifests, both the project's own ``package.json`` and those of installed
packages under ``node_modules``.  All filesystem errors are normalized to
``FileOperationError``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union

from kiwiko.utils.logger import get_logger
from kiwiko.exceptions import FileOperationError, ParseError
from kiwiko.constants import MANIFEST_FILE_NAME, MAX_FILE_SIZE, NODE_MODULES_DIR


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Validate that ``path`` is an existing file and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Safely read a text file with optional size limits.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.

    Raises:
        FileOperationError: Missing file, directory, oversized file, or
            an OS/decoding failure while reading.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def read_json_file(file_path: PathLike, **kwargs: Any) -> Any:
    """Read and decode a JSON file.

    Args:
        file_path: Path to the JSON file.
        **kwargs: Forwarded to :func:`safe_read_file`.

    Returns:
        The decoded JSON value.

    Raises:
        FileOperationError: The file cannot be read.
        ParseError: The content is not valid JSON.
    """
    text = safe_read_file(file_path, **kwargs)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"Invalid JSON: {exc.msg} at line {exc.lineno} column {exc.colno}",
            file_path=str(file_path),
        ) from exc


def find_manifest(location: PathLike = ".") -> Path:
    """Resolve the ``package.json`` for a project directory or file path.

    Args:
        location: A project directory or a path to a manifest file.

    Returns:
        Resolved path to the manifest.

    Raises:
        FileOperationError: No manifest exists at *location*.
    """
    path = Path(location).expanduser()
    candidate = path / MANIFEST_FILE_NAME if path.is_dir() else path

    if not candidate.is_file():
        raise FileOperationError(
            f"No {MANIFEST_FILE_NAME} found at {path}",
            file_path=str(candidate),
            operation="read",
        )

    return candidate.resolve()


def installed_manifest_path(project_dir: PathLike, package_name: str) -> Path:
    """Return where an installed package's manifest lives.

    Scoped names (``@scope/name``) map to nested directories, matching
    npm's ``node_modules`` layout.  The path is not checked for existence.

    Example::

        >>> installed_manifest_path("/app", "@types/node").as_posix()
        '/app/node_modules/@types/node/package.json'
    """
    package_dir = Path(project_dir) / NODE_MODULES_DIR
    for part in package_name.split("/"):
        package_dir = package_dir / part
    return package_dir / MANIFEST_FILE_NAME


def validate_path(
    path: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
) -> Path:
    """Resolve and validate a filesystem path.

    If ``base_dir`` is provided, the resolved path must be within it.
    """
    resolved = Path(path).expanduser().resolve(strict=False)

    if base_dir:
        base = Path(base_dir).resolve(strict=False)
        try:
            resolved.relative_to(base)
        except ValueError:
            raise FileOperationError(
                f"Path outside allowed base directory: {resolved}",
                file_path=str(path),
                operation="validate",
            )

    return resolved
