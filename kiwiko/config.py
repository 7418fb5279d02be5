"""Configuration file loader for kiwiko.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``kiwiko.toml``: settings under the ``[kiwiko]`` table
- ``package.json``: settings under a top-level ``"kiwiko"`` object

Discovery order:

1. Explicit path from ``--config`` or ``KIWIKO_CONFIG``
2. ``kiwiko.toml`` in current directory
3. ``package.json`` with a ``"kiwiko"`` object in current directory

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``kiwiko.toml``)::

    [kiwiko]
    check_conflicts = true
    check_updates = false
    registry_url = "https://registry.npmjs.org"
    probe_major_limit = 20
"""

from __future__ import annotations

import json
import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from kiwiko.exceptions import ConfigError
from kiwiko.utils.logger import get_logger
from kiwiko.core.ranges import ProbeBounds
from kiwiko.constants import (
    DEFAULT_CHECK_CONFLICTS,
    DEFAULT_CHECK_UPDATES,
    DEFAULT_INCLUDE_DEV,
    MANIFEST_FILE_NAME,
    NPM_REGISTRY_URL,
    PROBE_MAJOR_LIMIT,
    PROBE_MINOR_LIMIT,
    PROBE_PATCH_LIMIT,
)

logger = get_logger("config")

CONFIG_FILE_NAME = "kiwiko.toml"
CONFIG_SECTION = "kiwiko"

_BOOL_OPTIONS = ("check_conflicts", "check_updates", "include_dev")
_INT_OPTIONS = ("probe_major_limit", "probe_minor_limit", "probe_patch_limit")
_STR_OPTIONS = ("registry_url",)


@dataclass
class KiwikoConfig:
    """Parsed and validated kiwiko configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        check_conflicts: Look for version conflicts between declarers.
        check_updates: Query the registry for newer releases.
        include_dev: Analyze ``devDependencies`` alongside runtime ones.
        registry_url: Base URL of the npm registry.
        probe_major_limit: Exclusive bound on probed major versions.
        probe_minor_limit: Exclusive bound on probed minor versions.
        probe_patch_limit: Exclusive bound on probed patch versions.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    check_conflicts: bool = DEFAULT_CHECK_CONFLICTS
    check_updates: bool = DEFAULT_CHECK_UPDATES
    include_dev: bool = DEFAULT_INCLUDE_DEV
    registry_url: str = NPM_REGISTRY_URL
    probe_major_limit: int = PROBE_MAJOR_LIMIT
    probe_minor_limit: int = PROBE_MINOR_LIMIT
    probe_patch_limit: int = PROBE_PATCH_LIMIT

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    @property
    def probe_bounds(self) -> ProbeBounds:
        """Probe cube described by the ``probe_*_limit`` options."""
        return ProbeBounds(
            self.probe_major_limit,
            self.probe_minor_limit,
            self.probe_patch_limit,
        )

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            name: getattr(self, name)
            for name in _BOOL_OPTIONS + _STR_OPTIONS + _INT_OPTIONS
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Search order:

    1. ``explicit_path`` (from ``--config`` or ``KIWIKO_CONFIG``)
    2. ``kiwiko.toml`` in current directory
    3. ``package.json`` with a ``"kiwiko"`` object in current directory

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    kiwiko_toml = cwd / CONFIG_FILE_NAME
    if kiwiko_toml.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, kiwiko_toml)
        return kiwiko_toml

    manifest = cwd / MANIFEST_FILE_NAME
    if manifest.is_file() and _manifest_has_kiwiko_section(manifest):
        logger.debug("Found \"kiwiko\" section in %s", manifest)
        return manifest

    logger.debug("No configuration file found")
    return None


def _manifest_has_kiwiko_section(path: Path) -> bool:
    """Check whether a ``package.json`` carries a ``"kiwiko"`` object.

    Parse errors are treated as "no section"; the manifest reader reports
    them properly later.
    """
    try:
        raw = _read_json(path)
    except ConfigError:
        return False
    return isinstance(raw.get(CONFIG_SECTION), dict)


def load_config(config_path: Optional[Path] = None) -> KiwikoConfig:
    """Load and validate kiwiko configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`KiwikoConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return KiwikoConfig()

    logger.info("Loading configuration from %s", resolved)
    if resolved.suffix == ".json":
        raw = _read_json(resolved)
    else:
        raw = _read_toml(resolved)

    section = raw.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(
            f"'{CONFIG_SECTION}' must be a table",
            config_path=str(resolved),
        )

    if not section:
        logger.debug("Config file found but no kiwiko section; using defaults")
        return KiwikoConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _read_json(path: Path) -> Dict[str, Any]:
    """Read a JSON object from *path*.

    Raises:
        ConfigError: File cannot be read, is not JSON, or is not an object.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"Invalid JSON in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc

    if not isinstance(data, dict):
        raise ConfigError(
            f"{path.name} must contain a JSON object",
            config_path=str(path),
        )
    return data


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> KiwikoConfig:
    """Parse and validate the kiwiko configuration section.

    Rejects unknown keys and type mismatches.

    Raises:
        ConfigError: Unknown keys, incorrect types, or non-positive limits.
    """
    config = KiwikoConfig()

    known = set(_BOOL_OPTIONS + _INT_OPTIONS + _STR_OPTIONS)
    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for name in _BOOL_OPTIONS:
        if name in section:
            val = section[name]
            if not isinstance(val, bool):
                raise ConfigError(
                    f"{name} must be a boolean, got {type(val).__name__}",
                    config_path=config_path,
                    option=name,
                )
            setattr(config, name, val)

    for name in _INT_OPTIONS:
        if name in section:
            val = section[name]
            # bool is a subclass of int
            if isinstance(val, bool) or not isinstance(val, int):
                raise ConfigError(
                    f"{name} must be an integer, got {type(val).__name__}",
                    config_path=config_path,
                    option=name,
                )
            if val < 1:
                raise ConfigError(
                    f"{name} must be at least 1, got {val}",
                    config_path=config_path,
                    option=name,
                )
            setattr(config, name, val)

    for name in _STR_OPTIONS:
        if name in section:
            val = section[name]
            if not isinstance(val, str) or not val.strip():
                raise ConfigError(
                    f"{name} must be a non-empty string",
                    config_path=config_path,
                    option=name,
                )
            setattr(config, name, val.strip())

    return config
