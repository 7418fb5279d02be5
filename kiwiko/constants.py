"""
Centralized constants for kiwiko.

This module defines immutable configuration values used across kiwiko,
including network settings, manifest locations, range-probe bounds,
optimizer reference tables, and logging formats. All values are intended
to be treated as read-only.
"""

from types import MappingProxyType
from typing import Final, Mapping, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "kiwiko/{version}"

# ---------------------------------------------------------------------------
# npm registry endpoints
# ---------------------------------------------------------------------------

#: Base URL of the public npm registry.
NPM_REGISTRY_URL: Final[str] = "https://registry.npmjs.org"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

# ---------------------------------------------------------------------------
# Manifest files
# ---------------------------------------------------------------------------

#: File name of a Node.js project manifest.
MANIFEST_FILE_NAME: Final[str] = "package.json"

#: Directory holding installed packages.
NODE_MODULES_DIR: Final[str] = "node_modules"

#: Maximum allowed file size (in bytes) when reading manifests.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Range probing
#
# Range intersection is decided by enumerating candidate versions inside
# a fixed cube. Versions with any component at or above these limits are
# never probed.
# ---------------------------------------------------------------------------

#: Exclusive upper bound of probed major versions.
PROBE_MAJOR_LIMIT: Final[int] = 20

#: Exclusive upper bound of probed minor versions.
PROBE_MINOR_LIMIT: Final[int] = 20

#: Exclusive upper bound of probed patch versions.
PROBE_PATCH_LIMIT: Final[int] = 5

#: Exclusive upper bound of probed Node.js major versions.
NODE_PROBE_MAJOR_LIMIT: Final[int] = 40

#: Exclusive upper bound of probed Node.js minor versions.
NODE_PROBE_MINOR_LIMIT: Final[int] = 30

#: Exclusive upper bound of probed Node.js patch versions.
NODE_PROBE_PATCH_LIMIT: Final[int] = 10

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

DEFAULT_CHECK_CONFLICTS: Final[bool] = True
DEFAULT_CHECK_UPDATES: Final[bool] = True
DEFAULT_INCLUDE_DEV: Final[bool] = True

# ---------------------------------------------------------------------------
# Installation optimizer tables
# ---------------------------------------------------------------------------

#: Tooling packages that normally belong in ``devDependencies``.
COMMON_DEV_DEPENDENCIES: Final[Sequence[str]] = (
    "eslint",
    "prettier",
    "typescript",
    "jest",
    "mocha",
    "chai",
    "babel",
    "webpack",
    "rollup",
    "gulp",
    "grunt",
    "karma",
    "jasmine",
    "nyc",
    "tslint",
)

#: Obsolete or unmaintained packages mapped to suggested alternatives.
KNOWN_OBSOLETE_PACKAGES: Final[Mapping[str, str]] = MappingProxyType(
    {
        "request": "node-fetch, axios or got",
        "left-pad": "String.prototype.padStart",
        "gulp": "webpack, rollup or esbuild",
        "bower": "npm or yarn",
        "tslint": "eslint with typescript-eslint",
        "moment": "date-fns or luxon",
        "underscore": "lodash or native JavaScript functions",
        "coffeescript": "TypeScript or modern JavaScript",
    }
)

#: Dependency count above which installation is considered heavy.
MAX_RECOMMENDED_DEPENDENCIES: Final[int] = 50

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
