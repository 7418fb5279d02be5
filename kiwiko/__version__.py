"""
kiwiko version information.

Single source of truth for the package version, read by the CLI
``--version`` flag and the registry ``User-Agent`` header.
"""

__version__ = "1.0.0"
