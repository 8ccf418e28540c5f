"""
Server identity reported during the MCP handshake.

The version comes from the installed ``cortex-orchestrator`` distribution,
so it always matches the release metadata in pyproject.toml.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

__all__ = ["VERSION", "SERVER_NAME", "DISTRIBUTION"]

SERVER_NAME = "cortex-orchestrator"
DISTRIBUTION = "cortex-orchestrator"

# Source tree imported without an install
_UNINSTALLED_VERSION = "0.0.0+unknown"


def installed_version(distribution: str = DISTRIBUTION) -> str:
    try:
        return version(distribution)
    except PackageNotFoundError:
        return _UNINSTALLED_VERSION


VERSION = installed_version()
