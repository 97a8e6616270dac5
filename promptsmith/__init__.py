"""PromptSmith core package.

Exposes a best-effort __version__ attribute so both the API and CLI can
surface the current package version without failing in editable/dev mode.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("promptsmith")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

# Bumped whenever built-in pattern libraries change observable output
RULESET_VERSION = "1.0"


def get_version() -> str:
    """Return the resolved package version."""
    return __version__


def get_build_info() -> dict:
    """Return build info: package version and rule-set version."""
    return {
        "version": get_version(),
        "ruleset_version": RULESET_VERSION,
    }


__all__ = ["__version__", "get_version", "get_build_info", "RULESET_VERSION"]
