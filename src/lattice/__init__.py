"""
Lattice - dependency-aware builds for Tiny C Compiler packages.

Loads a package's lattice.toml, resolves its C library dependencies, builds
them bottom-up exactly once per run and compiles (or directly runs) the
package itself.
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .core.errors import ConfigError, LatticeError, MalformedDependencyError


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("lattice-cli")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "LatticeError",
    "ConfigError",
    "MalformedDependencyError",
]
