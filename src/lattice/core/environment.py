"""
Environment configuration for Lattice.

Project settings live in each package's lattice.toml. The handful of
settings that belong to the installation rather than to a package are read
from environment variables:

    LATTICE_COMPILER        Explicit path to the compiler binary. Skips the
                            per-platform lookup in the bundled toolchain.
    LATTICE_TOOLCHAIN_DIR   Directory holding the per-platform toolchains
                            (``linux/tcc``, ``win64/tcc.exe``). Defaults to
                            the ``toolchain`` directory shipped with lattice.
    LATTICE_LOG_LEVEL       Level for diagnostic logging (DEBUG, INFO, ...).
                            Defaults to WARNING.

Usage:
    from lattice.core.environment import get_compiler_override, get_log_level

    override = get_compiler_override()  # Path or None
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

COMPILER_ENV_VAR = "LATTICE_COMPILER"
TOOLCHAIN_DIR_ENV_VAR = "LATTICE_TOOLCHAIN_DIR"
LOG_LEVEL_ENV_VAR = "LATTICE_LOG_LEVEL"

# Bundled toolchains ship inside the package
_DEFAULT_TOOLCHAIN_DIR = Path(__file__).resolve().parent.parent / "toolchain"

_DEFAULT_LOG_LEVEL = logging.WARNING


def get_compiler_override() -> Path | None:
    """Return the compiler path from LATTICE_COMPILER, if set."""
    value = os.environ.get(COMPILER_ENV_VAR, "").strip()
    if not value:
        return None
    return Path(value).expanduser()


def get_toolchain_dir() -> Path:
    """Return the directory holding the bundled per-platform toolchains."""
    value = os.environ.get(TOOLCHAIN_DIR_ENV_VAR, "").strip()
    if value:
        return Path(value).expanduser().resolve()
    return _DEFAULT_TOOLCHAIN_DIR


def get_log_level() -> int:
    """Get the diagnostic log level from LATTICE_LOG_LEVEL.

    Returns:
        int: A ``logging`` level. Defaults to WARNING if LATTICE_LOG_LEVEL
        is not set or invalid.

    Examples:
        >>> import os
        >>> os.environ["LATTICE_LOG_LEVEL"] = "debug"
        >>> get_log_level() == logging.DEBUG
        True
    """
    value = os.environ.get(LOG_LEVEL_ENV_VAR, "").upper().strip()
    if not value:
        return _DEFAULT_LOG_LEVEL

    level = logging.getLevelName(value)
    if isinstance(level, int):
        return level

    logging.getLogger(__name__).warning(
        "Unknown LATTICE_LOG_LEVEL value '%s'. Defaulting to WARNING.", value
    )
    return _DEFAULT_LOG_LEVEL


def get_environment_info() -> dict[str, str]:
    """Get a summary of the current environment configuration.

    Useful for ``lattice --version`` and debug logging.
    """
    override = get_compiler_override()
    return {
        "compiler_override": str(override) if override else "",
        "toolchain_dir": str(get_toolchain_dir()),
        "log_level": logging.getLevelName(get_log_level()),
    }
