"""
Toolchain binary lookup.

Lattice ships a Tiny C Compiler build per supported platform:

    toolchain/linux/tcc
    toolchain/win64/tcc.exe

LATTICE_COMPILER overrides the lookup entirely.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .environment import get_compiler_override, get_toolchain_dir
from .errors import CompilerNotFoundError, UnsupportedPlatformError

logger = logging.getLogger(__name__)

# Platform (sys.platform) -> compiler path relative to the toolchain directory
COMPILER_PATHS: dict[str, str] = {
    "linux": "linux/tcc",
    "win32": "win64/tcc.exe",
}


def is_windows(platform: str) -> bool:
    return platform == "win32"


def executable_suffix(platform: str) -> str:
    return ".exe" if is_windows(platform) else ""


def locate_compiler(platform: str | None = None) -> Path:
    """
    Retrieve the compiler path for a platform.

    Args:
        platform: A ``sys.platform`` value (defaults to the host)

    Returns:
        Absolute path to the compiler binary

    Raises:
        UnsupportedPlatformError: If no toolchain exists for the platform
        CompilerNotFoundError: If the binary is missing
    """
    override = get_compiler_override()
    if override is not None:
        if not override.is_file():
            raise CompilerNotFoundError(override)
        logger.debug("Using compiler override %s", override)
        return override.resolve()

    platform = platform or sys.platform
    relative = COMPILER_PATHS.get(platform)
    if relative is None:
        raise UnsupportedPlatformError(platform)

    path = get_toolchain_dir() / relative
    if not path.is_file():
        raise CompilerNotFoundError(path)

    logger.debug("Using bundled compiler %s", path)
    return path
