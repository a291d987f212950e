"""
Lattice CLI utilities.

Shared utility functions used across CLI modules.
"""

from __future__ import annotations

import logging
import platform
import sys

import typer

from lattice.core.environment import get_environment_info, get_log_level
from lattice.core.errors import LatticeError


def get_version() -> str:
    """Get Lattice version from package metadata."""
    from lattice import __version__

    return __version__


def configure_logging(verbose: bool = False) -> None:
    """Set up diagnostic logging (LATTICE_LOG_LEVEL, or DEBUG with --verbose)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else get_log_level(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if not value:
        return

    from lattice.core.toolchain import locate_compiler

    try:
        compiler_status = f"✓ {locate_compiler()}"
    except LatticeError as e:
        compiler_status = f"✗ {e.message}"

    info = get_environment_info()

    typer.echo(f"Lattice version {get_version()}")
    typer.echo("")
    typer.echo("Environment:")
    typer.echo(f"  Python:        {platform.python_implementation()} {platform.python_version()}")
    typer.echo(f"  Platform:      {platform.system()} {platform.release()} ({sys.platform})")
    typer.echo(f"  Architecture:  {platform.machine()}")
    typer.echo("")
    typer.echo("Toolchain:")
    typer.echo(f"  Directory:     {info['toolchain_dir']}")
    if info["compiler_override"]:
        typer.echo(f"  Override:      {info['compiler_override']}")
    typer.echo(f"  Compiler:      {compiler_status}")

    raise typer.Exit()
