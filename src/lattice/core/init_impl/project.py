"""
Main package initialization logic.

Creates new Lattice packages from the bundled binary/library templates.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ..manifest import MANIFEST_FILE, ArtifactKind, BoundaryChecks, Subsystem
from .templates import copy_template, template_dir
from .validation import InitError, c_identifier, sanitize_name, validate_package_name

if TYPE_CHECKING:
    from collections.abc import Callable


def template_variables(
    project_name: str,
    boundary_checks: BoundaryChecks,
    subsystem: Subsystem,
) -> dict[str, str]:
    """Variables substituted into the package templates."""
    from lattice import __version__

    ident = c_identifier(project_name)
    return {
        "project_name": project_name,
        "file_stem": project_name.rsplit("/", 1)[-1],
        "symbol_prefix": ident,
        "header_guard": f"{ident.upper()}_H",
        "boundary_checks": boundary_checks.value,
        "subsystem": subsystem.value,
        "lattice_version": __version__,
    }


def init_project(
    target_dir: Path,
    project_name: str | None = None,
    kind: ArtifactKind = ArtifactKind.BINARY,
    boundary_checks: BoundaryChecks = BoundaryChecks.NONE,
    subsystem: Subsystem = Subsystem.CONSOLE,
    overwrite: bool = False,
    progress_callback: Callable[[str], None] | None = None,
) -> Path:
    """
    Initialize a new Lattice package.

    Args:
        target_dir: Directory to create the package in
        project_name: Package name (defaults to the directory name)
        kind: Produce a binary or a library package
        boundary_checks: Boundary-check level written to the manifest
        subsystem: Windows subsystem for binaries
        overwrite: If True, delete an existing target directory first
        progress_callback: Optional callback for progress messages

    Returns:
        Path to the new package's lattice.toml

    Raises:
        InitError: If the name is invalid, the directory exists, or copying fails
    """

    def log(msg: str) -> None:
        if progress_callback:
            progress_callback(msg)

    if project_name is None:
        project_name = sanitize_name(target_dir.name)
    else:
        is_valid, error_msg = validate_package_name(project_name)
        if not is_valid:
            raise InitError(error_msg or "Invalid package name")

    log(f"Initializing package '{project_name}' ({kind.value})...")

    if target_dir.exists():
        if not overwrite:
            raise InitError(f'"{target_dir.name}" already exists: {target_dir}')
        log(f"  Removing existing {target_dir}")
        shutil.rmtree(target_dir)

    variables = template_variables(project_name, boundary_checks, subsystem)
    written = copy_template(template_dir(kind.value), target_dir, variables)
    for path in written:
        log(f"  Created {path.relative_to(target_dir).as_posix()}")

    return target_dir / MANIFEST_FILE
