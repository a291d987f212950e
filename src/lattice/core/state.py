"""
Run-wide build state.

A BuildState is created once per ``lattice build``/``lattice run`` and threaded
through every orchestrator call. It records which packages were already built
so shared dependencies are compiled at most once per run.
"""

from __future__ import annotations

import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .dependencies import DependencyInfo
from .manifest import BoundaryChecks, PackageDescriptor, load_descriptor
from .toolchain import locate_compiler

if TYPE_CHECKING:
    from .logsys import Reporter

logger = logging.getLogger(__name__)

WORK_DIR = ".lattice"
LIBRARY_DIR = "lib"


@dataclass
class BuildState:
    """
    Mutable state of one build run.

    Attributes:
        root: Descriptor of the package the run was started for
        compiler: Path to the compiler binary
        library_dir: Shared output directory for libraries built as dependencies
        platform: Target platform (a ``sys.platform`` value)
        force_dependency_checks: Root uses "app+deps" boundary checks
        jit: Run executes the root directly instead of writing an artifact
        jit_ready: Root build step was reached in JIT mode
        built: Names of packages already built in this run
        dependencies: Resolved direct dependencies of the root
    """

    root: PackageDescriptor
    compiler: Path
    library_dir: Path
    platform: str = sys.platform
    force_dependency_checks: bool = False
    jit: bool = False
    jit_ready: bool = False
    built: set[str] = field(default_factory=set)
    dependencies: list[DependencyInfo] = field(default_factory=list)

    def is_built(self, name: str) -> bool:
        return name in self.built

    def mark_built(self, name: str) -> None:
        self.built.add(name)


def work_dir(descriptor: PackageDescriptor, *parts: str) -> Path:
    """Path inside a package's scratch directory."""
    return descriptor.root.joinpath(WORK_DIR, *parts)


def prepare_environment(descriptor: PackageDescriptor, clean: bool = False) -> Path:
    """
    Create the package's scratch directory, wiping it first if ``clean``.

    Returns:
        The scratch directory
    """
    temp = work_dir(descriptor)
    if clean and temp.exists():
        logger.debug("Cleaning %s", temp)
        shutil.rmtree(temp)
    temp.mkdir(exist_ok=True)
    return temp


def init_build_state(
    root: Path | str,
    clean: bool = False,
    jit: bool = False,
    platform: str | None = None,
    reporter: Reporter | None = None,
) -> BuildState:
    """
    Load the root package and create the state needed to build it.

    Args:
        root: Root directory of the package to build
        clean: Wipe the ``.lattice`` work directory first
        jit: Prepare a ``lattice run`` instead of a build
        platform: Override the target platform (defaults to the host)
        reporter: Task logger receiving the root manifest's warnings

    Raises:
        ConfigError: If the root manifest is invalid
        UnsupportedPlatformError: If the platform has no toolchain
        CompilerNotFoundError: If the compiler binary is missing
    """
    descriptor = load_descriptor(root, reporter)
    platform = platform or sys.platform
    compiler = locate_compiler(platform)
    prepare_environment(descriptor, clean)

    return BuildState(
        root=descriptor,
        compiler=compiler,
        library_dir=work_dir(descriptor, LIBRARY_DIR),
        platform=platform,
        force_dependency_checks=(
            descriptor.build.options.boundary_checks == BoundaryChecks.APP_AND_DEPS
        ),
        jit=jit,
    )
