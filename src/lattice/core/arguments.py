"""
Compiler argument assembly.

Turns a package descriptor, its resolved dependencies and the run-wide build
state into the argument vector passed to tcc. Pure: no filesystem access.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from .manifest import BoundaryChecks, CharSignedness, PackageDescriptor, Subsystem
from .toolchain import executable_suffix, is_windows

if TYPE_CHECKING:
    from .dependencies import DependencyInfo
    from .state import BuildState

LIBRARY_SUFFIX = ".a"
RUN_DIRECTIVE = "-run"


def output_path(state: BuildState, descriptor: PackageDescriptor, is_dependency: bool) -> Path:
    """Where the artifact for ``descriptor`` is written."""
    if descriptor.is_library:
        # Dependencies land in the shared library container
        directory = state.library_dir if is_dependency else descriptor.output_dir
        return directory / f"{descriptor.artifact_name}{LIBRARY_SUFFIX}"
    return descriptor.output_dir / f"{descriptor.artifact_name}{executable_suffix(state.platform)}"


def include_flags(
    descriptor: PackageDescriptor, dependencies: Iterable[DependencyInfo]
) -> list[str]:
    """Own imports first, then each dependency's exports in dependency order."""
    flags = []
    for path in descriptor.build.imports:
        # Absolute imports are discouraged (the loader warns) but allowed
        resolved = Path(path) if PurePath(path).is_absolute() else (descriptor.root / path).resolve()
        flags.append(f"-I{resolved}")
    for dep in dependencies:
        for include_dir in dep.include_dirs:
            flags.append(f"-I{include_dir}")
    return flags


def wants_boundary_checks(
    state: BuildState, descriptor: PackageDescriptor, is_dependency: bool
) -> bool:
    # The root can force checks onto its dependencies with "app+deps"
    if is_dependency and state.force_dependency_checks:
        return True
    return descriptor.build.options.boundary_checks != BoundaryChecks.NONE


def assemble_arguments(
    state: BuildState,
    descriptor: PackageDescriptor,
    dependencies: Sequence[DependencyInfo],
    is_dependency: bool = False,
    run: bool = False,
    runtime_args: Sequence[str] = (),
) -> list[str]:
    """
    Build the tcc argument vector for one package.

    Args:
        state: Run-wide build state
        descriptor: Package being compiled
        dependencies: The package's resolved direct dependencies
        is_dependency: Package is built as a dependency of the root
        run: Assemble for direct execution (``-run``) instead of an artifact
        runtime_args: Arguments passed to the program in run mode

    Returns:
        Ordered argument vector (without the compiler binary)
    """
    options = descriptor.build.options
    compiler = descriptor.build.compiler
    args: list[str] = []

    if not run:
        if descriptor.is_library:
            args.extend(["-static", "-shared"])
        args.extend(["-o", str(output_path(state, descriptor, is_dependency))])

    args.extend(include_flags(descriptor, dependencies))

    if compiler.char_signedness == CharSignedness.UNSIGNED:
        args.append("-funsigned-char")
    else:
        args.append("-fsigned-char")

    if compiler.dollars_in_identifiers:
        args.append("-fdollars-in-identifiers")

    if wants_boundary_checks(state, descriptor, is_dependency):
        args.append("-b")

    if is_windows(state.platform) and not descriptor.is_library:
        subsystem = "gui" if options.subsystem == Subsystem.WINDOWED else "console"
        args.extend([f"-Wl,-subsystem={subsystem}", "-mms-bitfields"])

    args.extend(compiler.extra_args)

    entrypoint = str(descriptor.entrypoint_path)
    if run:
        # tcc hands everything after the source file to the program
        return [RUN_DIRECTIVE, *args, entrypoint, *runtime_args]
    return [entrypoint, *args]
