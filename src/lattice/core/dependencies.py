"""
Dependency resolution for Lattice packages.

Dependencies live in the ``lattice_modules`` directory of the package that
declares them:

    lattice_modules/mathlib/lattice.toml
    lattice_modules/@acme/strings/lattice.toml

Resolution is single-level: only the dependencies a package declares itself
are resolved here. The orchestrator walks deeper by resolving each dependency
in turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import ConfigError, MalformedDependencyError
from .manifest import (
    C_SOURCE_SUFFIX,
    ArtifactKind,
    PackageDescriptor,
    find_manifest,
    load_descriptor,
    read_manifest,
)

if TYPE_CHECKING:
    from .logsys import Reporter

logger = logging.getLogger(__name__)

MODULES_DIR = "lattice_modules"


@dataclass(frozen=True)
class DependencyInfo:
    """
    A resolved dependency.

    Attributes:
        descriptor: The dependency's own descriptor
        include_dirs: Absolute exported include directories, in declared order
    """

    descriptor: PackageDescriptor
    include_dirs: tuple[Path, ...]

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(frozen=True)
class Resolution:
    """Result of resolving every dependency a package declares."""

    dependencies: tuple[DependencyInfo, ...] = ()
    failures: tuple[MalformedDependencyError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


def dependency_path(root: Path, name: str) -> Path:
    """
    Map a dependency name to its on-disk location.

    Scoped names ("@scope/name") map to a two-level directory.
    """
    modules = root / MODULES_DIR
    if name.startswith("@"):
        scope, sep, real_name = name.partition("/")
        if not sep or not real_name or len(scope) < 2:
            raise MalformedDependencyError(
                f'"{name}" is not a valid scoped package name (expected "@scope/name").',
                dependency=name,
            )
        return modules / scope / real_name
    return modules / name


def resolve_dependency(
    descriptor: PackageDescriptor, name: str, reporter: Reporter
) -> DependencyInfo | None:
    """
    Resolve a single declared dependency.

    Returns:
        DependencyInfo, or None if the dependency exports no headers

    Raises:
        MalformedDependencyError: If the dependency is missing or isn't a C library
    """
    package_path = dependency_path(descriptor.root, name)
    manifest_path = find_manifest(package_path)

    # Early check for malformed imports
    if not manifest_path.is_file():
        raise MalformedDependencyError(
            f'"{descriptor.name}" depends on "{name}", which lacks a lattice.toml '
            f"(malformed dependency?)",
            package=descriptor.name,
            dependency=name,
        )

    # Early check for non-C packages and non-libraries
    try:
        raw = read_manifest(manifest_path)
        raw_package = raw.get("package", {})
        raw_options = raw.get("build", {}).get("options", {})
        entrypoint = raw_package.get("entrypoint")
        kind = raw_options.get("kind")
    except (ConfigError, AttributeError) as e:
        raise MalformedDependencyError(
            f'"{descriptor.name}" depends on "{name}", whose lattice.toml is malformed: {e}',
            package=descriptor.name,
            dependency=name,
        ) from e

    if (
        not isinstance(entrypoint, str)
        or not entrypoint.endswith(C_SOURCE_SUFFIX)
        or kind != ArtifactKind.LIBRARY
    ):
        raise MalformedDependencyError(
            f'"{descriptor.name}" depends on "{name}", which isn\'t a C library. '
            f"If your package depends on non-C packages, list them under [dev-dependencies].",
            package=descriptor.name,
            dependency=name,
        )

    try:
        dep = load_descriptor(package_path, reporter)
    except ConfigError as e:
        raise MalformedDependencyError(
            f'"{descriptor.name}" depends on "{name}", which failed to load: {e.message}',
            package=descriptor.name,
            dependency=name,
        ) from e

    if dep.name != name:
        reporter.warn(f'Dependency "{name}" declares itself as "{dep.name}".')

    if not dep.build.exports:
        reporter.warn(f'Dependency "{name}" does not export any headers.')
        return None

    include_dirs = []
    for exported in dep.build.exports:
        include_dir = (dep.root / exported).resolve()
        if not include_dir.is_relative_to(dep.root):
            reporter.warn(
                f'Dependency "{name}" exports "{exported}", which is outside of its package directory.'
            )
        include_dirs.append(include_dir)

    return DependencyInfo(descriptor=dep, include_dirs=tuple(include_dirs))


def resolve_dependencies(
    descriptor: PackageDescriptor,
    reporter: Reporter,
    cache: dict[str, DependencyInfo | None] | None = None,
) -> Resolution:
    """
    Resolve every dependency declared by ``descriptor``, in declaration order.

    A malformed dependency does not stop the others from being resolved; its
    error is collected in ``Resolution.failures``.

    Args:
        descriptor: Package whose dependencies are resolved
        reporter: Task logger receiving warnings
        cache: Successful resolutions by dependency name, shared across calls
            so a library used by several packages is loaded (and warns) once
    """
    infos: list[DependencyInfo] = []
    failures: list[MalformedDependencyError] = []

    # TODO: Workspace resolution (sibling packages in a monorepo)
    for name in descriptor.dependencies:
        if cache is not None and name in cache:
            info = cache[name]
        else:
            try:
                info = resolve_dependency(descriptor, name, reporter)
            except MalformedDependencyError as e:
                if not e.package:
                    e.package = descriptor.name
                logger.debug("Dependency %s of %s is malformed: %s", name, descriptor.name, e)
                failures.append(e)
                continue
            if cache is not None:
                cache[name] = info
        if info is not None:
            infos.append(info)

    return Resolution(dependencies=tuple(infos), failures=tuple(failures))
