"""
Package manifest (lattice.toml) loading.

Example lattice.toml:

    [package]
    name = "app"
    version = "0.1.0"
    entrypoint = "src/main.c"

    [dependencies]
    mathlib = "^1.0.0"

    [build]
    outdir = "dist"
    imports = ["include"]

    [build.options]
    kind = "binary"            # "binary" | "library"
    boundary-checks = "app"    # "none" | "app" | "app+deps"

    [build.compiler]
    char-signedness = "unsigned"
    extra-args = ["-Wall"]

Every optional field is defaulted when the descriptor is built, so callers
never have to re-derive defaults.
"""

from __future__ import annotations

import logging
import tomllib
from enum import StrEnum
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

if TYPE_CHECKING:
    from .logsys import Reporter

logger = logging.getLogger(__name__)

MANIFEST_FILE = "lattice.toml"
C_SOURCE_SUFFIX = ".c"
DEFAULT_OUTDIR = "dist"


class ArtifactKind(StrEnum):
    """Kind of artifact a package produces."""

    BINARY = "binary"
    LIBRARY = "library"


class Subsystem(StrEnum):
    """Windows PE subsystem for executables."""

    CONSOLE = "console"
    WINDOWED = "windowed"


class BoundaryChecks(StrEnum):
    """Boundary-check instrumentation level."""

    NONE = "none"
    APP = "app"  # This package only
    APP_AND_DEPS = "app+deps"  # This package and all of its dependencies


class CharSignedness(StrEnum):
    SIGNED = "signed"
    UNSIGNED = "unsigned"


def _kebab(name: str) -> str:
    return name.replace("_", "-")


# Manifest tables use kebab-case keys; Python code uses snake_case
_SECTION_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    alias_generator=_kebab,
    populate_by_name=True,
)


class CompilerOptions(BaseModel):
    """[build.compiler] table."""

    model_config = _SECTION_CONFIG

    char_signedness: CharSignedness = CharSignedness.SIGNED
    dollars_in_identifiers: bool = False
    extra_args: tuple[str, ...] = ()


class BuildOptions(BaseModel):
    """[build.options] table."""

    model_config = _SECTION_CONFIG

    kind: ArtifactKind = ArtifactKind.BINARY
    subsystem: Subsystem = Subsystem.CONSOLE
    boundary_checks: BoundaryChecks = BoundaryChecks.NONE
    jit_only: bool = False


class BuildSection(BaseModel):
    """[build] table."""

    model_config = _SECTION_CONFIG

    outdir: str = DEFAULT_OUTDIR
    imports: tuple[str, ...] = ()
    exports: tuple[str, ...] = ()
    options: BuildOptions = Field(default_factory=BuildOptions)
    compiler: CompilerOptions = Field(default_factory=CompilerOptions)


class PackageDescriptor(BaseModel):
    """
    Validated, fully-defaulted representation of a package's lattice.toml.

    Attributes:
        root: Absolute package root directory
        name: Package name (may be scoped, e.g. "@acme/strings")
        entrypoint: Entrypoint path relative to root, always a .c file
        dependencies: Build dependencies, name -> version, in declaration order
        dev_dependencies: Non-build dependencies, never resolved
        build: Output, include and compiler configuration
    """

    model_config = ConfigDict(frozen=True)

    root: Path
    name: str = Field(min_length=1)
    version: str = "0.0.0"
    description: str = ""
    entrypoint: str
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict)
    build: BuildSection = Field(default_factory=BuildSection)

    @field_validator("entrypoint")
    @classmethod
    def _entrypoint_is_c_source(cls, value: str) -> str:
        if not value.endswith(C_SOURCE_SUFFIX):
            raise ValueError(f"entrypoint must be a C source file (*{C_SOURCE_SUFFIX})")
        return value

    @property
    def is_library(self) -> bool:
        return self.build.options.kind == ArtifactKind.LIBRARY

    @property
    def entrypoint_path(self) -> Path:
        return (self.root / self.entrypoint).resolve()

    @property
    def output_dir(self) -> Path:
        return (self.root / self.build.outdir).resolve()

    @property
    def artifact_name(self) -> str:
        """File stem for build outputs. Scoped names are flattened."""
        return self.name.lstrip("@").replace("/", "-")


def find_manifest(root: Path) -> Path:
    return root / MANIFEST_FILE


def read_manifest(path: Path) -> dict[str, Any]:
    """
    Read a raw manifest table.

    Raises:
        ConfigError: If the file is missing or is not valid TOML
    """
    if not path.is_file():
        raise ConfigError(f'Package file missing at "{path}".')
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f'Error while parsing package file "{path}": {e}') from e


def load_descriptor(root: Path | str, reporter: Reporter | None = None) -> PackageDescriptor:
    """
    Load and validate the package rooted at ``root``.

    Args:
        root: Package root directory
        reporter: Optional task logger receiving non-fatal warnings. Without
            one, warnings go to the module logger.

    Returns:
        Immutable PackageDescriptor with all defaults resolved

    Raises:
        ConfigError: If the manifest is missing, unparsable or invalid
    """
    root = Path(root).resolve()
    path = find_manifest(root)
    data = read_manifest(path)

    package = data.get("package")
    if not isinstance(package, dict):
        raise ConfigError(f'"{path}" has no [package] table.')

    entrypoint = package.get("entrypoint")
    if not entrypoint:
        raise ConfigError(f'"{path}" doesn\'t specify an entrypoint.')
    if not isinstance(entrypoint, str) or not entrypoint.endswith(C_SOURCE_SUFFIX):
        raise ConfigError(
            f'"{path}": package entrypoint must be a C code file (*{C_SOURCE_SUFFIX}).'
        )

    try:
        descriptor = PackageDescriptor.model_validate(
            {
                "root": root,
                "name": package.get("name", ""),
                "version": package.get("version", "0.0.0"),
                "description": package.get("description", ""),
                "entrypoint": entrypoint,
                "dependencies": data.get("dependencies", {}),
                "dev_dependencies": data.get("dev-dependencies", {}),
                "build": data.get("build", {}),
            }
        )
    except ValidationError as e:
        raise ConfigError(f'Invalid package file "{path}":\n{_format_validation_error(e)}') from e

    for warning in _descriptor_warnings(descriptor):
        if reporter is not None:
            reporter.warn(warning)
        else:
            logger.warning("%s: %s", descriptor.name, warning)

    logger.debug("Loaded %s from %s", descriptor.name, path)
    return descriptor


def _descriptor_warnings(descriptor: PackageDescriptor) -> list[str]:
    warnings = []
    if descriptor.is_library and not descriptor.build.exports:
        warnings.append(
            "This library is not exporting any include paths. "
            "Add directories to [build] exports so dependents can include its headers."
        )
    if any(PurePath(path).is_absolute() for path in descriptor.build.imports):
        warnings.append(
            "This package is importing absolute include paths. Please use relative "
            "include paths that point inside the package directory."
        )
    return warnings


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        lines.append(f"  - {location}: {item['msg']}")
    return "\n".join(lines)
