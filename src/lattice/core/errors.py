"""
Error types for Lattice manifest loading, dependency resolution and builds.

Errors fall into two groups. Fatal errors propagate and halt the whole run.
Recoverable errors (``recoverable = True``) are reported through the task
logger and only abandon the package they belong to.
"""

from __future__ import annotations

from pathlib import Path


class LatticeError(Exception):
    """Base exception for all Lattice errors."""

    recoverable: bool = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(LatticeError):
    """
    Raised when a package manifest cannot be turned into a descriptor.

    Examples:
    - lattice.toml missing or not valid TOML
    - No entrypoint declared
    - Entrypoint is not a C source file
    - Unknown or mistyped build options
    """

    pass


class MalformedDependencyError(LatticeError):
    """
    Raised when a declared dependency cannot be used as a C library.

    Examples:
    - Dependency directory has no lattice.toml
    - Dependency entrypoint is not a C source file
    - Dependency is not built as a library
    - Dependency graph contains a cycle
    """

    recoverable = True

    def __init__(self, message: str, package: str = "", dependency: str = ""):
        self.package = package
        self.dependency = dependency
        super().__init__(message)


class UnsupportedPlatformError(LatticeError):
    """Raised when no bundled compiler exists for the host platform."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f'Unsupported platform "{platform}".')


class CompilerNotFoundError(LatticeError):
    """Raised when the compiler binary is missing from its expected location."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f'Unable to find compiler at "{path}".')


class JitOnlyViolationError(LatticeError):
    """Raised when an ahead-of-time build is requested for a jit-only binary."""

    def __init__(self, package: str):
        self.package = package
        super().__init__(
            f'"{package}" is marked jit-only and can only be executed with "lattice run".'
        )


class BuildStateError(LatticeError):
    """Raised when the build state is used out of order (e.g. JIT run before build)."""

    pass


class InvocationError(LatticeError):
    """
    Raised when the toolchain process cannot be spawned or exits unsuccessfully.

    Attributes:
        returncode: Exit code of the process, or None if it never started
        output: Combined stdout/stderr if it was captured
    """

    def __init__(self, message: str, returncode: int | None = None, output: str | None = None):
        self.returncode = returncode
        self.output = output
        super().__init__(message)


class CompilationFailure(InvocationError):
    """Raised when the compiler exits with a non-zero status."""

    recoverable = True


class InitError(LatticeError):
    """Raised when project initialization fails."""

    pass
