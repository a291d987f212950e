"""Core Lattice functionality: manifests, dependency resolution, argument assembly, builds."""

from .arguments import assemble_arguments
from .dependencies import DependencyInfo, Resolution, resolve_dependencies
from .errors import (
    BuildStateError,
    CompilationFailure,
    CompilerNotFoundError,
    ConfigError,
    InitError,
    InvocationError,
    JitOnlyViolationError,
    LatticeError,
    MalformedDependencyError,
    UnsupportedPlatformError,
)
from .logsys import Logger, Reporter
from .manifest import PackageDescriptor, load_descriptor
from .orchestrator import (
    BuildPlan,
    BuildReport,
    BuildTask,
    PackageStatus,
    build,
    execute_plan,
    plan_build,
    run_jit,
)
from .state import BuildState, init_build_state

__all__ = [
    "LatticeError",
    "ConfigError",
    "MalformedDependencyError",
    "UnsupportedPlatformError",
    "CompilerNotFoundError",
    "JitOnlyViolationError",
    "BuildStateError",
    "InvocationError",
    "CompilationFailure",
    "InitError",
    "PackageDescriptor",
    "load_descriptor",
    "DependencyInfo",
    "Resolution",
    "resolve_dependencies",
    "assemble_arguments",
    "BuildState",
    "init_build_state",
    "BuildPlan",
    "BuildReport",
    "BuildTask",
    "PackageStatus",
    "plan_build",
    "execute_plan",
    "build",
    "run_jit",
    "Logger",
    "Reporter",
]
