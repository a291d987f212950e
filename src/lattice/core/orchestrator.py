"""
Build orchestration for Lattice packages.

A build happens in two phases:

1. Planning: walk the dependency graph depth-first from a package, resolving
   each package's direct dependencies, and produce an ordered task list where
   every dependency precedes its dependents. Names already built in this run
   (or already planned) are skipped, so a library shared by several packages
   is planned once.
2. Execution: run the tasks in order, invoking the compiler for each package
   (or deferring the root in JIT mode) and marking it built.

Failures are split in two. Fatal errors (invalid root manifest, missing
compiler, jit-only violations, spawn failures) are raised and halt the run.
Recoverable ones (malformed dependencies, compiler errors) are reported
through the task logger and recorded in the BuildReport.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from .arguments import assemble_arguments, output_path
from .dependencies import DependencyInfo, resolve_dependencies
from .errors import (
    BuildStateError,
    CompilationFailure,
    JitOnlyViolationError,
    MalformedDependencyError,
)
from .manifest import PackageDescriptor
from .process import run_toolchain

if TYPE_CHECKING:
    from .logsys import Reporter
    from .state import BuildState

logger = logging.getLogger(__name__)


class PackageStatus(StrEnum):
    """Outcome of a package within one run."""

    BUILT = "built"  # Compiler ran successfully
    FAILED = "failed"  # Compiler ran and exited non-zero
    DEFERRED = "deferred"  # Root in JIT mode; compiled by run_jit
    ABANDONED = "abandoned"  # A dependency was malformed; never compiled
    CACHED = "cached"  # Already built earlier in this run


@dataclass(frozen=True)
class BuildTask:
    """One package to compile, with its resolved direct dependencies."""

    descriptor: PackageDescriptor
    dependencies: tuple[DependencyInfo, ...]
    is_dependency: bool

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass
class BuildPlan:
    """Ordered build tasks (dependencies first) and what had to be dropped."""

    tasks: list[BuildTask] = field(default_factory=list)
    abandoned: list[str] = field(default_factory=list)
    failures: list[MalformedDependencyError] = field(default_factory=list)

    @property
    def order(self) -> list[str]:
        return [task.name for task in self.tasks]


@dataclass
class BuildReport:
    """What happened to every package touched by a build."""

    statuses: dict[str, PackageStatus] = field(default_factory=dict)
    failures: list[MalformedDependencyError] = field(default_factory=list)
    compile_errors: list[CompilationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.compile_errors

    def status_of(self, name: str) -> PackageStatus | None:
        return self.statuses.get(name)


def plan_build(
    state: BuildState,
    descriptor: PackageDescriptor,
    reporter: Reporter,
    is_dependency: bool = False,
) -> BuildPlan:
    """
    Compute the ordered task list for building ``descriptor``.

    Does not compile anything. A package with a malformed or abandoned
    dependency is abandoned, along with everything that depends on it;
    healthy siblings keep their tasks.
    """
    plan = BuildPlan()
    planned: set[str] = set()
    abandoned: set[str] = set()
    visiting: list[str] = []
    resolved: dict[str, DependencyInfo | None] = {}

    def visit(desc: PackageDescriptor, as_dependency: bool) -> bool:
        name = desc.name
        if state.is_built(name) or name in planned:
            return True
        if name in abandoned:
            return False
        if name in visiting:
            cycle = " -> ".join([*visiting[visiting.index(name) :], name])
            failure = MalformedDependencyError(
                f"Circular dependency detected: {cycle}",
                package=visiting[-1],
                dependency=name,
            )
            reporter.error(failure.message)
            plan.failures.append(failure)
            return False

        visiting.append(name)
        reporter.status(f"Resolving dependencies of {name}")
        resolution = resolve_dependencies(desc, reporter, resolved)
        for failure in resolution.failures:
            reporter.error(failure.message)
            plan.failures.append(failure)

        buildable = resolution.ok
        for dep in resolution.dependencies:
            if not visit(dep.descriptor, True):
                buildable = False
        visiting.pop()

        if desc.name == state.root.name and not as_dependency:
            state.dependencies.extend(resolution.dependencies)

        if not buildable:
            logger.debug("Abandoning %s", name)
            abandoned.add(name)
            plan.abandoned.append(name)
            return False

        plan.tasks.append(BuildTask(desc, resolution.dependencies, as_dependency))
        planned.add(name)
        return True

    visit(descriptor, is_dependency)
    logger.debug("Build order: %s", plan.order)
    return plan


def execute_plan(state: BuildState, plan: BuildPlan, reporter: Reporter) -> BuildReport:
    """
    Run planned tasks in order.

    Raises:
        JitOnlyViolationError: If a jit-only binary is built ahead of time
        InvocationError: If the compiler cannot be started
    """
    report = BuildReport(failures=list(plan.failures))
    for name in plan.abandoned:
        report.statuses[name] = PackageStatus.ABANDONED

    for task in plan.tasks:
        if state.is_built(task.name):
            report.statuses[task.name] = PackageStatus.CACHED
            continue
        report.statuses[task.name] = _execute_task(state, task, reporter, report)
        state.mark_built(task.name)

    return report


def _execute_task(
    state: BuildState, task: BuildTask, reporter: Reporter, report: BuildReport
) -> PackageStatus:
    desc = task.descriptor
    reporter.task(f"Building {desc.name}")

    if state.jit and not task.is_dependency and desc.name == state.root.name:
        # The root is compiled and executed in one go by run_jit
        state.jit_ready = True
        reporter.status(f"{desc.name} is ready to run")
        return PackageStatus.DEFERRED

    if not desc.is_library and desc.build.options.jit_only and not state.jit:
        raise JitOnlyViolationError(desc.name)

    if task.is_dependency or task.dependencies:
        state.library_dir.mkdir(parents=True, exist_ok=True)
    output_path(state, desc, task.is_dependency).parent.mkdir(parents=True, exist_ok=True)

    args = assemble_arguments(state, desc, task.dependencies, task.is_dependency)
    reporter.status(f"Compiling {desc.name}")
    try:
        run_toolchain(state.compiler, args)
    except CompilationFailure as e:
        reporter.error(f"Compilation of {desc.name} failed. {e.message}")
        if e.output:
            reporter.info(e.output.rstrip())
        report.compile_errors.append(e)
        return PackageStatus.FAILED

    reporter.status(f"Built {desc.name}")
    return PackageStatus.BUILT


def build(
    state: BuildState,
    descriptor: PackageDescriptor,
    reporter: Reporter,
    is_dependency: bool = False,
) -> BuildReport:
    """
    Build a package and its dependencies, each at most once per run.

    Args:
        state: Run-wide state from ``init_build_state``
        descriptor: Package to build
        reporter: Task logger
        is_dependency: Package is being built as someone's dependency

    Returns:
        BuildReport describing every package touched
    """
    if state.is_built(descriptor.name):
        return BuildReport(statuses={descriptor.name: PackageStatus.CACHED})

    plan = plan_build(state, descriptor, reporter, is_dependency)
    return execute_plan(state, plan, reporter)


def run_jit(state: BuildState, runtime_args: Sequence[str] = ()) -> int:
    """
    Compile and execute the root package directly, without writing an artifact.

    Must be called after ``build`` in a JIT run. The program's output streams
    are forwarded live, so any task logger should be finished beforehand.

    Returns:
        The program's exit code

    Raises:
        BuildStateError: If the root build step was not reached in JIT mode
        InvocationError: If the compiler cannot be started
    """
    if not state.jit_ready:
        raise BuildStateError(
            f'"{state.root.name}" is not ready to run; build it in JIT mode first.'
        )

    args = assemble_arguments(
        state,
        state.root,
        state.dependencies,
        is_dependency=False,
        run=True,
        runtime_args=runtime_args,
    )
    logger.debug("Running %s", state.root.name)
    result = run_toolchain(state.compiler, args, capture=False, check=False)
    logger.debug("%s exited with %s", state.root.name, result.returncode)
    return result.returncode
