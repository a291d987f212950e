"""
Build commands for Lattice CLI.

- build: Compile the package and its dependencies to disk
- run: Build dependencies, then compile and execute the package directly
"""

from __future__ import annotations

from pathlib import Path

import typer

from lattice.cli.utils import configure_logging
from lattice.cli_ui import print_error, print_plan, print_success, print_warning
from lattice.core.arguments import assemble_arguments
from lattice.core.errors import LatticeError
from lattice.core.logsys import Logger
from lattice.core.orchestrator import BuildReport, PackageStatus, build, plan_build, run_jit
from lattice.core.state import BuildState, init_build_state


def _summarize(report: BuildReport, log: Logger) -> bool:
    """Print the outcome of a build. Returns True on success."""
    built = [name for name, status in report.statuses.items() if status == PackageStatus.BUILT]
    abandoned = [
        name for name, status in report.statuses.items() if status == PackageStatus.ABANDONED
    ]
    failed = [name for name, status in report.statuses.items() if status == PackageStatus.FAILED]

    for name in abandoned:
        print_warning(f"Skipped {name} (malformed dependencies)")

    if report.ok and not log.error_count:
        if built:
            print_success(f"Built {len(built)} package{'' if len(built) == 1 else 's'}")
        return True

    if failed:
        print_error(f"Compilation failed for: {', '.join(failed)}")
    print_error(
        f"Build finished with {log.error_count} error{'' if log.error_count == 1 else 's'}"
    )
    return False


def _dry_run(state: BuildState, log: Logger) -> bool:
    plan = plan_build(state, state.root, log)
    log.finish()

    rows = []
    for task in plan.tasks:
        args = assemble_arguments(state, task.descriptor, task.dependencies, task.is_dependency)
        rows.append((task.name, "dependency" if task.is_dependency else "root", args))
    print_plan(rows)

    for name in plan.abandoned:
        print_warning(f"Would skip {name} (malformed dependencies)")
    return not plan.failures


def build_command(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Package root directory"),
    clean: bool = typer.Option(False, "--clean", help="Wipe the .lattice work directory first"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the build plan without compiling"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
) -> None:
    """
    Build the package in PATH and its dependencies.

    Dependencies are compiled into .lattice/lib, the package itself into its
    configured output directory.

    Examples:
        lattice build                  # Build the package in the current directory
        lattice build -p ./app --clean # Clean rebuild of ./app
        lattice build --dry-run        # Show the build order and compiler arguments
    """
    configure_logging(verbose)
    log = Logger()

    try:
        log.task(f"Loading {path}")
        state = init_build_state(path, clean=clean, reporter=log)
        log.task(f"Resolving dependencies of {state.root.name}")

        if dry_run:
            ok = _dry_run(state, log)
        else:
            report = build(state, state.root, log)
            log.finish()
            ok = _summarize(report, log)
    except LatticeError as e:
        log.finish("bad")
        print_error(e.message)
        raise typer.Exit(code=1)

    if not ok:
        raise typer.Exit(code=1)


def run_command(
    ctx: typer.Context,
    path: Path = typer.Option(Path("."), "--path", "-p", help="Package root directory"),
    clean: bool = typer.Option(False, "--clean", help="Wipe the .lattice work directory first"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
) -> None:
    """
    Build dependencies, then compile and run the package without writing a binary.

    Arguments after "--" are passed to the program.

    Examples:
        lattice run
        lattice run -- input.txt --fast
    """
    configure_logging(verbose)
    log = Logger()

    try:
        log.task(f"Loading {path}")
        state = init_build_state(path, clean=clean, jit=True, reporter=log)
        log.task(f"Resolving dependencies of {state.root.name}")
        report = build(state, state.root, log)
        log.finish()
        if not _summarize(report, log):
            raise typer.Exit(code=1)
        exit_code = run_jit(state, list(ctx.args))
    except LatticeError as e:
        log.finish("bad")
        print_error(e.message)
        raise typer.Exit(code=1)

    raise typer.Exit(code=exit_code)
