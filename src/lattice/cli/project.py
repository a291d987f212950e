"""
Project commands for Lattice CLI.

- init: Scaffold a new binary or library package
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from lattice.cli_ui import IS_TTY, SelectOption, confirm, print_error, print_success, select_option
from lattice.core.errors import InitError
from lattice.core.init_impl import init_project, sanitize_name
from lattice.core.manifest import ArtifactKind, BoundaryChecks, Subsystem

DEFAULT_PROJECT_NAME = "my-lattice-app"

BOUNDARY_NOTE = "Boundary checking is NOT a replacement for safe programming practices."


def _ask_kind() -> ArtifactKind | None:
    is_windows = sys.platform == "win32"
    return select_option(
        [
            SelectOption(
                ArtifactKind.BINARY,
                f"Application{' (*.exe)' if is_windows else ' (bin)'}",
                "An application that can be distributed.",
            ),
            SelectOption(
                ArtifactKind.LIBRARY,
                "Library (*.a)",
                "A library that can be consumed by other packages.",
            ),
        ],
        title="What kind of package are you creating?",
    )


def _ask_boundary_checks() -> BoundaryChecks | None:
    return select_option(
        [
            SelectOption(BoundaryChecks.NONE, "No."),
            SelectOption(BoundaryChecks.APP, "Yes, for my package.", BOUNDARY_NOTE),
            SelectOption(
                BoundaryChecks.APP_AND_DEPS,
                "Yes, for my package and its dependencies.",
                BOUNDARY_NOTE,
            ),
        ],
        title="Do you want to use boundary checks for increased memory safety?",
    )


def _ask_subsystem() -> Subsystem | None:
    return select_option(
        [
            SelectOption(
                Subsystem.CONSOLE, "Console", "Your application will run in a terminal window."
            ),
            SelectOption(
                Subsystem.WINDOWED, "Windowed", "Your application will run in the window it creates."
            ),
        ],
        title="Is your application a console or a windowed app? (Windows only)",
    )


def init_command(
    name: str | None = typer.Argument(None, help="Package name (e.g. 'my-app' or '@acme/lib')"),
    kind: ArtifactKind | None = typer.Option(None, "--kind", "-k", help="binary or library"),
    boundary_checks: BoundaryChecks | None = typer.Option(
        None, "--boundary-checks", "-b", help="none, app or app+deps"
    ),
    subsystem: Subsystem | None = typer.Option(
        None, "--subsystem", help="Windows subsystem for binaries: console or windowed"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Replace an existing directory"),
) -> None:
    """
    Create a new Lattice package in a directory named after it.

    Anything not given as an option is asked interactively (or defaulted
    when not running in a terminal).

    Examples:
        lattice init                                  # Interactive
        lattice init my-app                           # Binary package
        lattice init mathlib --kind library -b app    # Library with boundary checks
    """
    if name is None:
        name = DEFAULT_PROJECT_NAME
        if IS_TTY:
            name = typer.prompt("What is your application's name?", default=DEFAULT_PROJECT_NAME)

    try:
        project_name = sanitize_name(name)
    except InitError as e:
        print_error(e.message)
        raise typer.Exit(code=1)

    target = Path.cwd() / project_name.rsplit("/", 1)[-1]
    overwrite = force
    if target.exists() and not force:
        if not (IS_TTY and confirm(f'"{target.name}" already exists. Delete it?')):
            print_error(f'"{target.name}" already exists. Use --force to replace it.')
            raise typer.Exit(code=1)
        overwrite = True

    if kind is None:
        kind = (_ask_kind() if IS_TTY else None) or ArtifactKind.BINARY
    if boundary_checks is None:
        boundary_checks = (_ask_boundary_checks() if IS_TTY else None) or BoundaryChecks.NONE
    if subsystem is None:
        subsystem = Subsystem.CONSOLE
        if IS_TTY and sys.platform == "win32" and kind == ArtifactKind.BINARY:
            subsystem = _ask_subsystem() or Subsystem.CONSOLE

    try:
        init_project(
            target_dir=target,
            project_name=project_name,
            kind=kind,
            boundary_checks=boundary_checks,
            subsystem=subsystem,
            overwrite=overwrite,
            progress_callback=typer.echo,
        )
    except InitError as e:
        print_error(f"Initialization failed: {e.message}")
        raise typer.Exit(code=1)

    typer.echo("")
    print_success(f'Package successfully set up in "{target.name}". To get started,')
    typer.echo(f"  cd {target.name}")
    typer.echo("  lattice build" if kind == ArtifactKind.LIBRARY else "  lattice run")
