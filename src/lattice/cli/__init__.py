"""
Lattice CLI.

Command modules:

- build.py: build and run (JIT) commands
- project.py: package scaffolding (init)
- utils.py: Shared utilities
"""

from __future__ import annotations

import typer

from lattice.cli.build import build_command, run_command
from lattice.cli.project import init_command
from lattice.cli.utils import get_version, version_callback

app = typer.Typer(
    help="""Lattice – dependency-aware builds for C packages

Commands:
  • init   Create a new package
  • build  Compile the package and its dependencies
  • run    Compile and execute the package directly (JIT)
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """Lattice CLI main callback for global options."""
    pass


app.command(name="init")(init_command)
app.command(name="build")(build_command)
app.command(
    name="run",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)(run_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, prog_name="lattice")


__all__ = [
    "app",
    "main",
    "get_version",
    "version_callback",
]
