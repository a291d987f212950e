"""
Rich console helpers for the Lattice CLI.

Styled status lines, the numbered selection menu used by ``lattice init``,
and the build plan table printed by ``lattice build --dry-run``.
"""

from __future__ import annotations

import shlex
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from lattice.core.styles import STYLES

# Interactive prompts need a terminal on both ends
IS_TTY = sys.stdin.isatty() and sys.stdout.isatty()

console = Console()

T = TypeVar("T")


@dataclass
class SelectOption(Generic[T]):
    """An option in a selection menu."""

    value: T
    label: str
    description: str = ""


def print_header(title: str, subtitle: str = "") -> None:
    console.print()
    console.print(Text(title, style=STYLES["title"]))
    if subtitle:
        console.print(Text(subtitle, style=STYLES["subtitle"]))
    console.print()


def print_success(message: str) -> None:
    console.print(Text(f"✓ {message}", style=STYLES["success"]))


def print_error(message: str) -> None:
    console.print(Text(f"✗ {message}", style=STYLES["error"]))


def print_warning(message: str) -> None:
    console.print(Text(f"⚠ {message}", style=STYLES["warning"]))


def print_info(message: str) -> None:
    console.print(Text(f"ℹ {message}", style=STYLES["info"]))


def select_option(
    options: Sequence[SelectOption[T]],
    title: str,
    default: int = 0,
) -> T | None:
    """
    Numbered selection menu.

    Enter accepts the default option; "q" cancels.

    Returns:
        Selected value or None if cancelled
    """
    if not options:
        return None

    print_header(title)
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Num", style="cyan", width=4)
    table.add_column("Name", style="white")
    table.add_column("Description", style="bright_black")
    for i, opt in enumerate(options, 1):
        marker = "›" if i - 1 == default else " "
        table.add_row(f"{marker}{i}.", opt.label, opt.description)
    console.print(table)

    while True:
        try:
            choice = console.input(
                Text(f"Enter number [{default + 1}]: ", style=STYLES["info"])
            ).strip()
        except (KeyboardInterrupt, EOFError):
            console.print()
            return None

        if not choice:
            return options[default].value
        if choice.lower() in ("q", "quit", "cancel"):
            return None
        if choice.isdigit() and 1 <= int(choice) <= len(options):
            return options[int(choice) - 1].value

        console.print(Text(f"Invalid choice. Enter 1-{len(options)}.", style=STYLES["error"]))


def confirm(message: str, default: bool = False) -> bool:
    """Ask for confirmation with a y/N prompt."""
    suffix = " [Y/n]" if default else " [y/N]"
    try:
        response = console.input(Text(message + suffix + " ", style=STYLES["info"]))
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False

    response = response.strip().lower()
    if not response:
        return default
    return response in ("y", "yes")


def print_plan(rows: Sequence[tuple[str, str, Sequence[str]]]) -> None:
    """Print (package, role, arguments) rows of a build plan."""
    table = Table(title="Build plan", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("#", style="dim", width=3)
    table.add_column("Package", style="white bold")
    table.add_column("Role", style="cyan")
    table.add_column("Arguments", style="bright_black", overflow="fold")
    for i, (name, role, args) in enumerate(rows, 1):
        table.add_row(str(i), name, role, shlex.join(args))
    console.print(table)
