"""
Task-oriented build logger.

A build is reported as a sequence of tasks ("Building mathlib", ...). Each
task shows a spinner with a status line while it runs. Warnings, errors and
infos raised during a task are buffered and flushed, prefixed with the task
name, when the next task starts or when the logger is finished.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

from rich.console import Console
from rich.status import Status
from rich.text import Text

from .styles import STYLES

logger = logging.getLogger(__name__)

TaskStatus = Literal["good", "bad"]


class Reporter(Protocol):
    """Interface the core uses to report progress to the user."""

    def task(self, name: str, final_status: TaskStatus = "good") -> None:
        """End the current task and start a new one."""
        ...

    def status(self, text: str) -> None:
        """Update the current task's status line."""
        ...

    def info(self, text: str) -> None: ...

    def warn(self, text: str) -> None: ...

    def error(self, text: str) -> None:
        """Record a non-throwing error."""
        ...


@dataclass
class TaskRecord:
    """Messages buffered for a single task."""

    name: str
    infos: list[str] = field(default_factory=list)
    warns: list[str] = field(default_factory=list)
    errs: list[str] = field(default_factory=list)


def format_counts(warnings: int, errors: int) -> str:
    """Format the "(1 warning, 2 errors)" status suffix."""
    if not warnings and not errors:
        return ""
    parts = []
    if warnings:
        parts.append(f"{warnings} warning{'' if warnings == 1 else 's'}")
    if errors:
        parts.append(f"{errors} error{'' if errors == 1 else 's'}")
    return f" ({', '.join(parts)})"


class Logger:
    """
    Rich-backed implementation of :class:`Reporter`.

    Args:
        quiet: Record messages without printing anything (tests, dry runs)
        console: Console to render to (defaults to a stderr console)
    """

    def __init__(self, quiet: bool = False, console: Console | None = None) -> None:
        self.quiet = quiet
        self.console = console or Console(stderr=True)
        self.state: TaskRecord | None = None
        self.history: list[TaskRecord] = []
        self._spinner: Status | None = None
        self._status_text = ""
        self._status = ""

    @property
    def error_count(self) -> int:
        return sum(len(record.errs) for record in self._records())

    @property
    def warning_count(self) -> int:
        return sum(len(record.warns) for record in self._records())

    @property
    def errors(self) -> list[str]:
        return [err for record in self._records() for err in record.errs]

    @property
    def warnings(self) -> list[str]:
        return [warn for record in self._records() for warn in record.warns]

    def _records(self) -> list[TaskRecord]:
        records = list(self.history)
        if self.state is not None:
            records.append(self.state)
        return records

    def task(self, name: str, final_status: TaskStatus = "good") -> None:
        self._close(final_status)
        logger.debug("Task started: %s", name)
        self.state = TaskRecord(name=name)
        self._status_text = name
        self._status = name
        if not self.quiet:
            self._spinner = self.console.status(name)
            self._spinner.start()

    def status(self, text: str) -> None:
        self._status_text = text
        if self.state is not None:
            text += format_counts(len(self.state.warns), len(self.state.errs))
        self._status = text
        if self._spinner is not None:
            self._spinner.update(text)

    def info(self, text: str) -> None:
        logger.debug("info: %s", text)
        self._current().infos.append(text)

    def warn(self, text: str) -> None:
        logger.debug("warning: %s", text)
        self._current().warns.append(text)
        self.status(self._status_text)

    def error(self, text: str) -> None:
        logger.debug("error: %s", text)
        self._current().errs.append(text)
        self.status(self._status_text)

    def finish(self, final_status: TaskStatus | None = None) -> None:
        """End the last task and flush everything still buffered."""
        if final_status is None:
            final_status = "bad" if self.state is not None and self.state.errs else "good"
        self._close(final_status)
        self.state = None

    def _current(self) -> TaskRecord:
        # Messages logged before the first task go to an anonymous task
        if self.state is None:
            self.state = TaskRecord(name="lattice")
        return self.state

    def _close(self, final_status: TaskStatus) -> None:
        if self._spinner is not None:
            self._spinner.stop()
            self._spinner = None
            if final_status == "bad":
                self.console.print(Text(f"✗ {self._status}", style=STYLES["error"]))
            else:
                self.console.print(Text(f"✓ {self._status}", style=STYLES["success"]))

        if self.state is None:
            return

        record = self.state
        self.history.append(record)
        self.state = None
        if self.quiet:
            return

        for err in record.errs:
            self.console.print(Text(f"[{record.name}] {err}", style=STYLES["error"]))
        for warn in record.warns:
            self.console.print(Text(f"[{record.name}] {warn}", style=STYLES["warning"]))
        for info in record.infos:
            self.console.print(Text(f"[{record.name}] {info}", style=STYLES["info"]))
