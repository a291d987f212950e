"""
Toolchain process invocation.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import CompilationFailure, InvocationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a finished toolchain process."""

    returncode: int
    output: str | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_toolchain(
    binary: Path,
    args: Sequence[str],
    capture: bool = True,
    check: bool = True,
) -> ProcessResult:
    """
    Run the toolchain binary and wait for it to exit.

    The binary's own directory is used as the working directory.

    Args:
        binary: Compiler binary
        args: Assembled argument vector
        capture: Merge stdout/stderr into ``ProcessResult.output`` (decoded as
            UTF-8, undecodable bytes replaced). When False
            the child's streams are forwarded live (interactive runs).
        check: Raise CompilationFailure on a non-zero exit

    Returns:
        ProcessResult with the exit code and any captured output

    Raises:
        InvocationError: If the process cannot be spawned
        CompilationFailure: If ``check`` is set and the exit code is non-zero
    """
    command = [str(binary), *args]
    logger.debug("Running %s", shlex.join(command))

    try:
        completed = subprocess.run(
            command,
            cwd=binary.parent,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.STDOUT if capture else None,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise InvocationError(f'Unable to start "{binary}": {e}') from e

    result = ProcessResult(returncode=completed.returncode, output=completed.stdout)
    if check and not result.ok:
        raise CompilationFailure(
            f"Process exited with code {result.returncode}",
            returncode=result.returncode,
            output=result.output,
        )
    return result
