"""Shared pytest fixtures for Lattice tests."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import pytest

from lattice.core.dependencies import dependency_path
from lattice.core.errors import CompilationFailure
from lattice.core.logsys import Logger
from lattice.core.process import ProcessResult


def write_package(
    root: Path,
    name: str,
    kind: str = "binary",
    dependencies: Sequence[str] = (),
    imports: Sequence[str] = (),
    exports: Sequence[str] = (),
    options: dict[str, object] | None = None,
    compiler: dict[str, object] | None = None,
    entrypoint: str = "src/main.c",
) -> Path:
    """Write a lattice.toml (plus entrypoint and include dirs) into ``root``."""
    root.mkdir(parents=True, exist_ok=True)

    lines = [
        "[package]",
        f"name = {json.dumps(name)}",
        'version = "1.0.0"',
        f"entrypoint = {json.dumps(entrypoint)}",
        "",
        "[dependencies]",
    ]
    lines += [f'{json.dumps(dep)} = "^1.0.0"' for dep in dependencies]
    lines += [
        "",
        "[build]",
        f"imports = {json.dumps(list(imports))}",
        f"exports = {json.dumps(list(exports))}",
        "",
        "[build.options]",
        f"kind = {json.dumps(kind)}",
    ]
    lines += [f"{key} = {json.dumps(value)}" for key, value in (options or {}).items()]
    if compiler:
        lines += ["", "[build.compiler]"]
        lines += [f"{key} = {json.dumps(value)}" for key, value in compiler.items()]

    (root / "lattice.toml").write_text("\n".join(lines) + "\n")

    source = root / entrypoint
    source.parent.mkdir(parents=True, exist_ok=True)
    source.write_text("int main(void) { return 0; }\n")
    for directory in (*imports, *exports):
        if not Path(directory).is_absolute():
            (root / directory).mkdir(parents=True, exist_ok=True)
    return root


def add_dependency(parent: Path, name: str, **kwargs) -> Path:
    """Install a library package into ``parent``'s lattice_modules."""
    kwargs.setdefault("kind", "library")
    kwargs.setdefault("exports", ["include"])
    kwargs.setdefault("entrypoint", "src/lib.c")
    return write_package(dependency_path(parent, name), name, **kwargs)


class RecordingToolchain:
    """Stand-in for ``run_toolchain`` that records argument vectors."""

    def __init__(self, fail: Sequence[str] = (), returncode: int = 0) -> None:
        self.calls: list[list[str]] = []
        self.fail = set(fail)
        self.returncode = returncode

    def __call__(
        self, binary: Path, args: Sequence[str], capture: bool = True, check: bool = True
    ) -> ProcessResult:
        args = list(args)
        self.calls.append(args)
        if self.artifact(args) in self.fail and check:
            raise CompilationFailure(
                "Process exited with code 1", returncode=1, output="main.c:1: error: boom\n"
            )
        return ProcessResult(returncode=self.returncode if not capture else 0, output="")

    @staticmethod
    def artifact(args: Sequence[str]) -> str | None:
        if "-o" not in args:
            return None
        return Path(args[args.index("-o") + 1]).stem

    @property
    def built(self) -> list[str]:
        return [name for name in map(self.artifact, self.calls) if name is not None]


@pytest.fixture
def fake_compiler(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point LATTICE_COMPILER at an empty file."""
    compiler = tmp_path / "toolchain" / "tcc"
    compiler.parent.mkdir()
    compiler.write_text("")
    monkeypatch.setenv("LATTICE_COMPILER", str(compiler))
    return compiler


@pytest.fixture
def toolchain(monkeypatch: pytest.MonkeyPatch) -> RecordingToolchain:
    recorder = RecordingToolchain()
    monkeypatch.setattr("lattice.core.orchestrator.run_toolchain", recorder)
    return recorder


@pytest.fixture
def quiet_logger() -> Logger:
    return Logger(quiet=True)


@pytest.fixture
def make_package():
    return write_package


@pytest.fixture
def make_dependency():
    return add_dependency
