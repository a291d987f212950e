"""Tests for CLI commands."""

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from lattice.cli import app


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path, make_package, make_dependency) -> Path:
    """An app depending on a single library."""
    root = make_package(tmp_path / "app", "app", dependencies=["mathlib"])
    make_dependency(root, "mathlib")
    return root


@pytest.fixture(autouse=True)
def no_tty(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("lattice.cli.project.IS_TTY", False)


@pytest.fixture(autouse=True)
def restore_logging():
    """configure_logging replaces the root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_version(cli_runner: CliRunner, fake_compiler: Path):
    result = cli_runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "Lattice version" in result.stdout
    assert "Compiler:" in result.stdout


def test_no_args_shows_help(cli_runner: CliRunner):
    result = cli_runner.invoke(app, [])

    assert "build" in result.output
    assert "run" in result.output
    assert "init" in result.output


class TestInit:
    def test_init_binary(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.chdir(tmp_path)

        result = cli_runner.invoke(app, ["init", "hello"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "hello" / "lattice.toml").is_file()
        assert (tmp_path / "hello" / "src" / "main.c").is_file()
        assert "lattice run" in result.stdout

    def test_init_scoped_library(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.chdir(tmp_path)

        result = cli_runner.invoke(
            app, ["init", "@acme/strings", "--kind", "library", "-b", "app+deps"]
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "strings" / "include" / "strings.h").is_file()
        assert "lattice build" in result.stdout

    def test_init_existing_directory(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "hello").mkdir()

        result = cli_runner.invoke(app, ["init", "hello"])

        assert result.exit_code == 1
        assert "already exists" in result.stdout

    def test_init_force(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "hello").mkdir()

        result = cli_runner.invoke(app, ["init", "hello", "--force"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "hello" / "lattice.toml").is_file()

    def test_init_reserved_name(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.chdir(tmp_path)

        result = cli_runner.invoke(app, ["init", "lattice_modules"])

        assert result.exit_code == 1
        assert not (tmp_path / "lattice_modules").exists()


class TestBuild:
    def test_build(self, cli_runner: CliRunner, project: Path, fake_compiler, toolchain):
        result = cli_runner.invoke(app, ["build", "--path", str(project)])

        assert result.exit_code == 0, result.output
        assert toolchain.built == ["mathlib", "app"]
        assert "Built 2 packages" in result.stdout

    def test_clean(self, cli_runner: CliRunner, project: Path, fake_compiler, toolchain):
        stale = project / ".lattice" / "stale"
        stale.parent.mkdir()
        stale.write_text("")

        result = cli_runner.invoke(app, ["build", "-p", str(project), "--clean"])

        assert result.exit_code == 0, result.output
        assert not stale.exists()

    def test_dry_run(self, cli_runner: CliRunner, project: Path, fake_compiler, toolchain):
        result = cli_runner.invoke(app, ["build", "-p", str(project), "--dry-run"])

        assert result.exit_code == 0, result.output
        assert toolchain.calls == []
        assert "Build plan" in result.stdout
        assert "mathlib" in result.stdout

    def test_missing_manifest(self, cli_runner: CliRunner, tmp_path: Path, fake_compiler):
        result = cli_runner.invoke(app, ["build", "-p", str(tmp_path)])

        assert result.exit_code == 1
        assert "Package file missing" in result.stdout

    def test_compile_failure_exits_non_zero(
        self, cli_runner: CliRunner, project: Path, fake_compiler, toolchain
    ):
        toolchain.fail = {"mathlib"}

        result = cli_runner.invoke(app, ["build", "-p", str(project)])

        assert result.exit_code == 1
        assert toolchain.built == ["mathlib", "app"]
        assert "Compilation failed for: mathlib" in result.stdout

    def test_malformed_dependency(
        self, cli_runner: CliRunner, tmp_path: Path, make_package, fake_compiler, toolchain
    ):
        root = make_package(tmp_path / "app", "app", dependencies=["ghost"])
        (root / "lattice_modules" / "ghost").mkdir(parents=True)

        result = cli_runner.invoke(app, ["build", "-p", str(root)])

        assert result.exit_code == 1
        assert toolchain.calls == []
        assert "Skipped app" in result.stdout

    def test_root_manifest_warnings_are_shown(
        self,
        cli_runner: CliRunner,
        tmp_path: Path,
        make_package,
        fake_compiler,
        toolchain,
        monkeypatch: pytest.MonkeyPatch,
    ):
        make_package(tmp_path / "lib", "mathlib", kind="library")
        monkeypatch.chdir(tmp_path / "lib")

        result = cli_runner.invoke(app, ["build"])

        assert result.exit_code == 0, result.output
        assert "[Loading .] This library is not exporting any include paths" in result.output

    def test_jit_only_package(
        self, cli_runner: CliRunner, tmp_path: Path, make_package, fake_compiler, toolchain
    ):
        root = make_package(tmp_path / "app", "app", options={"jit-only": True})

        result = cli_runner.invoke(app, ["build", "-p", str(root)])

        assert result.exit_code == 1
        assert "jit-only" in result.stdout


class TestRun:
    def test_run_forwards_arguments(
        self, cli_runner: CliRunner, project: Path, fake_compiler, toolchain
    ):
        result = cli_runner.invoke(app, ["run", "-p", str(project), "--", "input.txt", "-x"])

        assert result.exit_code == 0, result.output
        assert toolchain.built == ["mathlib"]
        assert toolchain.calls[-1][0] == "-run"
        assert toolchain.calls[-1][-3:] == [
            str(project.resolve() / "src" / "main.c"),
            "input.txt",
            "-x",
        ]

    def test_run_exit_code(self, cli_runner: CliRunner, project: Path, fake_compiler, toolchain):
        toolchain.returncode = 7

        result = cli_runner.invoke(app, ["run", "-p", str(project)])

        assert result.exit_code == 7

    def test_run_stops_on_compile_failure(
        self, cli_runner: CliRunner, project: Path, fake_compiler, toolchain
    ):
        toolchain.fail = {"mathlib"}

        result = cli_runner.invoke(app, ["run", "-p", str(project)])

        assert result.exit_code == 1
        assert all("-run" not in args for args in toolchain.calls)
