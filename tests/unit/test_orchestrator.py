"""
Tests for build planning and execution.

The compiler is replaced by a recorder (see conftest.RecordingToolchain), so
these tests check which packages get compiled, in which order and with
which outcome, without needing tcc.
"""

from pathlib import Path

import pytest

from lattice.core.dependencies import dependency_path
from lattice.core.errors import BuildStateError, JitOnlyViolationError
from lattice.core.orchestrator import PackageStatus, build, plan_build, run_jit
from lattice.core.state import init_build_state


@pytest.fixture
def app_root(tmp_path: Path) -> Path:
    return tmp_path / "app"


@pytest.fixture
def diamond(app_root: Path, make_package, make_dependency) -> Path:
    """app -> (left, right), left -> core, right -> core."""
    make_package(app_root, "app", dependencies=["left", "right"])
    left = make_dependency(app_root, "left", dependencies=["core"])
    right = make_dependency(app_root, "right", dependencies=["core"])
    make_dependency(left, "core")
    make_dependency(right, "core")
    return app_root


class TestPlan:
    def test_dependencies_precede_dependents(self, diamond, fake_compiler, quiet_logger):
        state = init_build_state(diamond)

        plan = plan_build(state, state.root, quiet_logger)

        assert plan.order == ["core", "left", "right", "app"]
        assert [task.is_dependency for task in plan.tasks] == [True, True, True, False]
        assert plan.abandoned == []
        assert plan.failures == []

    def test_root_dependencies_recorded_on_state(self, diamond, fake_compiler, quiet_logger):
        state = init_build_state(diamond)

        plan_build(state, state.root, quiet_logger)

        assert [dep.name for dep in state.dependencies] == ["left", "right"]

    def test_cycle_is_reported_not_raised(
        self, app_root, make_package, make_dependency, fake_compiler, quiet_logger
    ):
        make_package(app_root, "app", dependencies=["a"])
        a = make_dependency(app_root, "a", dependencies=["b"])
        b = make_dependency(a, "b", dependencies=["a"])
        make_dependency(b, "a", dependencies=["b"])
        state = init_build_state(app_root)

        plan = plan_build(state, state.root, quiet_logger)

        assert plan.tasks == []
        assert plan.abandoned == ["b", "a", "app"]
        assert len(plan.failures) == 1
        assert "Circular dependency detected: a -> b -> a" in plan.failures[0].message
        assert quiet_logger.error_count == 1


    def test_shared_dependency_resolved_once(
        self, app_root, make_package, make_dependency, fake_compiler, quiet_logger
    ):
        make_package(app_root, "app", dependencies=["left", "right"])
        left = make_dependency(app_root, "left", dependencies=["core"])
        right = make_dependency(app_root, "right", dependencies=["core"])
        for parent in (left, right):
            make_dependency(parent, "core", exports=["include", "../outside"])
        state = init_build_state(app_root)

        plan = plan_build(state, state.root, quiet_logger)

        assert plan.order == ["core", "left", "right", "app"]
        outside = [w for w in quiet_logger.warnings if "outside of its package" in w]
        assert len(outside) == 1


class TestBuild:
    def test_shared_dependency_built_once(self, diamond, fake_compiler, toolchain, quiet_logger):
        state = init_build_state(diamond)

        report = build(state, state.root, quiet_logger)

        assert report.ok
        assert toolchain.built == ["core", "left", "right", "app"]
        assert all(status == PackageStatus.BUILT for status in report.statuses.values())
        assert state.built == {"core", "left", "right", "app"}

    def test_dependencies_go_to_library_dir(
        self, diamond, fake_compiler, toolchain, quiet_logger
    ):
        state = init_build_state(diamond)

        build(state, state.root, quiet_logger)

        outputs = [Path(args[args.index("-o") + 1]) for args in toolchain.calls]
        libraries = [state.library_dir / f"{name}.a" for name in ("core", "left", "right")]
        assert outputs[:3] == libraries
        assert outputs[3] == state.root.output_dir / "app"
        assert state.library_dir.is_dir()
        assert state.root.output_dir.is_dir()

    def test_second_build_is_cached(self, diamond, fake_compiler, toolchain, quiet_logger):
        state = init_build_state(diamond)
        build(state, state.root, quiet_logger)

        report = build(state, state.root, quiet_logger)

        assert report.status_of("app") == PackageStatus.CACHED
        assert len(toolchain.calls) == 4

    def test_malformed_dependency_abandons_parent_only(
        self, app_root, make_package, make_dependency, fake_compiler, toolchain, quiet_logger
    ):
        make_package(app_root, "app", dependencies=["util", "mid"])
        make_dependency(app_root, "util")
        mid = make_dependency(app_root, "mid", dependencies=["ghost"])
        dependency_path(mid, "ghost").mkdir(parents=True)
        state = init_build_state(app_root)

        report = build(state, state.root, quiet_logger)

        assert not report.ok
        assert toolchain.built == ["util"]
        assert report.status_of("util") == PackageStatus.BUILT
        assert report.status_of("mid") == PackageStatus.ABANDONED
        assert report.status_of("app") == PackageStatus.ABANDONED
        assert [f.dependency for f in report.failures] == ["ghost"]
        assert "lacks a lattice.toml" in quiet_logger.errors[0]

    def test_compile_failure_does_not_stop_the_run(
        self, diamond, fake_compiler, toolchain, quiet_logger
    ):
        toolchain.fail = {"left"}
        state = init_build_state(diamond)

        report = build(state, state.root, quiet_logger)

        assert not report.ok
        assert toolchain.built == ["core", "left", "right", "app"]
        assert report.status_of("left") == PackageStatus.FAILED
        assert report.status_of("app") == PackageStatus.BUILT
        assert len(report.compile_errors) == 1
        assert "left" in state.built
        assert quiet_logger.error_count == 1
        assert any("error: boom" in info for rec in quiet_logger.history for info in rec.infos)

    def test_scoped_dependency(
        self, app_root, make_package, make_dependency, fake_compiler, toolchain, quiet_logger
    ):
        make_package(app_root, "app", dependencies=["@acme/strings"])
        make_dependency(app_root, "@acme/strings")
        state = init_build_state(app_root)

        report = build(state, state.root, quiet_logger)

        assert report.ok
        assert toolchain.built == ["acme-strings", "app"]


class TestJit:
    def test_root_is_deferred(self, diamond, fake_compiler, toolchain, quiet_logger):
        state = init_build_state(diamond, jit=True)

        report = build(state, state.root, quiet_logger)

        assert report.status_of("app") == PackageStatus.DEFERRED
        assert toolchain.built == ["core", "left", "right"]
        assert state.jit_ready

    def test_run_jit_forwards_arguments_and_exit_code(
        self, diamond, fake_compiler, toolchain, quiet_logger
    ):
        toolchain.returncode = 3
        state = init_build_state(diamond, jit=True)
        build(state, state.root, quiet_logger)

        exit_code = run_jit(state, ["--fast", "data.txt"])

        assert exit_code == 3
        args = toolchain.calls[-1]
        assert args[0] == "-run"
        assert args[-3:] == [str(state.root.entrypoint_path), "--fast", "data.txt"]
        assert f"-I{dependency_path(state.root.root, 'left') / 'include'}" in args

    def test_run_jit_requires_jit_build(self, diamond, fake_compiler, toolchain, quiet_logger):
        state = init_build_state(diamond)
        build(state, state.root, quiet_logger)

        with pytest.raises(BuildStateError, match="not ready to run"):
            run_jit(state)

    def test_jit_only_binary_cannot_be_built(
        self, app_root, make_package, fake_compiler, toolchain, quiet_logger
    ):
        make_package(app_root, "app", options={"jit-only": True})
        state = init_build_state(app_root)

        with pytest.raises(JitOnlyViolationError):
            build(state, state.root, quiet_logger)

    def test_jit_only_binary_can_run(
        self, app_root, make_package, fake_compiler, toolchain, quiet_logger
    ):
        make_package(app_root, "app", options={"jit-only": True})
        state = init_build_state(app_root, jit=True)

        report = build(state, state.root, quiet_logger)

        assert report.status_of("app") == PackageStatus.DEFERRED
        assert run_jit(state) == 0
