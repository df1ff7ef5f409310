"""Tests for nchat_tooling.build.cmake (argument lists, env, build dirs)."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from nchat_tooling.build import (
    ResourceBudget,
    build_environment,
    compose_cmake_args,
    install_command,
    probe_compiler,
    resolve_cross_profile,
    run_debug_build,
    run_doc,
    run_install,
    run_release_build,
    run_tests,
)
from nchat_tooling.config import parse_args
from nchat_tooling.errors import ExternalProcessFailure, UnsupportedPlatformError
from nchat_tooling.host import HostOS, PlatformIdentity

BUDGET = ResourceBudget(16000, 8, 3500)


def _ok() -> MagicMock:
    return MagicMock(returncode=0)


def _fail() -> MagicMock:
    return MagicMock(returncode=2)


class TestComposeCmakeArgs:
    def test_native_passes_user_args(self, ubuntu: PlatformIdentity) -> None:
        cfg = parse_args(["build", "--no-whatsapp"], {"NCHAT_CMAKEARGS": "-DX=1"})
        assert compose_cmake_args(cfg, ubuntu, None, {}) == ["-DHAS_WHATSAPP=OFF", "-DX=1"]

    def test_termux_prefix_and_flags(self, termux: PlatformIdentity) -> None:
        cfg = parse_args(["build"], {})
        args = compose_cmake_args(cfg, termux, None, {"PREFIX": "/data/data/com.termux/files/usr"})
        assert args == [
            "-DCMAKE_INSTALL_PREFIX=/data/data/com.termux/files/usr",
            "-DHAS_DYNAMICLOAD=OFF",
            "-DHAS_STATICGOLIB=OFF",
        ]

    def test_prefix_ignored_outside_termux(self, ubuntu: PlatformIdentity) -> None:
        cfg = parse_args(["build"], {})
        assert compose_cmake_args(cfg, ubuntu, None, {"PREFIX": "/usr"}) == []

    def test_cross_args_come_first(self, ubuntu: PlatformIdentity) -> None:
        cfg = parse_args(["build", "--no-telegram"], {"TARGET": "armv7"})
        profile = resolve_cross_profile(cfg.target, {"CROSS_SYSROOT": "/sysroot"})
        args = compose_cmake_args(cfg, ubuntu, profile, {})
        assert args[:3] == [
            "-DHAS_DYNAMICLOAD=OFF",
            "-DDEFAULT_TARGET_ARCH=armv7",
            "-DCMAKE_SYSROOT=/sysroot",
        ]
        assert args[-1] == "-DHAS_TELEGRAM=OFF"


class TestBuildEnvironment:
    def test_termux_forces_clang(self, termux: PlatformIdentity) -> None:
        env = build_environment(termux, {"CXX": "g++", "PATH": "/bin"})
        assert env["CC"] == "clang"
        assert env["CXX"] == "clang++"
        assert env["PATH"] == "/bin"
        assert probe_compiler(env) == "clang++"

    def test_other_hosts_keep_environment(self, ubuntu: PlatformIdentity) -> None:
        env = build_environment(ubuntu, {"PATH": "/bin"})
        assert "CXX" not in env
        assert probe_compiler(env) == "c++"


class TestRunBuilds:
    def test_release_build_runs_cmake_then_make(self, tmp_path: Path) -> None:
        with patch("nchat_tooling.process.subprocess.run", return_value=_ok()) as m:
            out = run_release_build(tmp_path, ["-DX=1"], BUDGET, {"PATH": "/bin"})
        assert out == tmp_path / "build"
        assert out.is_dir()
        cmds = [c[0][0] for c in m.call_args_list]
        assert cmds == [["cmake", "-DX=1", ".."], ["make", "-s", "-j4"]]
        assert m.call_args_list[0][1]["cwd"] == str(tmp_path / "build")

    def test_cross_build_uses_target_dir(self, tmp_path: Path) -> None:
        profile = resolve_cross_profile("armv7", {})
        with patch("nchat_tooling.process.subprocess.run", return_value=_ok()):
            out = run_release_build(tmp_path, [], BUDGET, {}, profile)
        assert out == tmp_path / "build-armv7"

    def test_debug_build_prepends_build_type(self, tmp_path: Path) -> None:
        with patch("nchat_tooling.process.subprocess.run", return_value=_ok()) as m:
            out = run_debug_build(tmp_path, ["-DX=1"], BUDGET, {})
        assert out == tmp_path / "dbgbuild"
        assert m.call_args_list[0][0][0] == ["cmake", "-DCMAKE_BUILD_TYPE=Debug", "-DX=1", ".."]

    def test_cmake_failure_stops_before_make(self, tmp_path: Path) -> None:
        with patch("nchat_tooling.process.subprocess.run", return_value=_fail()) as m:
            with pytest.raises(ExternalProcessFailure) as exc_info:
                run_release_build(tmp_path, [], BUDGET, {})
        assert m.call_count == 1
        assert exc_info.value.step == "build failed"
        assert exc_info.value.returncode == 2

    def test_cross_build_failure_names_target(self, tmp_path: Path) -> None:
        profile = resolve_cross_profile("armv7", {})
        with patch("nchat_tooling.process.subprocess.run", return_value=_fail()):
            with pytest.raises(ExternalProcessFailure) as exc_info:
                run_release_build(tmp_path, [], BUDGET, {}, profile)
        assert str(exc_info.value) == "build failed (armv7) (exit 2)"

    def test_announces_cmake_args_and_jobs(self, tmp_path: Path, capsys) -> None:
        with patch("nchat_tooling.process.subprocess.run", return_value=_ok()):
            run_release_build(tmp_path, ["-DX=1"], BUDGET, {})
        out = capsys.readouterr().out
        assert "-- Using cmake -DX=1" in out
        assert "-- Using -j4 (8 cores, 16000 MB phys mem, 3500 MB mem per core needed)" in out


class TestPostBuildSteps:
    def test_tests_run_ctest(self, tmp_path: Path) -> None:
        with patch("nchat_tooling.process.subprocess.run", return_value=_ok()) as m:
            run_tests(tmp_path, {})
        assert m.call_args[0][0] == ["ctest", "--output-on-failure"]

    def test_tests_failure(self, tmp_path: Path) -> None:
        with patch("nchat_tooling.process.subprocess.run", return_value=_fail()):
            with pytest.raises(ExternalProcessFailure, match="tests failed"):
                run_tests(tmp_path, {})

    def test_doc_skipped_without_help2man(self, tmp_path: Path) -> None:
        with (
            patch("nchat_tooling.build.cmake.shutil.which", return_value=None),
            patch("nchat_tooling.process.subprocess.run") as m,
        ):
            assert run_doc(tmp_path, {}) is False
        assert not m.called

    def test_doc_runs_make_doc(self, tmp_path: Path) -> None:
        with (
            patch("nchat_tooling.build.cmake.shutil.which", return_value="/usr/bin/help2man"),
            patch("nchat_tooling.process.subprocess.run", return_value=_ok()) as m,
        ):
            assert run_doc(tmp_path, {}) is True
        assert m.call_args[0][0] == ["make", "-s", "doc"]

    def test_install_command_per_os(
        self, ubuntu: PlatformIdentity, termux: PlatformIdentity, darwin: PlatformIdentity
    ) -> None:
        assert install_command(ubuntu) == ["sudo", "make", "-s", "install"]
        assert install_command(termux) == ["make", "-s", "install"]
        assert install_command(darwin) == ["make", "-s", "install"]

    def test_install_unsupported_os(self) -> None:
        other = PlatformIdentity(HostOS.OTHER, None, False, "FreeBSD")
        with pytest.raises(UnsupportedPlatformError, match="FreeBSD"):
            install_command(other)

    def test_install_failure_label(self, tmp_path: Path, darwin: PlatformIdentity) -> None:
        with patch("nchat_tooling.process.subprocess.run", return_value=_fail()):
            with pytest.raises(ExternalProcessFailure, match="install failed \\(mac\\)"):
                run_install(tmp_path, darwin, {})
