"""cmake + make invocations for build, debug, tests, doc and install.

Build dirs live under project_root: build (native), build-<target> (cross), dbgbuild (debug).
"""

from __future__ import annotations

import logging
import shlex
import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path

from nchat_tooling.build.cross import CrossProfile
from nchat_tooling.build.resources import DEFAULT_CXX, ResourceBudget
from nchat_tooling.config import Config
from nchat_tooling.errors import UnsupportedPlatformError
from nchat_tooling.host import HostOS, PlatformIdentity
from nchat_tooling.process import run_step

log = logging.getLogger(__name__)

BUILD_DIR = "build"
DEBUG_BUILD_DIR = "dbgbuild"
DEBUG_ARGS = ("-DCMAKE_BUILD_TYPE=Debug",)
TERMUX_CC = "clang"
TERMUX_CXX = "clang++"


def compose_cmake_args(
    config: Config,
    identity: PlatformIdentity,
    profile: CrossProfile | None,
    environ: Mapping[str, str],
) -> list[str]:
    """User flags, with Termux and cross-target flags prepended (cross flags first)."""
    args = list(config.cmake_args)
    if identity.is_termux:
        prefix = environ.get("PREFIX", "")
        args = [
            f"-DCMAKE_INSTALL_PREFIX={prefix}",
            "-DHAS_DYNAMICLOAD=OFF",
            "-DHAS_STATICGOLIB=OFF",
            *args,
        ]
    if profile is not None:
        args = [*profile.cmake_args(), *args]
    return args


def build_environment(identity: PlatformIdentity, environ: Mapping[str, str]) -> dict[str, str]:
    """Environment for cmake/make. Termux always builds with clang."""
    env = dict(environ)
    if identity.is_termux:
        env["CC"] = TERMUX_CC
        env["CXX"] = TERMUX_CXX
    return env


def probe_compiler(env: Mapping[str, str]) -> str:
    """C++ compiler the memory heuristic should inspect ($CXX, else c++)."""
    return env.get("CXX") or DEFAULT_CXX


def release_build_dir(profile: CrossProfile | None) -> str:
    return profile.build_dir if profile is not None else BUILD_DIR


def announce(cmake_args: Sequence[str], budget: ResourceBudget) -> None:
    print(f"-- Using cmake {shlex.join(cmake_args)}")
    print(f"-- Using {budget.summary()}")


def run_build(
    project_root: Path,
    build_dir: str,
    cmake_args: Sequence[str],
    budget: ResourceBudget,
    env: Mapping[str, str],
    label: str = "build failed",
) -> Path:
    """mkdir -p build_dir && cmake args .. && make -s -jN. Returns the build dir path."""
    out = project_root / build_dir
    out.mkdir(parents=True, exist_ok=True)
    run_step(["cmake", *cmake_args, ".."], label, cwd=out, env=env)
    run_step(["make", "-s", *budget.make_args], label, cwd=out, env=env)
    return out


def run_release_build(
    project_root: Path,
    cmake_args: Sequence[str],
    budget: ResourceBudget,
    env: Mapping[str, str],
    profile: CrossProfile | None = None,
) -> Path:
    announce(cmake_args, budget)
    label = f"build failed ({profile.target_name})" if profile is not None else "build failed"
    return run_build(project_root, release_build_dir(profile), cmake_args, budget, env, label)


def run_debug_build(
    project_root: Path,
    cmake_args: Sequence[str],
    budget: ResourceBudget,
    env: Mapping[str, str],
) -> Path:
    args = [*DEBUG_ARGS, *cmake_args]
    announce(args, budget)
    return run_build(project_root, DEBUG_BUILD_DIR, args, budget, env, "debug build failed")


def run_tests(build_dir: Path, env: Mapping[str, str]) -> None:
    run_step(["ctest", "--output-on-failure"], "tests failed", cwd=build_dir, env=env)


def run_doc(build_dir: Path, env: Mapping[str, str]) -> bool:
    """make -s doc (man page via help2man). Skipped when help2man is missing; returns whether it ran."""
    if shutil.which("help2man") is None:
        log.warning("help2man not found; skipping doc generation")
        return False
    run_step(["make", "-s", "doc"], "doc failed", cwd=build_dir, env=env)
    return True


def install_command(identity: PlatformIdentity) -> list[str]:
    """make install argv for this host (sudo on Linux except Termux)."""
    if identity.os is HostOS.LINUX:
        if identity.is_termux:
            return ["make", "-s", "install"]
        return ["sudo", "make", "-s", "install"]
    if identity.os is HostOS.DARWIN:
        return ["make", "-s", "install"]
    msg = f"install failed (unsupported os {identity.describe()})"
    raise UnsupportedPlatformError(msg)


def run_install(build_dir: Path, identity: PlatformIdentity, env: Mapping[str, str]) -> None:
    label = "install failed (mac)" if identity.os is HostOS.DARWIN else "install failed (linux)"
    run_step(install_command(identity), label, cwd=build_dir, env=env)
