"""Native build planning: memory-aware -j, cross toolchains, cmake/make invocations."""

from .cmake import (
    BUILD_DIR,
    DEBUG_BUILD_DIR,
    build_environment,
    compose_cmake_args,
    install_command,
    probe_compiler,
    release_build_dir,
    run_debug_build,
    run_doc,
    run_install,
    run_release_build,
    run_tests,
)
from .cross import SUPPORTED_TARGETS, CrossProfile, resolve_cross_profile
from .resources import (
    MEM_PER_CORE_CLANG_MB,
    MEM_PER_CORE_GCC_MB,
    ResourceBudget,
    compute_parallelism,
    floor_gb_as_mb,
    mem_per_core_mb,
    probe_budget,
)

__all__ = [
    "BUILD_DIR",
    "DEBUG_BUILD_DIR",
    "MEM_PER_CORE_CLANG_MB",
    "MEM_PER_CORE_GCC_MB",
    "SUPPORTED_TARGETS",
    "CrossProfile",
    "ResourceBudget",
    "build_environment",
    "compose_cmake_args",
    "compute_parallelism",
    "floor_gb_as_mb",
    "install_command",
    "mem_per_core_mb",
    "probe_budget",
    "probe_compiler",
    "release_build_dir",
    "resolve_cross_profile",
    "run_debug_build",
    "run_doc",
    "run_install",
    "run_release_build",
    "run_tests",
]
