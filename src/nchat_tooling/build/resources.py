"""Memory-aware make -j: cap parallel compile jobs by physical memory, not only core count.

tdlib translation units need roughly 3.5 GB each under g++ and 1.5 GB under clang++.
Clang is recognised by the __CLANG_ATOMIC_* predefined macros.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from nchat_tooling.errors import UnsupportedPlatformError
from nchat_tooling.host import HostOS
from nchat_tooling.process import capture

log = logging.getLogger(__name__)

MEM_PER_CORE_CLANG_MB = 1500
MEM_PER_CORE_GCC_MB = 3500
CLANG_MACRO_MARKER = "CLANG_ATOMIC"
DEFAULT_CXX = "c++"


def floor_gb_as_mb(mem_bytes: int) -> int:
    """Whole decimal gigabytes, expressed in MB (e.g. 15.9e9 bytes -> 15000)."""
    return (mem_bytes // (1000 * 1000 * 1000)) * 1000


def mem_per_core_mb(has_clang_atomic: bool) -> int:
    return MEM_PER_CORE_CLANG_MB if has_clang_atomic else MEM_PER_CORE_GCC_MB


def compute_parallelism(physical_memory_mb: int, cpu_cores: int, per_core_mb: int) -> int:
    """min(memory // per_core, cpu_cores), with the memory bound clamped to at least 1."""
    mem_max = physical_memory_mb // per_core_mb
    if mem_max <= 0:
        mem_max = 1
    cpu_max = max(cpu_cores, 1)
    return min(mem_max, cpu_max)


@dataclass(frozen=True)
class ResourceBudget:
    physical_memory_mb: int
    cpu_core_count: int
    mem_per_core_mb: int

    @property
    def jobs(self) -> int:
        return compute_parallelism(
            self.physical_memory_mb, self.cpu_core_count, self.mem_per_core_mb
        )

    @property
    def make_args(self) -> list[str]:
        return [f"-j{self.jobs}"]

    def summary(self) -> str:
        return (
            f"-j{self.jobs} ({self.cpu_core_count} cores, {self.physical_memory_mb} MB phys mem, "
            f"{self.mem_per_core_mb} MB mem per core needed)"
        )


# --- Host probes ---


def _sysctl_int(name: str) -> int:
    try:
        r = capture(["sysctl", "-n", name])
    except FileNotFoundError as e:
        msg = f"sysctl {name} failed (sysctl not found)"
        raise UnsupportedPlatformError(msg) from e
    if r.returncode != 0:
        msg = f"sysctl {name} failed: {r.stderr.strip()}"
        raise UnsupportedPlatformError(msg)
    try:
        return int(r.stdout.strip())
    except ValueError as e:
        msg = f"sysctl {name} failed (unexpected output {r.stdout.strip()!r})"
        raise UnsupportedPlatformError(msg) from e


def physical_memory_bytes(host_os: HostOS) -> int:
    """Installed RAM in bytes. Only Linux and Darwin are supported."""
    if host_os is HostOS.LINUX:
        return os.sysconf("SC_PHYS_PAGES") * os.sysconf("SC_PAGE_SIZE")
    if host_os is HostOS.DARWIN:
        return _sysctl_int("hw.memsize")
    msg = f"cannot determine physical memory on {host_os.value}"
    raise UnsupportedPlatformError(msg)


def cpu_core_count(host_os: HostOS) -> int:
    if host_os is HostOS.DARWIN:
        return _sysctl_int("hw.ncpu")
    return os.cpu_count() or 1


def compiler_has_clang_atomic(cxx: str = DEFAULT_CXX) -> bool:
    """True if `cxx -dM -E -x c++ -` lists a CLANG_ATOMIC macro. A missing compiler counts as False."""
    try:
        r = capture([cxx, "-dM", "-E", "-x", "c++", "-"], input_text="")
    except FileNotFoundError:
        log.warning("compiler %s not found; assuming g++ memory needs", cxx)
        return False
    return r.returncode == 0 and CLANG_MACRO_MARKER in r.stdout


def probe_budget(host_os: HostOS, cxx: str = DEFAULT_CXX) -> ResourceBudget:
    """Measure this host and return its ResourceBudget."""
    mem_mb = floor_gb_as_mb(physical_memory_bytes(host_os))
    cores = cpu_core_count(host_os)
    clang = compiler_has_clang_atomic(cxx)
    log.debug("probe: mem=%d MB cores=%d clang=%s (cxx=%s)", mem_mb, cores, clang, cxx)
    return ResourceBudget(mem_mb, cores, mem_per_core_mb(clang))
