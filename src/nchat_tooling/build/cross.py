"""Cross-compilation toolchain settings for non-native targets.

Only armv7 (armhf, GNU triplet arm-linux-gnueabihf) is supported. Toolchain overrides
come from CROSS_SYSROOT, CROSS_PREFIX, CROSS_CC and CROSS_CXX; an explicit CROSS_CC /
CROSS_CXX beats CROSS_PREFIX, which beats the built-in prefix.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from nchat_tooling.config import SUPPORTED_TARGETS
from nchat_tooling.helpers import env_first

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrossProfile:
    target_name: str
    sysroot: str | None
    cc: str
    cxx: str
    system_name: str
    system_processor: str

    @property
    def build_dir(self) -> str:
        return f"build-{self.target_name}"

    @property
    def dynamic_load(self) -> bool:
        # libgo and friends are built for the host; a foreign-arch binary cannot dlopen them.
        return False

    def cmake_args(self) -> list[str]:
        """cmake -D flags for this target, in the order they are passed before user flags."""
        args = [
            "-DHAS_DYNAMICLOAD=OFF",
            f"-DDEFAULT_TARGET_ARCH={self.target_name}",
        ]
        if self.sysroot:
            args.append(f"-DCMAKE_SYSROOT={self.sysroot}")
        args += [
            f"-DCMAKE_SYSTEM_NAME={self.system_name}",
            f"-DCMAKE_SYSTEM_PROCESSOR={self.system_processor}",
            f"-DCMAKE_C_COMPILER={self.cc}",
            f"-DCMAKE_CXX_COMPILER={self.cxx}",
        ]
        return args


def resolve_cross_profile(
    target: str | None, environ: Mapping[str, str]
) -> CrossProfile | None:
    """CrossProfile for target, or None for a native build (no target or unsupported target)."""
    if not target:
        return None
    entry = SUPPORTED_TARGETS.get(target)
    if entry is None:
        log.warning("unsupported cross target %r; building natively", target)
        return None
    default_prefix, system_name, processor = entry
    prefix = env_first(environ, "CROSS_PREFIX") or default_prefix
    return CrossProfile(
        target_name=target,
        sysroot=env_first(environ, "CROSS_SYSROOT"),
        cc=env_first(environ, "CROSS_CC") or f"{prefix}gcc",
        cxx=env_first(environ, "CROSS_CXX") or f"{prefix}g++",
        system_name=system_name,
        system_processor=processor,
    )
