"""Host OS / Linux distro detection.

Never fails: an unrecognised OS becomes HostOS.OTHER and an unknown Linux distro
is None. Components that need an OS-specific branch raise UnsupportedPlatformError.
"""

from __future__ import annotations

import enum
import logging
import os
import platform
import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from nchat_tooling.config import SUPPORTED_TARGETS
from nchat_tooling.process import capture

log = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")
TERMUX = "Termux"


class HostOS(enum.Enum):
    LINUX = "Linux"
    DARWIN = "Darwin"
    OTHER = "Other"


@dataclass(frozen=True)
class PlatformIdentity:
    os: HostOS
    distro: str | None = None
    is_cross_target: bool = False
    system: str = ""

    @property
    def is_termux(self) -> bool:
        return self.os is HostOS.LINUX and self.distro == TERMUX

    def describe(self) -> str:
        """Name used in error messages: distro on Linux, uname otherwise."""
        if self.os is HostOS.LINUX:
            return self.distro or "unknown linux distro"
        return self.system or self.os.value


def read_os_release_name(path: Path = OS_RELEASE) -> str | None:
    """Value of NAME= in an os-release file, unquoted. None if the file or key is missing."""
    try:
        text = path.read_text()
    except OSError:
        return None
    for line in text.splitlines():
        if not line.startswith("NAME="):
            continue
        raw = line[len("NAME=") :]
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip("\"'")]
        value = " ".join(parts).strip()
        return value or None
    return None


def detect_platform(
    target: str | None = None,
    *,
    system: str | None = None,
    os_release: Path = OS_RELEASE,
    environ: Mapping[str, str] | None = None,
) -> PlatformIdentity:
    """Identify the host. target only sets is_cross_target; it does not affect OS detection."""
    if environ is None:
        environ = os.environ
    sysname = system if system is not None else platform.system()
    is_cross = target in SUPPORTED_TARGETS

    if sysname == HostOS.LINUX.value:
        distro = read_os_release_name(os_release)
        if distro is None and environ.get("TERMUX_VERSION"):
            distro = TERMUX
        log.debug("detected Linux distro %r", distro)
        return PlatformIdentity(HostOS.LINUX, distro, is_cross, sysname)
    if sysname == HostOS.DARWIN.value:
        return PlatformIdentity(HostOS.DARWIN, None, is_cross, sysname)
    log.debug("unrecognised host OS %r", sysname)
    return PlatformIdentity(HostOS.OTHER, None, is_cross, sysname)


def debian_codename() -> str | None:
    """Release codename from `lsb_release -a` (e.g. bookworm). None if unavailable."""
    try:
        r = capture(["lsb_release", "-a"])
    except FileNotFoundError:
        return None
    for line in r.stdout.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == "Codename":
            return value.strip() or None
    return None
