"""Host platform identity (OS, Linux distro, cross-target flag)."""

from .detect import (
    HostOS,
    PlatformIdentity,
    debian_codename,
    detect_platform,
    read_os_release_name,
)

__all__ = [
    "HostOS",
    "PlatformIdentity",
    "debian_codename",
    "detect_platform",
    "read_os_release_name",
]
