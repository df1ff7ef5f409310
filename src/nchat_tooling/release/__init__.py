"""Release: bump NCHAT_VERSION against the latest upstream tag."""

from .bump import Version, bump_version, next_version, read_current_version, write_version
from .bump import run as run_bump
from .latest_tag import get_latest_version, parse_latest_tag

__all__ = [
    "Version",
    "bump_version",
    "get_latest_version",
    "next_version",
    "parse_latest_tag",
    "read_current_version",
    "run_bump",
    "write_version",
]
