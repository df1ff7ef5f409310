"""Shared helpers for nchat_tooling (environment lookup, path globbing, version text).

Used by config, build, deps, release and reformat modules.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from pathlib import Path

# --- Environment ---


def env_first(environ: Mapping[str, str], *names: str) -> str | None:
    """First non-empty value among names, in the order given. Empty strings count as unset."""
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return None


# --- Path ---


def expand_globs(root: Path, patterns: Iterable[str]) -> list[Path]:
    """Expand glob patterns relative to root, one pattern after another, each group sorted.

    Patterns that match nothing are skipped (unlike a shell, which passes them through literally).
    """
    out: list[Path] = []
    for pattern in patterns:
        for p in sorted(root.glob(pattern)):
            if p not in out:
                out.append(p)
    return out


# --- Version ---

_SEMVER = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


def split_semver(v: str) -> tuple[int, int, int]:
    """Split "X.Y.Z" into ints. Raises ValueError on anything else (prerelease suffixes included)."""
    m = _SEMVER.match(v.strip())
    if not m:
        msg = "Invalid version format: " + repr(v)
        raise ValueError(msg)
    return int(m.group(1)), int(m.group(2)), int(m.group(3))
