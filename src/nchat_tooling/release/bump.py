"""Bump NCHAT_VERSION in lib/common/src/version.h against the latest upstream tag.

Source of truth: the `#define NCHAT_VERSION "X.Y.Z"` line in version.h.
Same major.minor as upstream latest -> X.(Y+1).1 (start a new snapshot line ahead of the release).
Otherwise -> X.Y.(Z+1) (next build within the unreleased line).
No tagging, committing or pushing; the file is not locked against concurrent bumps.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Callable
from pathlib import Path
from typing import NamedTuple

from nchat_tooling.errors import RemoteVersionError, ToolingError
from nchat_tooling.helpers import split_semver
from nchat_tooling.release.latest_tag import get_latest_version

VERSION_HEADER = Path("lib/common/src/version.h")
# Used by both read_current_version and write_version.
_DEFINE_RE = re.compile(r'^(#define NCHAT_VERSION\s+)"([^"]*)"')


class Version(NamedTuple):
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> Version:
        return cls(*split_semver(text))

    @property
    def major_minor(self) -> tuple[int, int]:
        return self.major, self.minor

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def next_version(current: Version, latest: Version) -> Version:
    """Snapshot bump (minor+1, patch=1) on the same release line as latest; else patch+1."""
    if current.major_minor == latest.major_minor:
        return Version(current.major, current.minor + 1, 1)
    return Version(current.major, current.minor, current.patch + 1)


def read_current_version(header: Path) -> Version:
    """Version from the first NCHAT_VERSION define in header."""
    for line in header.read_text().splitlines():
        m = _DEFINE_RE.match(line)
        if m:
            try:
                return Version.parse(m.group(2))
            except ValueError as e:
                msg = f"Invalid NCHAT_VERSION in {header}: {m.group(2)!r}"
                raise ToolingError(msg) from e
    msg = f"Could not find NCHAT_VERSION in {header}"
    raise ToolingError(msg)


def write_version(header: Path, new: Version) -> int:
    """Rewrite the quoted value of every NCHAT_VERSION define to new. Returns lines changed."""
    with header.open(newline="") as f:
        lines = f.read().splitlines(keepends=True)
    out: list[str] = []
    changed = 0
    for line in lines:
        m = _DEFINE_RE.match(line)
        if m:
            out.append(f'{m.group(1)}"{new}"{line[m.end() :]}')
            changed += 1
        else:
            out.append(line)
    if changed:
        with header.open("w", newline="") as f:
            f.write("".join(out))
    return changed


def bump_version(
    project_root: Path,
    latest_lookup: Callable[[], str] | None = None,
    header: Path = VERSION_HEADER,
) -> Version:
    """Read, compute and write the next version; returns it. Lookup or parse errors leave the file untouched."""
    path = project_root / header
    if not path.is_file():
        msg = f"{path} not found"
        raise ToolingError(msg)
    current = read_current_version(path)
    latest_text = (latest_lookup or get_latest_version)()
    try:
        latest = Version.parse(latest_text)
    except ValueError as e:
        msg = f"version lookup failed (unparsable latest tag {latest_text!r})"
        raise RemoteVersionError(msg) from e

    new = next_version(current, latest)
    if write_version(path, new) == 0:
        msg = f"NCHAT_VERSION in {path} was not rewritten"
        raise ToolingError(msg)

    cur_mm = "{}.{}".format(*current.major_minor)
    lat_mm = "{}.{}".format(*latest.major_minor)
    if current.major_minor == latest.major_minor:
        print(f"Current:      {cur_mm} == {lat_mm} Latest")
        print(f"Bump release: {new}")
    else:
        print(f"Current:      {cur_mm} != {lat_mm} Latest")
        print(f"Bump build:   {new}")
    return new


def run(project_root: Path, latest_lookup: Callable[[], str] | None = None) -> int:
    """Bump version.h; returns 0 or 1 (error printed to stderr)."""
    try:
        bump_version(project_root, latest_lookup)
    except ToolingError as e:
        print(f"{e}, exiting.", file=sys.stderr)
        return 1
    return 0
