"""Latest published nchat version, from the upstream repository's git tags."""

from __future__ import annotations

import logging
import sys

from nchat_tooling.errors import ExternalProcessFailure, RemoteVersionError
from nchat_tooling.process import capture

log = logging.getLogger(__name__)

UPSTREAM_URL = "https://github.com/d99kris/nchat.git"
TAG_REF_PREFIX = "refs/tags/"


def ls_remote_tags_argv(url: str = UPSTREAM_URL) -> list[str]:
    """git ls-remote with version sort; "-" suffixes sort before the release they precede."""
    return [
        "git",
        "-c",
        "versionsort.suffix=-",
        "ls-remote",
        "--tags",
        "--sort=v:refname",
        url,
    ]


def parse_latest_tag(output: str) -> str:
    """Tag name from the last ref line of sorted ls-remote output (peeled ^{} refs ignored)."""
    tags: list[str] = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 2 or not parts[1].startswith(TAG_REF_PREFIX):
            continue
        name = parts[1][len(TAG_REF_PREFIX) :]
        if name.endswith("^{}"):
            continue
        tags.append(name)
    if not tags:
        msg = "version lookup failed (no tags found upstream)"
        raise RemoteVersionError(msg)
    return tags[-1]


def strip_tag_marker(tag: str) -> str:
    """Drop the leading marker character ("v5.1.3" -> "5.1.3")."""
    return tag[1:]


def get_latest_version(url: str = UPSTREAM_URL) -> str:
    """Latest upstream version string without its "v". Fails fast, no retries.

    Raises ExternalProcessFailure if git fails and RemoteVersionError if no tag is found.
    """
    try:
        r = capture(ls_remote_tags_argv(url))
    except FileNotFoundError as e:
        raise ExternalProcessFailure("version lookup failed (git not found)", 127) from e
    if r.returncode != 0:
        if r.stderr:
            print(r.stderr.rstrip(), file=sys.stderr)
        raise ExternalProcessFailure(f"version lookup failed ({url})", r.returncode)
    tag = parse_latest_tag(r.stdout)
    log.debug("latest upstream tag %s", tag)
    return strip_tag_marker(tag)
