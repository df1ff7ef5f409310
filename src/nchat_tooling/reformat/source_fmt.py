"""Reformat nchat sources: go fmt for the WhatsApp Go bridge, uncrustify for C/C++.

The uncrustify config is refreshed first (--update-config-with-doc) so new options
are documented in etc/uncrustify.cfg before it is applied.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from nchat_tooling.errors import ToolingError
from nchat_tooling.helpers import expand_globs
from nchat_tooling.process import run_step

log = logging.getLogger(__name__)

GO_SOURCES = ("lib/wmchat/go/*.go",)
UNCRUSTIFY_CFG = "etc/uncrustify.cfg"
CXX_SOURCES = (
    "src/*.cpp",
    "src/*.h",
    "lib/common/src/*.h",
    "lib/duchat/src/*.cpp",
    "lib/duchat/src/*.h",
    "lib/ncutil/src/*.cpp",
    "lib/ncutil/src/*.h",
    "lib/tgchat/src/*.cpp",
    "lib/tgchat/src/*.h",
    "lib/wmchat/src/*.cpp",
    "lib/wmchat/src/*.h",
)


def _rel(project_root: Path, paths: Sequence[Path]) -> list[str]:
    return [str(p.relative_to(project_root)) for p in paths]


def run_reformat(project_root: Path, runner: Callable[..., int] = run_step) -> None:
    """go fmt, then refresh and apply the uncrustify config. Raises ExternalProcessFailure."""
    go_files = _rel(project_root, expand_globs(project_root, GO_SOURCES))
    if go_files:
        runner(["go", "fmt", *go_files], "go fmt failed", cwd=project_root)
    else:
        log.warning("no Go sources matched %s; skipping go fmt", ", ".join(GO_SOURCES))

    cxx_files = _rel(project_root, expand_globs(project_root, CXX_SOURCES))
    runner(
        [
            "uncrustify",
            "--update-config-with-doc",
            "-c",
            UNCRUSTIFY_CFG,
            "-o",
            UNCRUSTIFY_CFG,
        ],
        "uncrustify failed",
        cwd=project_root,
    )
    if not cxx_files:
        log.warning("no C/C++ sources matched; nothing to reformat")
        return
    runner(
        ["uncrustify", "-c", UNCRUSTIFY_CFG, "--replace", "--no-backup", *cxx_files],
        "uncrustify failed",
        cwd=project_root,
    )


def run(project_root: Path) -> int:
    """Reformat sources; returns 0 or 1 (error printed to stderr)."""
    try:
        run_reformat(project_root)
    except ToolingError as e:
        print(f"{e}, exiting.", file=sys.stderr)
        return 1
    return 0
