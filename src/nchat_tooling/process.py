"""Run external commands (package managers, cmake, make, git, formatters)."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from nchat_tooling.errors import ExternalProcessFailure

log = logging.getLogger(__name__)


def run_step(
    argv: Sequence[str],
    label: str,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
) -> int:
    """Run argv with inherited stdio. Raises ExternalProcessFailure(label) on non-zero when check.

    A missing executable is reported as return code 127, like a shell would.
    """
    log.debug("running %s (cwd=%s)", shlex.join(argv), cwd)
    try:
        r = subprocess.run(
            list(argv),
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
        )
        rc = r.returncode
    except FileNotFoundError:
        log.debug("executable not found: %s", argv[0])
        rc = 127
    if rc != 0:
        if check:
            raise ExternalProcessFailure(label, rc)
        log.warning("%s returned %d (ignored)", label, rc)
    return rc


def capture(
    argv: Sequence[str],
    cwd: Path | None = None,
    input_text: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run argv and capture stdout/stderr as text. Never raises on non-zero exit."""
    log.debug("capturing %s", shlex.join(argv))
    return subprocess.run(
        list(argv),
        cwd=str(cwd) if cwd is not None else None,
        input=input_text,
        capture_output=True,
        text=True,
    )
