"""Main CLI entry point for nchat tooling (`nchat-make`, the make.sh replacement)."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from nchat_tooling.build import (
    build_environment,
    compose_cmake_args,
    probe_budget,
    probe_compiler,
    release_build_dir,
    resolve_cross_profile,
    run_debug_build,
    run_doc,
    run_install,
    run_release_build,
    run_tests,
)
from nchat_tooling.config import USAGE, Action, parse_args
from nchat_tooling.deps import install_dependencies
from nchat_tooling.errors import ToolingError, UsageError
from nchat_tooling.host import detect_platform
from nchat_tooling.reformat import run_reformat
from nchat_tooling.release import bump_version

log = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "NCHAT_LOG_LEVEL"


def configure_logging(environ: Mapping[str, str]) -> None:
    level_name = environ.get(LOG_LEVEL_ENV_VAR, "WARNING").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def execute(
    argv: Sequence[str],
    environ: Mapping[str, str],
    project_root: Path,
) -> None:
    """Parse argv and run every requested action in order. Raises ToolingError on failure."""
    config = parse_args(argv, environ)
    identity = detect_platform(config.target, environ=environ)
    profile = resolve_cross_profile(config.target, environ)
    log.debug("config=%s identity=%s profile=%s", config, identity, profile)

    if config.has(Action.DEPS):
        install_dependencies(identity, config.assume_yes, environ)

    if config.has(Action.SRC):
        run_reformat(project_root)

    if config.has(Action.BUMP):
        bump_version(project_root)

    if not config.has(Action.BUILD, Action.DEBUG):
        return

    cmake_args = compose_cmake_args(config, identity, profile, environ)
    env = build_environment(identity, environ)
    budget = probe_budget(identity.os, probe_compiler(env))

    if config.has(Action.BUILD):
        run_release_build(project_root, cmake_args, budget, env, profile)

    if config.has(Action.DEBUG):
        run_debug_build(project_root, cmake_args, budget, env)

    build_dir = project_root / release_build_dir(profile)
    if config.has(Action.TESTS):
        run_tests(build_dir, env)
    if config.has(Action.DOC):
        run_doc(build_dir, env)
    if config.has(Action.INSTALL):
        run_install(build_dir, identity, env)


def run(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
    project_root: Path | None = None,
) -> int:
    """Run the CLI and return the process exit code (0 only when every action completed)."""
    if argv is None:
        argv = sys.argv[1:]
    if environ is None:
        environ = os.environ
    if project_root is None:
        project_root = Path.cwd()
    try:
        execute(argv, environ, project_root)
    except UsageError as e:
        log.debug("usage error: %s", e)
        print(USAGE, file=sys.stderr)
        return 1
    except ToolingError as e:
        print(f"{e}, exiting.", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    """Main CLI entry point."""
    configure_logging(os.environ)
    sys.exit(run())


if __name__ == "__main__":
    main()
