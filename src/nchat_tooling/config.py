"""Action/option parsing: fold make-style tokens into one immutable Config.

Parsing has no side effects; the environment is read once to seed the fold
(NCHAT_CMAKEARGS, TARGET / NCHAT_TARGET) and never again.
"""

from __future__ import annotations

import enum
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from functools import reduce

from nchat_tooling.errors import UsageError
from nchat_tooling.helpers import env_first

USAGE = """\
usage: nchat-make [OPTIONS] ACTION

Options:
  --no-telegram   - build without telegram support
  --no-whatsapp   - build without whatsapp support
  --target=NAME   - cross-compile for NAME (overrides TARGET / NCHAT_TARGET)
  --yes,-y        - non-interactive mode, assume yes

Action:
  deps            - install project dependencies
  build           - perform build
  debug           - perform debug build
  tests           - perform build and run tests
  doc             - perform build and generate documentation
  install         - perform build and install
  all             - perform deps, build, tests, doc and install
  src             - perform source code reformatting
  bump            - perform version bump
"""

# TARGET is checked first; NCHAT_TARGET is only used when TARGET is unset or empty.
TARGET_ENV_VARS = ("TARGET", "NCHAT_TARGET")
CMAKEARGS_ENV_VAR = "NCHAT_CMAKEARGS"


class Action(enum.Enum):
    DEPS = "deps"
    BUILD = "build"
    DEBUG = "debug"
    TESTS = "tests"
    DOC = "doc"
    INSTALL = "install"
    SRC = "src"
    BUMP = "bump"


ACTION_TOKENS: dict[str, frozenset[Action]] = {
    "deps": frozenset({Action.DEPS}),
    "build": frozenset({Action.BUILD}),
    "debug": frozenset({Action.DEBUG}),
    "doc": frozenset({Action.BUILD, Action.DOC}),
    "install": frozenset({Action.BUILD, Action.INSTALL}),
    "src": frozenset({Action.SRC}),
    "bump": frozenset({Action.BUMP}),
    "all": frozenset(
        {Action.DEPS, Action.BUILD, Action.TESTS, Action.DOC, Action.INSTALL}
    ),
}

# "test", "tests", "testing", ... all build and run tests.
TEST_PREFIX = "test"
TEST_ACTIONS = frozenset({Action.BUILD, Action.TESTS})

FEATURE_FLAGS: dict[str, str] = {
    "--no-telegram": "-DHAS_TELEGRAM=OFF",
    "--no-whatsapp": "-DHAS_WHATSAPP=OFF",
}

YES_FLAGS = frozenset({"-y", "--yes"})
TARGET_FLAG = "--target="

# Cross targets: name -> (default toolchain prefix, CMAKE_SYSTEM_NAME, CMAKE_SYSTEM_PROCESSOR).
SUPPORTED_TARGETS: dict[str, tuple[str, str, str]] = {
    "armv7": ("arm-linux-gnueabihf-", "Linux", "arm"),
}


@dataclass(frozen=True)
class Config:
    """Result of parsing. cmake_args is ordered: the most recently added flag comes first."""

    actions: frozenset[Action] = frozenset()
    assume_yes: bool = False
    cmake_args: tuple[str, ...] = ()
    target: str | None = None

    def has(self, *actions: Action) -> bool:
        """True if any of actions was requested."""
        return any(a in self.actions for a in actions)


def initial_config(environ: Mapping[str, str]) -> Config:
    """Seed for the fold: cmake args and target from the environment, no actions."""
    raw = environ.get(CMAKEARGS_ENV_VAR, "")
    return Config(
        cmake_args=tuple(shlex.split(raw)),
        target=env_first(environ, *TARGET_ENV_VARS),
    )


def apply_token(cfg: Config, token: str) -> Config:
    """Fold step: return cfg updated by one token. Raises UsageError for unknown tokens."""
    tok = token[:-1] if token.endswith("/") else token

    if tok in ACTION_TOKENS:
        return replace(cfg, actions=cfg.actions | ACTION_TOKENS[tok])
    if tok.startswith(TEST_PREFIX):
        return replace(cfg, actions=cfg.actions | TEST_ACTIONS)
    if tok in FEATURE_FLAGS:
        return replace(cfg, cmake_args=(FEATURE_FLAGS[tok], *cfg.cmake_args))
    if tok in YES_FLAGS:
        return replace(cfg, assume_yes=True)
    if tok.startswith(TARGET_FLAG) and len(tok) > len(TARGET_FLAG):
        return replace(cfg, target=tok[len(TARGET_FLAG) :])
    raise UsageError(token)


def parse_args(tokens: Sequence[str], environ: Mapping[str, str]) -> Config:
    """Parse tokens into a Config. Empty input, no actions, or any unknown token raise UsageError."""
    if not tokens:
        raise UsageError()
    cfg = reduce(apply_token, tokens, initial_config(environ))
    if not cfg.actions:
        raise UsageError()
    return cfg
