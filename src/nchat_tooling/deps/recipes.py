"""Dependency installation recipes, one strategy per supported distro / OS.

Selection is a single registry lookup keyed by distro name (Linux) or "Darwin".
Package lists come from packages.yaml next to this module.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from typing import Any

import yaml

from nchat_tooling.errors import ExternalProcessFailure, UnsupportedPlatformError
from nchat_tooling.host import HostOS, PlatformIdentity, debian_codename
from nchat_tooling.process import run_step

log = logging.getLogger(__name__)

YES_PLACEHOLDER = "{yes}"
DARWIN = "Darwin"
BACKPORTS_HINT = "Please ensure backports are enabled, see https://backports.debian.org/Instructions/#index2h2"
MANUAL_GO_HINT = (
    "Install golang-1.23 or newer manually, for example by running:\n"
    "wget https://go.dev/dl/go1.24.4.linux-amd64.tar.gz && "
    "sudo tar xf go1.24.4.linux-amd64.tar.gz -C /usr/local"
)


@lru_cache(maxsize=1)
def load_package_table() -> dict[str, Any]:
    """Parsed packages.yaml (cached)."""
    text = resources.files("nchat_tooling.deps").joinpath("packages.yaml").read_text()
    return yaml.safe_load(text)


@dataclass(frozen=True)
class Step:
    label: str
    argv: tuple[str, ...]
    check: bool = True
    env: Mapping[str, str] | None = None
    hint: str | None = None


@dataclass(frozen=True)
class InstallContext:
    identity: PlatformIdentity
    assume_yes: bool = False
    table: Mapping[str, Any] = field(default_factory=dict)
    which: Callable[[str], str | None] = shutil.which
    codename: Callable[[], str | None] = debian_codename

    def argv(self, *parts: str) -> tuple[str, ...]:
        """Expand {yes} to -y (or drop it) in a command template."""
        out: list[str] = []
        for p in parts:
            if p == YES_PLACEHOLDER:
                if self.assume_yes:
                    out.append("-y")
            else:
                out.append(p)
        return tuple(out)


class InstallRecipe:
    """Installs the base build dependencies for one platform."""

    name = ""

    def steps(self, ctx: InstallContext) -> list[Step]:
        raise NotImplementedError

    def failure_label(self, what: str | None = None) -> str:
        detail = f"{self.name} {what}" if what else self.name
        return f"deps failed ({detail})"


class CommandRecipe(InstallRecipe):
    """Distros served by fixed package-manager commands from the table."""

    def __init__(self, name: str) -> None:
        self.name = name

    def steps(self, ctx: InstallContext) -> list[Step]:
        commands = ctx.table["commands"][self.name]
        label = self.failure_label()
        return [Step(label, ctx.argv(*map(str, cmd))) for cmd in commands]


class AptRecipe(InstallRecipe):
    """Ubuntu: apt base packages, golang-1.23 selected via update-alternatives."""

    def __init__(self, name: str) -> None:
        self.name = name

    def base_steps(self, ctx: InstallContext) -> list[Step]:
        return [
            Step(self.failure_label(), ("sudo", "apt", "update")),
            Step(
                self.failure_label(),
                ctx.argv("sudo", "apt", YES_PLACEHOLDER, "install", *ctx.table["apt_base"]),
            ),
        ]

    def golang_steps(self, ctx: InstallContext) -> list[Step]:
        return [
            Step(
                self.failure_label("apt golang"),
                ctx.argv("sudo", "apt", YES_PLACEHOLDER, "install", ctx.table["apt_golang"]),
            ),
            self.select_golang_step(ctx),
        ]

    def select_golang_step(self, ctx: InstallContext) -> Step:
        alt = ctx.table["golang_alternative"]
        return Step(
            self.failure_label("select golang"),
            (
                "sudo",
                "update-alternatives",
                "--install",
                alt["link"],
                alt["name"],
                alt["path"],
                str(alt["priority"]),
            ),
        )

    def cross_steps(self, ctx: InstallContext) -> list[Step]:
        """armhf cross toolchain and runtime libraries (only when building for armv7)."""
        if not ctx.identity.is_cross_target:
            return []
        cross = ctx.table["armhf_cross"]
        return [
            Step(
                "dpkg --add-architecture",
                ("sudo", "dpkg", "--add-architecture", cross["architecture"]),
                check=False,
            ),
            Step("apt update", ("sudo", "apt", "update"), check=False),
            Step(
                "deps failed (installing cross-toolchain)",
                ctx.argv("sudo", "apt", YES_PLACEHOLDER, "install", *cross["packages"]),
            ),
        ]

    def steps(self, ctx: InstallContext) -> list[Step]:
        return self.base_steps(ctx) + self.golang_steps(ctx) + self.cross_steps(ctx)


class DebianRecipe(AptRecipe):
    """Debian: golang source depends on the release codename."""

    def golang_steps(self, ctx: InstallContext) -> list[Step]:
        release = ctx.codename()
        label = self.failure_label(release or "unknown release")
        if release == "bookworm":
            return [
                Step(
                    label,
                    ctx.argv(
                        "sudo",
                        "apt",
                        "install",
                        YES_PLACEHOLDER,
                        "-t",
                        "bookworm-backports",
                        ctx.table["apt_golang"],
                    ),
                    hint=BACKPORTS_HINT,
                ),
                self.select_golang_step(ctx),
            ]
        if release == "unstable":
            return [Step(label, ctx.argv("sudo", "apt", YES_PLACEHOLDER, "install", "golang"))]
        msg = f"Unsupported {self.name} version {release}. {MANUAL_GO_HINT}\n{label}"
        raise UnsupportedPlatformError(msg)


class DarwinRecipe(InstallRecipe):
    """macOS: Homebrew if available, else MacPorts."""

    name = DARWIN

    def steps(self, ctx: InstallContext) -> list[Step]:
        darwin = ctx.table["darwin"]
        if ctx.which("brew"):
            env = {"HOMEBREW_NO_INSTALL_UPGRADE": "1", "HOMEBREW_NO_AUTO_UPDATE": "1"}
            return [
                Step(
                    self.failure_label("brew"),
                    ("brew", "install", *darwin["brew"]),
                    env=env,
                )
            ]
        if ctx.which("port"):
            return [
                Step(
                    self.failure_label("port"),
                    ("sudo", "port", "-N", "install", *darwin["port"]),
                )
            ]
        msg = self.failure_label("missing brew and port")
        raise UnsupportedPlatformError(msg)


def _build_registry() -> dict[str, InstallRecipe]:
    registry: dict[str, InstallRecipe] = {
        "Ubuntu": AptRecipe("Ubuntu"),
        "Debian GNU/Linux": DebianRecipe("Debian GNU/Linux"),
        DARWIN: DarwinRecipe(),
    }
    for name in load_package_table()["commands"]:
        registry[name] = CommandRecipe(name)
    return registry


RECIPES: dict[str, InstallRecipe] = _build_registry()


def select_recipe(
    identity: PlatformIdentity,
    registry: Mapping[str, InstallRecipe] | None = None,
) -> InstallRecipe:
    """Recipe for this host. Raises UnsupportedPlatformError when there is none."""
    if registry is None:
        registry = RECIPES
    if identity.os is HostOS.LINUX:
        key = identity.distro
        if key is None or key not in registry:
            msg = f"deps failed (unsupported linux distro {identity.distro or 'unknown'})"
            raise UnsupportedPlatformError(msg)
    elif identity.os is HostOS.DARWIN:
        key = DARWIN
    else:
        msg = f"deps failed (unsupported os {identity.describe()})"
        raise UnsupportedPlatformError(msg)
    return registry[key]


def run_steps(
    steps: Sequence[Step],
    environ: Mapping[str, str],
    runner: Callable[..., int] = run_step,
) -> None:
    """Run steps in order; the first failing checked step aborts the rest (no rollback)."""
    for step in steps:
        env = {**environ, **(step.env or {})}
        try:
            runner(step.argv, step.label, env=env, check=step.check)
        except ExternalProcessFailure:
            if step.hint:
                print(step.hint)
            raise


def install_dependencies(
    identity: PlatformIdentity,
    assume_yes: bool,
    environ: Mapping[str, str],
    runner: Callable[..., int] = run_step,
    which: Callable[[str], str | None] = shutil.which,
    codename: Callable[[], str | None] = debian_codename,
) -> InstallRecipe:
    """Select and run the recipe for identity. Returns the recipe that ran."""
    recipe = select_recipe(identity)
    ctx = InstallContext(
        identity=identity,
        assume_yes=assume_yes,
        table=load_package_table(),
        which=which,
        codename=codename,
    )
    steps = recipe.steps(ctx)
    log.info("installing dependencies with %s recipe (%d steps)", recipe.name, len(steps))
    run_steps(steps, environ, runner)
    return recipe
