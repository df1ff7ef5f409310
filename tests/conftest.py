"""Pytest fixtures for nchat tooling tests."""

from pathlib import Path

import pytest

from nchat_tooling.host import HostOS, PlatformIdentity


@pytest.fixture
def nchat_tree(tmp_path: Path) -> Path:
    """Minimal nchat checkout with lib/common/src/version.h at 5.1.1. Returns project root."""
    header = tmp_path / "lib" / "common" / "src" / "version.h"
    header.parent.mkdir(parents=True)
    header.write_text(
        "// version.h\n"
        "#pragma once\n"
        "\n"
        '#define NCHAT_VERSION "5.1.1"\n'
        '#define NCHAT_OTHER "5.1.1"\n'
    )
    return tmp_path


@pytest.fixture
def ubuntu() -> PlatformIdentity:
    return PlatformIdentity(HostOS.LINUX, "Ubuntu", False, "Linux")


@pytest.fixture
def termux() -> PlatformIdentity:
    return PlatformIdentity(HostOS.LINUX, "Termux", False, "Linux")


@pytest.fixture
def darwin() -> PlatformIdentity:
    return PlatformIdentity(HostOS.DARWIN, None, False, "Darwin")
