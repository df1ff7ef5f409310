"""Error kinds raised by nchat_tooling. Only the CLI turns these into exit codes."""

from __future__ import annotations


class ToolingError(Exception):
    """Base for every failure the CLI reports as `<message>, exiting.` with exit 1."""


class UsageError(ToolingError):
    """Bad, missing or unknown action/flag. Raised before any side effect."""

    def __init__(self, token: str | None = None) -> None:
        self.token = token
        if token is None:
            msg = "no action specified"
        else:
            msg = f"unrecognized argument {token!r}"
        super().__init__(msg)


class UnsupportedPlatformError(ToolingError):
    """Host OS/distro has no matching recipe or OS-specific branch."""


class ExternalProcessFailure(ToolingError):
    """A delegated install/build/reformat/doc/version-lookup step returned non-zero."""

    def __init__(self, step: str, returncode: int | None = None) -> None:
        self.step = step
        self.returncode = returncode
        msg = step
        if returncode is not None:
            msg += f" (exit {returncode})"
        super().__init__(msg)


class RemoteVersionError(ToolingError):
    """Latest upstream version could not be determined (empty or unparsable tag list)."""
