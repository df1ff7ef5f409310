"""nchat tooling: dependency install, memory-aware builds, cross targets and version bumps."""

__version__ = "0.1.0"
