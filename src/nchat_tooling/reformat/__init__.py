"""Source reformatting (go fmt + uncrustify)."""

from .source_fmt import CXX_SOURCES, GO_SOURCES, run_reformat
from .source_fmt import run as run_source_fmt

__all__ = ["CXX_SOURCES", "GO_SOURCES", "run_reformat", "run_source_fmt"]
