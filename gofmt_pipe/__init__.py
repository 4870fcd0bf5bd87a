"""Top-level package for gofmt-pipe.

This package exposes the API for piping Go sources through golines and
goimports and reporting the result.
"""

from gofmt_pipe.config import Options
from gofmt_pipe.core import format_paths
from gofmt_pipe.core import iter_go_files
from gofmt_pipe.core import process_file
from gofmt_pipe.core import ProcessingResult
from gofmt_pipe.diff import DiffError
from gofmt_pipe.diff import unified_diff
from gofmt_pipe.pipeline import FormatError
from gofmt_pipe.pipeline import Pipeline
from gofmt_pipe.pipeline import StageError


__all__ = [
    "Options",
    "Pipeline",
    "ProcessingResult",
    "FormatError",
    "StageError",
    "DiffError",
    "process_file",
    "format_paths",
    "iter_go_files",
    "unified_diff",
]
