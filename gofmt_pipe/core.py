#!/usr/bin/env python3
"""Core orchestration for gofmt-pipe.

This module resolves the units to format (standard input, files, or Go
files found by walking directories), runs each one through the pipeline
and dispatches the result to the requested outputs: list, write, diff, or
print.
"""
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import stat
from typing import BinaryIO
from typing import Callable
from typing import Iterator
from typing import Optional
from typing import Sequence

from gofmt_pipe.config import Options
from gofmt_pipe.diff import unified_diff
from gofmt_pipe.pipeline import FormatError

LOG = logging.getLogger(__name__)

STDIN_NAME = "<standard input>"
SOURCE_SUFFIX = ".go"
DIFF_LABEL = "gofmt"

# exit statuses, highest wins
EXIT_OK = 0
EXIT_CHANGED = 1
EXIT_ERROR = 2

Transform = Callable[[str, bytes], bytes]


@dataclass(frozen=True)
class ProcessingResult:
    """Original and formatted bytes of one unit."""

    name: str
    src: bytes
    res: bytes

    @property
    def changed(self) -> bool:
        return self.src != self.res


def is_go_file(name: str) -> bool:
    """Return True for non-hidden file names ending in .go."""
    return not name.startswith(".") and name.endswith(SOURCE_SUFFIX)


def _log_walk_error(path: str, exc: OSError) -> None:
    LOG.error(f"[{path}] ERROR: {exc}")


def iter_go_files(
    root: str,
    onerror: Callable[[str, OSError], None] = _log_walk_error,
) -> Iterator[str]:
    """Yield Go files under ``root`` in lexical walk order.

    Files are yielded as they are found, so callers format while the walk
    proceeds. Hidden names are skipped only for files; directories are
    always descended. Symlinked directories are not followed. A directory
    that cannot be listed is passed to ``onerror`` and the walk goes on.
    """
    try:
        entries = sorted(Path(root).iterdir())
    except OSError as exc:
        onerror(root, exc)
        return
    for entry in entries:
        if entry.is_dir() and not entry.is_symlink():
            yield from iter_go_files(str(entry), onerror)
        elif is_go_file(entry.name):
            yield str(entry)


def read_source(filename: str, stream: Optional[BinaryIO] = None) -> bytes:
    """Read a whole unit into memory, from ``stream`` when given."""
    if stream is not None:
        return stream.read()
    return Path(filename).read_bytes()


def process_source(name: str, src: bytes, pipeline: Transform) -> ProcessingResult:
    """Run ``src`` through the pipeline and pair it with the result."""
    return ProcessingResult(name=name, src=src, res=pipeline(name, src))


def emit(result: ProcessingResult, options: Options, out: BinaryIO, stdin: bool = False) -> None:
    """Dispatch a result to every requested output.

    List, write and diff are independent and each fires only for changed
    units. With none of them requested the result is printed as is.

    Raises:
        DiffError: If the diff could not be computed.
        OSError: If the file could not be rewritten.
    """
    name = result.name
    if result.changed:
        if options.list_files:
            out.write(f"{name}\n".encode())

        if options.write:
            if stdin:
                LOG.warning(f"[{name}] cannot write result back to standard input")
            else:
                Path(name).write_bytes(result.res)
                LOG.debug(f"[{name}] file updated.")

        if options.diff:
            data = unified_diff(name, result.src, result.res, options)
            out.write(f"diff {name} {DIFF_LABEL}/{name}\n".encode())
            out.write(data)

    if options.print_result:
        out.write(result.res)


def process_file(
    filename: str,
    options: Options,
    pipeline: Transform,
    out: BinaryIO,
    stream: Optional[BinaryIO] = None,
) -> ProcessingResult:
    """Read, format and emit one unit.

    Args:
        filename: Path of the file, or the display name when reading ``stream``.
        options: Run configuration.
        pipeline: Transformation applied to the source.
        out: Binary stream receiving list, diff and print output.
        stream: Source to read instead of ``filename``.

    Returns:
        The processing result of the unit.

    Raises:
        FormatError: If a stage or the diff failed.
        OSError: If the unit could not be read or written.
    """
    src = read_source(filename, stream)
    result = process_source(filename, src, pipeline)
    emit(result, options, out, stdin=stream is not None)
    return result


def _format_unit(
    filename: str,
    options: Options,
    pipeline: Transform,
    out: BinaryIO,
    stream: Optional[BinaryIO] = None,
) -> int:
    try:
        result = process_file(filename, options, pipeline, out, stream)
    except (FormatError, OSError) as exc:
        LOG.error(f"[{filename}] ERROR: {exc}")
        return EXIT_ERROR
    if result.changed and (options.list_files or options.diff):
        return EXIT_CHANGED
    return EXIT_OK


def format_paths(
    paths: Sequence[str],
    options: Options,
    pipeline: Transform,
    out: BinaryIO,
    stdin: Optional[BinaryIO] = None,
) -> int:
    """Format every unit named by ``paths``, or standard input if none.

    Units are handled one at a time in argument order. A unit that fails is
    reported and skipped; the rest of the batch still runs.

    Returns:
        0 if every unit was processed, 1 if list or diff mode found changes,
        2 if any unit failed.
    """
    if not paths:
        if stdin is None:
            raise ValueError("no paths given and no standard input available")
        return _format_unit(STDIN_NAME, options, pipeline, out, stream=stdin)

    exit_code = EXIT_OK
    walk_failed = False

    def walk_error(dirname: str, exc: OSError) -> None:
        nonlocal walk_failed
        _log_walk_error(dirname, exc)
        walk_failed = True

    for path in paths:
        try:
            is_dir = stat.S_ISDIR(os.stat(path).st_mode)
        except OSError as exc:
            LOG.error(f"[{path}] ERROR: {exc}")
            exit_code = max(exit_code, EXIT_ERROR)
            continue

        if is_dir:
            for filename in iter_go_files(path, walk_error):
                exit_code = max(exit_code, _format_unit(filename, options, pipeline, out))
        else:
            exit_code = max(exit_code, _format_unit(path, options, pipeline, out))
    if walk_failed:
        exit_code = EXIT_ERROR
    return exit_code
