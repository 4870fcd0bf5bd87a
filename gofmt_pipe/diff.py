"""Unified diffs between a unit's original and formatted source.

Two backends are available: difflib in-process, or an external ``diff -u``
run on temporary copies of both buffers. Their hunks may be aligned
differently, but both diffs apply to the same result.
"""

import difflib
import io
import logging
from pathlib import Path
import subprocess
import tempfile
from typing import List

from gofmt_pipe.config import Options
from gofmt_pipe.pipeline import FormatError

LOG = logging.getLogger(__name__)

NO_NEWLINE = b"\\ No newline at end of file\n"


class DiffError(FormatError):
    """The diff between original and formatted source could not be computed."""


def _lines(data: bytes) -> List[bytes]:
    # split on b"\n" only, like diff does
    return io.BytesIO(data).readlines()


def lib_diff(src: bytes, res: bytes, fromfile: str, tofile: str) -> bytes:
    """Compute a unified diff with difflib."""
    out: List[bytes] = []
    for line in difflib.diff_bytes(
        difflib.unified_diff,
        _lines(src),
        _lines(res),
        fromfile=fromfile.encode(),
        tofile=tofile.encode(),
    ):
        if not line.endswith(b"\n"):
            line += b"\n" + NO_NEWLINE
        out.append(line)
    return b"".join(out)


def cmd_diff(src: bytes, res: bytes, fromfile: str, tofile: str, options: Options) -> bytes:
    """Compute a unified diff by running the external diff command.

    Raises:
        DiffError: If diff cannot be run or reports trouble (status > 1).
    """
    with tempfile.TemporaryDirectory(prefix="gofmt-pipe-") as tmp:
        orig_path = Path(tmp) / "orig"
        new_path = Path(tmp) / "new"
        orig_path.write_bytes(src)
        new_path.write_bytes(res)
        cmd = [
            *options.diff_cmd,
            "-u",
            "--label", fromfile,
            "--label", tofile,
            str(orig_path),
            str(new_path),
        ]
        LOG.debug(f"Running {' '.join(cmd)}")
        try:
            completed = subprocess.run(cmd, capture_output=True, timeout=options.timeout)
        except subprocess.TimeoutExpired as exc:
            raise DiffError(f"{cmd[0]} did not finish within {options.timeout:g}s") from exc
        except OSError as exc:
            raise DiffError(f"failed to run {cmd[0]}: {exc}") from exc

    # diff exits with 1 when the inputs differ
    if completed.returncode not in (0, 1):
        stderr_text = completed.stderr.decode(errors="replace").strip()
        raise DiffError(f"{cmd[0]} exited with status {completed.returncode}: {stderr_text}")
    return completed.stdout


def unified_diff(name: str, src: bytes, res: bytes, options: Options) -> bytes:
    """Return the diff of ``src`` against ``res`` using the configured backend.

    Both sides are labelled ``<name>.orig`` and ``<name>``.

    Raises:
        DiffError: If the diff could not be computed.
    """
    fromfile = f"{name}.orig"
    try:
        if options.use_diff_lib:
            return lib_diff(src, res, fromfile, name)
        return cmd_diff(src, res, fromfile, name, options)
    except (FormatError, OSError) as exc:
        raise DiffError(f"computing diff: {exc}") from exc
