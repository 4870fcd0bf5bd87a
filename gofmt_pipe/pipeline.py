"""Transformation stages backed by external Go tools.

A stage is any callable ``stage(filename, src) -> bytes`` that raises
StageError when it cannot produce output. The default pipeline wraps long
lines with golines and then normalizes imports with goimports.
"""

import logging
import os
from pathlib import Path
import shlex
import subprocess
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

from gofmt_pipe.config import Options

LOG = logging.getLogger(__name__)

Stage = Callable[[str, bytes], bytes]


class FormatError(RuntimeError):
    """Base class for errors that abort the processing of one unit."""


class StageError(FormatError):
    """An external tool failed to start, failed or timed out."""


def subprocess_env() -> Dict[str, str]:
    """Environment for the Go tools, with GOMAXPROCS set to the CPU count."""
    env = dict(os.environ)
    env.setdefault("GOMAXPROCS", str(os.cpu_count() or 1))
    return env


def run_command(cmd: Sequence[str], src: bytes, timeout: Optional[float]) -> bytes:
    """Feed ``src`` to the standard input of ``cmd`` and return its output.

    Input is written while stdout and stderr are drained, so a tool that
    starts printing before it has read everything cannot deadlock. On
    timeout the child is killed.

    Args:
        cmd: Executable and arguments.
        src: Bytes written to the child's standard input.
        timeout: Seconds to wait for the child, or None to wait forever.

    Returns:
        The child's standard output.

    Raises:
        StageError: If the tool cannot be started, exits non-zero or
            exceeds the timeout.
    """
    tool = cmd[0]
    LOG.debug(f"Running {shlex.join(cmd)}")
    try:
        completed = subprocess.run(
            list(cmd),
            input=src,
            capture_output=True,
            check=True,
            timeout=timeout,
            env=subprocess_env(),
        )
    except subprocess.CalledProcessError as exc:
        stderr_text = (exc.stderr or b"").decode(errors="replace").strip()
        suffix = f": {stderr_text}" if stderr_text else ""
        raise StageError(f"{tool} exited with status {exc.returncode}{suffix}") from exc
    except subprocess.TimeoutExpired as exc:
        raise StageError(f"{tool} did not finish within {timeout:g}s") from exc
    except OSError as exc:
        raise StageError(f"failed to run {tool}: {exc}") from exc
    return completed.stdout


def expand_indent(src: bytes, tab_width: int) -> bytes:
    """Replace leading tabs on every line with ``tab_width`` spaces each."""
    lines: List[bytes] = []
    for line in src.splitlines(keepends=True):
        body = line.lstrip(b"\t")
        depth = len(line) - len(body)
        lines.append(b" " * (depth * tab_width) + body)
    return b"".join(lines)


class LineWrapper:
    """Shorten long lines with golines."""

    def __init__(self, options: Options) -> None:
        self.cmd = [
            *options.wrapper_cmd,
            f"--max-len={options.max_len}",
            f"--tab-len={options.tab_width}",
        ]
        self.timeout = options.timeout

    def __call__(self, filename: str, src: bytes) -> bytes:
        return run_command(self.cmd, src, self.timeout)


class ImportNormalizer:
    """Add, remove and group import lines with goimports.

    Without ``fix_imports`` goimports runs in format-only mode, which still
    groups and sorts the import block.
    """

    def __init__(self, options: Options) -> None:
        self.options = options
        if not options.comments:
            LOG.warning("goimports always keeps comments; -no-comments has no effect")

    def command(self, filename: str) -> List[str]:
        cmd = list(self.options.imports_cmd)
        if not self.options.fix_imports:
            cmd.append("-format-only")
        if self.options.all_errors:
            cmd.append("-e")
        # goimports resolves local packages relative to -srcdir
        srcdir = filename if Path(filename).is_file() else os.getcwd()
        cmd.extend(["-srcdir", srcdir])
        return cmd

    def __call__(self, filename: str, src: bytes) -> bytes:
        res = run_command(self.command(filename), src, self.options.timeout)
        if not self.options.tab_indent:
            res = expand_indent(res, self.options.tab_width)
        return res


class Pipeline:
    """Ordered sequence of stages applied to one unit's source."""

    def __init__(self, stages: Sequence[Stage]) -> None:
        self.stages = list(stages)

    @classmethod
    def from_options(cls, options: Options) -> "Pipeline":
        return cls([LineWrapper(options), ImportNormalizer(options)])

    def __call__(self, filename: str, src: bytes) -> bytes:
        res = src
        for stage in self.stages:
            res = stage(filename, res)
        return res
