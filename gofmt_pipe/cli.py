#!/usr/bin/env python3
"""Command-line interface for gofmt-pipe using Click."""

from importlib import metadata
import logging
import os
import sys
from typing import Optional
from typing import Tuple

import click
from gofmt_pipe import config
from gofmt_pipe import core
from gofmt_pipe.pipeline import Pipeline


try:
    VERSION = f"gofmt-pipe {metadata.version('gofmt-pipe')}"
except metadata.PackageNotFoundError:
    VERSION = "gofmt-pipe"


def _configure_logging(verbose: bool, quiet: bool) -> None:
    # Configure logging only once
    if logging.getLogger().handlers:
        return
    if quiet:
        logging.basicConfig(level=logging.ERROR, format="%(message)s")
    else:
        logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-l", "list_files", is_flag=True, help="List files whose formatting differs from the pipeline's.")
@click.option("-w", "write", is_flag=True, help="Write result to (source) file instead of stdout.")
@click.option("-d", "diff", is_flag=True, help="Display diffs instead of rewriting files.")
@click.option("-e", "all_errors", is_flag=True, help="Report all errors (not just the first 10 on different lines).")
@click.option(
    "-fiximports",
    "fix_imports",
    is_flag=True,
    help="Update Go import lines, adding missing ones and removing unreferenced ones. Implies -sortimports.",
)
@click.option("-sortimports", "sort_imports", is_flag=True, help="Sort Go import lines in goimports style.")
@click.option(
    "-godiff/-no-godiff",
    "use_diff_lib",
    default=True,
    help="Compute diffs in-process (default) or with the external diff command.",
)
@click.option("-comments/-no-comments", "comments", default=True, help="Print comments.")
@click.option("-tabwidth", "tab_width", type=click.IntRange(min=0), default=None, help="Tab width (default: 8).")
@click.option("-tabs/-no-tabs", "tab_indent", default=True, help="Indent with tabs.")
@click.option(
    "-maxlen",
    "max_len",
    type=click.IntRange(min=1),
    default=None,
    help="Target line length passed to golines (default: 100).",
)
@click.option(
    "-timeout",
    "timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds each external tool may run per file; 0 waits forever (default: 120).",
)
@click.option("-v", "--verbose", is_flag=True, help="Increase verbosity.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.version_option(version=VERSION, prog_name="gofmt-pipe")
@click.argument("paths", nargs=-1, type=click.Path())
def cli(
    paths: Tuple[str, ...],
    verbose: bool,
    quiet: bool,
    tab_width: Optional[int],
    max_len: Optional[int],
    timeout: Optional[float],
    **flags: bool,
) -> None:
    """Wrap long lines with golines, then fix imports with goimports.

    With no PATHS, standard input is formatted to standard output.
    Directories are walked recursively for .go files.
    """
    _configure_logging(verbose, quiet)

    file_config = config.read_file_config(os.getcwd())
    try:
        options = config.build_options(
            file_config,
            tab_width=tab_width,
            max_len=max_len,
            timeout=timeout,
            **flags,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    pipeline = Pipeline.from_options(options)
    exit_code = core.format_paths(
        paths,
        options,
        pipeline,
        click.get_binary_stream("stdout"),
        click.get_binary_stream("stdin"),
    )
    sys.exit(exit_code)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    cli()
