"""Configuration for gofmt-pipe.

Options are resolved once, from the command line and an optional
``[tool.gofmt-pipe]`` table in pyproject.toml, and then handed to every
operation explicitly.
"""

from dataclasses import dataclass
import logging
from pathlib import Path
import shlex
import tomllib
from typing import Any
from typing import Dict
from typing import Optional
from typing import Tuple

LOG = logging.getLogger(__name__)

CONFIG_SECTION = "gofmt-pipe"

DEFAULT_TAB_WIDTH = 8
DEFAULT_MAX_LEN = 100
DEFAULT_TIMEOUT = 120.0


@dataclass(frozen=True)
class Options:
    """Immutable run configuration.

    ``fix_imports`` forces ``sort_imports`` on. A ``timeout`` of None means
    subprocesses may run forever.
    """

    list_files: bool = False
    write: bool = False
    diff: bool = False
    all_errors: bool = False
    fix_imports: bool = False
    sort_imports: bool = False
    use_diff_lib: bool = True

    # layout control
    comments: bool = True
    tab_width: int = DEFAULT_TAB_WIDTH
    tab_indent: bool = True
    max_len: int = DEFAULT_MAX_LEN

    timeout: Optional[float] = DEFAULT_TIMEOUT
    wrapper_cmd: Tuple[str, ...] = ("golines",)
    imports_cmd: Tuple[str, ...] = ("goimports",)
    diff_cmd: Tuple[str, ...] = ("diff",)

    def __post_init__(self) -> None:
        if self.tab_width < 0:
            raise ValueError(f"invalid tab width {self.tab_width}: must be non-negative")
        if self.max_len < 1:
            raise ValueError(f"invalid max line length {self.max_len}: must be positive")
        for name in ("wrapper_cmd", "imports_cmd", "diff_cmd"):
            if not getattr(self, name):
                raise ValueError(f"{name} must name an executable")
        if self.fix_imports and not self.sort_imports:
            object.__setattr__(self, "sort_imports", True)

    @property
    def print_result(self) -> bool:
        """True when no list, write or diff output was requested."""
        return not (self.list_files or self.write or self.diff)


def _as_command(value: Any) -> Optional[Tuple[str, ...]]:
    if isinstance(value, str):
        return tuple(shlex.split(value))
    if isinstance(value, list) and all(isinstance(part, str) for part in value):
        return tuple(value)
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _as_seconds(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


# pyproject key -> (Options field, converter)
_FILE_KEYS = {
    "max-len": ("max_len", _as_int),
    "tab-width": ("tab_width", _as_int),
    "timeout": ("timeout", _as_seconds),
    "wrapper": ("wrapper_cmd", _as_command),
    "imports": ("imports_cmd", _as_command),
    "diff-command": ("diff_cmd", _as_command),
}


def read_file_config(root: str) -> Dict[str, Any]:
    """Read ``[tool.gofmt-pipe]`` from ``root/pyproject.toml``.

    Args:
        root: Directory that may contain a pyproject.toml.

    Returns:
        A mapping of Options field names to values. Missing, unreadable or
        malformed files yield an empty mapping; bad values are skipped.
    """
    toml_path = Path(root) / "pyproject.toml"
    if not toml_path.exists():
        return {}
    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        LOG.warning(f"Ignoring {toml_path}: {exc}")
        return {}

    tool = data.get("tool", {})
    section = tool.get(CONFIG_SECTION, {}) if isinstance(tool, dict) else None
    if not isinstance(section, dict):
        LOG.warning(f"Ignoring {toml_path}: [tool.{CONFIG_SECTION}] is not a table")
        return {}
    values: Dict[str, Any] = {}
    for key, raw in section.items():
        if key not in _FILE_KEYS:
            LOG.warning(f"{toml_path}: unknown key '{key}' in [tool.{CONFIG_SECTION}]")
            continue
        field_name, convert = _FILE_KEYS[key]
        value = convert(raw)
        if value is None:
            LOG.warning(f"{toml_path}: invalid value for '{key}': {raw!r}")
            continue
        values[field_name] = value
    LOG.debug(f"Loaded {len(values)} setting(s) from {toml_path}")
    return values


def build_options(file_config: Dict[str, Any], **flags: Any) -> Options:
    """Merge file settings with command-line flags into Options.

    Flags that are None were not given on the command line and leave the
    file value (or the default) in place. A timeout of 0 disables the
    subprocess deadline.

    Raises:
        ValueError: If the merged settings break an Options invariant.
    """
    values = dict(file_config)
    values.update({key: value for key, value in flags.items() if value is not None})
    if "timeout" in values and not values["timeout"]:
        values["timeout"] = None
    return Options(**values)
