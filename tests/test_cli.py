from click.testing import CliRunner
import pytest

from gofmt_pipe import cli as cli_module
from gofmt_pipe.cli import cli


UNFORMATTED = b"package main\nfunc main() {}\n"
FORMATTED = b"package main\n\nfunc main() {}\n"


@pytest.fixture
def recorded(monkeypatch):
    """Swap the external tools for an in-process stage and record options."""
    record = {"options": None, "calls": []}

    def stage(name, src):
        record["calls"].append(name)
        return FORMATTED if src == UNFORMATTED else src

    def from_options(cls, options):
        record["options"] = options
        return cls([stage])

    monkeypatch.setattr(cli_module.Pipeline, "from_options", classmethod(from_options))
    return record


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def test_stdin_to_stdout(runner, recorded):
    result = runner.invoke(cli, [], input=UNFORMATTED)
    assert result.exit_code == 0
    assert result.stdout_bytes == FORMATTED
    assert recorded["calls"] == ["<standard input>"]


def test_negative_tab_width_fails_before_reading(runner, recorded, tmp_path):
    (tmp_path / "main.go").write_bytes(UNFORMATTED)
    result = runner.invoke(cli, ["-tabwidth=-1", "main.go"])
    assert result.exit_code == 2
    assert recorded["options"] is None
    assert recorded["calls"] == []


def test_fix_imports_implies_sort_imports(runner, recorded):
    result = runner.invoke(cli, ["-fiximports"], input=b"")
    assert result.exit_code == 0
    assert recorded["options"].fix_imports
    assert recorded["options"].sort_imports


def test_layout_flags(runner, recorded):
    result = runner.invoke(
        cli,
        ["-tabwidth", "4", "-no-tabs", "-no-comments", "-no-godiff", "-e", "-maxlen=80", "-timeout=0"],
        input=b"",
    )
    assert result.exit_code == 0
    options = recorded["options"]
    assert options.tab_width == 4
    assert not options.tab_indent
    assert not options.comments
    assert not options.use_diff_lib
    assert options.all_errors
    assert options.max_len == 80
    assert options.timeout is None


def test_defaults(runner, recorded):
    runner.invoke(cli, [], input=b"")
    options = recorded["options"]
    assert options.tab_width == 8
    assert options.tab_indent
    assert options.comments
    assert options.use_diff_lib
    assert not options.sort_imports


def test_pyproject_settings_are_used(runner, recorded, tmp_path):
    (tmp_path / "pyproject.toml").write_text("[tool.gofmt-pipe]\nmax-len = 72\ntab-width = 2\n")
    runner.invoke(cli, ["-tabwidth=3"], input=b"")
    assert recorded["options"].max_len == 72
    assert recorded["options"].tab_width == 3


def test_invalid_pyproject_setting_is_usage_error(runner, recorded, tmp_path):
    (tmp_path / "pyproject.toml").write_text("[tool.gofmt-pipe]\ntab-width = -4\n")
    result = runner.invoke(cli, [], input=UNFORMATTED)
    assert result.exit_code == 2
    assert recorded["calls"] == []


def test_list_directory(runner, recorded, tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.go").write_bytes(UNFORMATTED)
    (src / "b.go").write_bytes(FORMATTED)
    (src / "b.txt").write_bytes(UNFORMATTED)
    (src / ".hidden.go").write_bytes(UNFORMATTED)

    result = runner.invoke(cli, ["-l", "src"])

    assert result.exit_code == 1
    assert result.stdout_bytes == b"src/a.go\n"
    assert recorded["calls"] == ["src/a.go", "src/b.go"]


def test_combined_short_flags(runner, recorded, tmp_path):
    (tmp_path / "main.go").write_bytes(UNFORMATTED)

    result = runner.invoke(cli, ["-lw", "main.go"])

    assert result.exit_code == 1
    assert result.stdout_bytes == b"main.go\n"
    assert (tmp_path / "main.go").read_bytes() == FORMATTED


def test_diff_output(runner, recorded, tmp_path):
    (tmp_path / "main.go").write_bytes(UNFORMATTED)

    result = runner.invoke(cli, ["-d", "main.go"])

    assert result.exit_code == 1
    assert result.stdout_bytes == (
        b"diff main.go gofmt/main.go\n"
        b"--- main.go.orig\n"
        b"+++ main.go\n"
        b"@@ -1,2 +1,3 @@\n"
        b" package main\n"
        b"+\n"
        b" func main() {}\n"
    )


def test_missing_path_exit_status(runner, recorded, tmp_path):
    (tmp_path / "a.go").write_bytes(UNFORMATTED)
    (tmp_path / "c.go").write_bytes(UNFORMATTED)

    result = runner.invoke(cli, ["a.go", "b.go", "c.go"])

    assert result.exit_code == 2
    assert result.stdout_bytes == FORMATTED + FORMATTED
    assert recorded["calls"] == ["a.go", "c.go"]


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "gofmt-pipe" in result.output
