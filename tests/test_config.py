import logging

import pytest

from gofmt_pipe.config import build_options
from gofmt_pipe.config import Options
from gofmt_pipe.config import read_file_config


def test_fix_imports_implies_sort_imports():
    options = Options(fix_imports=True)
    assert options.sort_imports is True
    assert Options().sort_imports is False


def test_negative_tab_width_is_rejected():
    with pytest.raises(ValueError, match="tab width"):
        Options(tab_width=-1)


def test_print_result_only_without_output_modes():
    assert Options().print_result
    assert not Options(list_files=True).print_result
    assert not Options(write=True).print_result
    assert not Options(diff=True).print_result


def test_read_file_config_from_toml(tmp_path):
    toml = tmp_path / "pyproject.toml"
    toml.write_text(
        "[tool.gofmt-pipe]\n"
        "max-len = 80\n"
        "tab-width = 4\n"
        "timeout = 0\n"
        'wrapper = "golines --shorten-comments"\n'
        'imports = ["/opt/go/bin/goimports"]\n'
    )
    values = read_file_config(str(tmp_path))
    assert values == {
        "max_len": 80,
        "tab_width": 4,
        "timeout": 0.0,
        "wrapper_cmd": ("golines", "--shorten-comments"),
        "imports_cmd": ("/opt/go/bin/goimports",),
    }

    options = build_options(values)
    assert options.timeout is None
    assert options.max_len == 80
    assert options.wrapper_cmd == ("golines", "--shorten-comments")


def test_read_file_config_without_file(tmp_path):
    assert read_file_config(str(tmp_path)) == {}


def test_read_file_config_ignores_broken_toml(tmp_path, caplog):
    (tmp_path / "pyproject.toml").write_text("[tool.gofmt-pipe\n")
    with caplog.at_level(logging.WARNING):
        assert read_file_config(str(tmp_path)) == {}
    assert "Ignoring" in caplog.text


@pytest.mark.parametrize("content", [
    'tool = "x"\n',
    '[tool]\ngofmt-pipe = 3\n',
])
def test_read_file_config_ignores_non_table_sections(tmp_path, caplog, content):
    (tmp_path / "pyproject.toml").write_text(content)
    with caplog.at_level(logging.WARNING):
        assert read_file_config(str(tmp_path)) == {}
    assert "Ignoring" in caplog.text


def test_read_file_config_skips_bad_values(tmp_path, caplog):
    (tmp_path / "pyproject.toml").write_text(
        "[tool.gofmt-pipe]\n"
        'max-len = "long"\n'
        "colour = true\n"
        "tab-width = 2\n"
    )
    with caplog.at_level(logging.WARNING):
        values = read_file_config(str(tmp_path))
    assert values == {"tab_width": 2}
    assert "invalid value for 'max-len'" in caplog.text
    assert "unknown key 'colour'" in caplog.text


def test_flags_override_file_values():
    options = build_options({"max_len": 80, "tab_width": 4}, max_len=120, tab_width=None)
    assert options.max_len == 120
    assert options.tab_width == 4


def test_negative_tab_width_from_file_is_rejected():
    with pytest.raises(ValueError):
        build_options({"tab_width": -2})
