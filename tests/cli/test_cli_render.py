# topmark:header:start
#
#   project      : Stencil
#   file         : test_cli_render.py
#   file_relpath : tests/cli/test_cli_render.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI tests: `stencil render`."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from stencil.cli.exit_codes import ExitCode
from tests.cli.conftest import assert_exit, assert_SUCCESS, run_cli, run_cli_in
from tests.conftest import FIXTURES_DIR, mark_cli

if TYPE_CHECKING:
    from pathlib import Path

PAGE = "<h1>Fruit &amp; Veg</h1>\n\n<ul>\n  <li>apple</li>\n  <li>&lt;kiwi&gt;</li>\n</ul>\n"


@mark_cli
@pytest.mark.parametrize("data_name", ["data.json", "data.toml"])
def test_render_fixture_page(data_name: str) -> None:
    """Data is read from JSON or TOML files."""
    result = run_cli(
        ["render", str(FIXTURES_DIR / "page.stencil"), "--data", str(FIXTURES_DIR / data_name)]
    )
    assert_SUCCESS(result)
    assert result.output == PAGE


@mark_cli
def test_set_assignments(tmp_path: Path) -> None:
    """``--set`` values are JSON when they parse as JSON, strings otherwise."""
    (tmp_path / "a.stencil").write_text(
        "<%= title %>:<% for n in nums: %><%= n * 2 %><% end %>", encoding="utf-8"
    )
    result = run_cli_in(
        tmp_path, ["render", "a.stencil", "--set", "title=Hi", "--set", "nums=[1, 2]"]
    )
    assert_SUCCESS(result)
    assert result.output == "Hi:24"


@mark_cli
def test_set_overrides_data_file(tmp_path: Path) -> None:
    """Assignments are applied after the data file."""
    (tmp_path / "a.stencil").write_text("<%= a %><%= b %>", encoding="utf-8")
    (tmp_path / "d.json").write_text(json.dumps({"a": 1, "b": 2}), encoding="utf-8")
    result = run_cli_in(tmp_path, ["render", "a.stencil", "--data", "d.json", "--set", "b=3"])
    assert_SUCCESS(result)
    assert result.output == "13"


@mark_cli
def test_delimiter_and_whitespace_flags(tmp_path: Path) -> None:
    """Template flags override the defaults."""
    (tmp_path / "a.stencil").write_text("  <?= x ?>  \n", encoding="utf-8")
    result = run_cli_in(
        tmp_path, ["render", "a.stencil", "-d", "?", "--rm-whitespace", "--set", "x=1"]
    )
    assert_SUCCESS(result)
    assert result.output == "1\n"


@mark_cli
def test_output_file(tmp_path: Path) -> None:
    """``--output`` writes the rendered text instead of printing it."""
    (tmp_path / "a.stencil").write_text("<%= 6 * 7 %>", encoding="utf-8")
    result = run_cli_in(tmp_path, ["render", "a.stencil", "-o", "out.txt"])
    assert_SUCCESS(result)
    assert result.output == ""
    assert (tmp_path / "out.txt").read_text(encoding="utf-8") == "42"


@mark_cli
def test_configuration_file_is_discovered(tmp_path: Path) -> None:
    """A ``stencil.toml`` in the working directory provides defaults."""
    (tmp_path / "stencil.toml").write_text('delimiter = "?"\n', encoding="utf-8")
    (tmp_path / "a.stencil").write_text("<?= 1 ?><%= 2 %>", encoding="utf-8")
    assert run_cli_in(tmp_path, ["render", "a.stencil"]).output == "1<%= 2 %>"
    assert run_cli_in(tmp_path, ["--no-config", "render", "a.stencil"]).output == "<?= 1 ?>2"


@mark_cli
def test_syntax_error_exit_code(tmp_path: Path) -> None:
    """Malformed templates exit with TEMPLATE_ERROR."""
    (tmp_path / "a.stencil").write_text("<% x", encoding="utf-8")
    result = run_cli_in(tmp_path, ["render", "a.stencil"])
    assert_exit(result, ExitCode.TEMPLATE_ERROR)
    assert 'Could not find matching close tag for "<%"' in result.output


@mark_cli
def test_render_error_exit_code() -> None:
    """Failing embedded code exits with RENDER_ERROR and shows the template line."""
    result = run_cli(["render", str(FIXTURES_DIR / "broken.stencil")])
    assert_exit(result, ExitCode.RENDER_ERROR)
    assert "broken.stencil:2" in result.output
    assert "missing_name" in result.output


@mark_cli
def test_render_error_without_compile_debug() -> None:
    """Without line mapping the original error type is reported."""
    result = run_cli(["render", str(FIXTURES_DIR / "broken.stencil"), "--no-compile-debug"])
    assert_exit(result, ExitCode.RENDER_ERROR)
    assert "NameError: name 'missing_name' is not defined" in result.output


@mark_cli
def test_missing_template_exit_code(tmp_path: Path) -> None:
    """A template that does not exist exits with FILE_NOT_FOUND."""
    result = run_cli_in(tmp_path, ["render", "absent.stencil"])
    assert_exit(result, ExitCode.FILE_NOT_FOUND)


@mark_cli
def test_missing_include_exit_code(tmp_path: Path) -> None:
    """An include that cannot be read exits with FILE_NOT_FOUND."""
    (tmp_path / "a.stencil").write_text("<% include absent %>", encoding="utf-8")
    result = run_cli_in(tmp_path, ["render", "a.stencil"])
    assert_exit(result, ExitCode.FILE_NOT_FOUND)
    assert "Cannot include 'absent'" in result.output


@mark_cli
@pytest.mark.parametrize("assignment", ["novalue", "=1"])
def test_bad_assignment_is_usage_error(tmp_path: Path, assignment: str) -> None:
    """``--set`` needs ``KEY=VALUE``."""
    (tmp_path / "a.stencil").write_text("x", encoding="utf-8")
    result = run_cli_in(tmp_path, ["render", "a.stencil", "--set", assignment])
    assert_exit(result, ExitCode.USAGE_ERROR)


@mark_cli
def test_unsupported_data_file_is_usage_error(tmp_path: Path) -> None:
    """Only JSON and TOML data files are accepted."""
    (tmp_path / "a.stencil").write_text("x", encoding="utf-8")
    (tmp_path / "d.yaml").write_text("a: 1\n", encoding="utf-8")
    result = run_cli_in(tmp_path, ["render", "a.stencil", "--data", "d.yaml"])
    assert_exit(result, ExitCode.USAGE_ERROR)


@mark_cli
@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_malformed_data_file(tmp_path: Path, content: str) -> None:
    """Data files must parse and hold an object at top level."""
    (tmp_path / "a.stencil").write_text("x", encoding="utf-8")
    (tmp_path / "d.json").write_text(content, encoding="utf-8")
    result = run_cli_in(tmp_path, ["render", "a.stencil", "--data", "d.json"])
    assert_exit(result, ExitCode.TEMPLATE_ERROR)


@mark_cli
def test_bad_delimiter_is_config_error(tmp_path: Path) -> None:
    """An invalid delimiter exits with CONFIG_ERROR."""
    (tmp_path / "a.stencil").write_text("x", encoding="utf-8")
    result = run_cli_in(tmp_path, ["render", "a.stencil", "--delimiter", "ab"])
    assert_exit(result, ExitCode.CONFIG_ERROR)
    assert "exactly one character" in result.output
