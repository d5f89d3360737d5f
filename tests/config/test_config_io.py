# topmark:header:start
#
#   project      : Stencil
#   file         : test_config_io.py
#   file_relpath : tests/config/test_config_io.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for TOML configuration loading and discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from stencil.config import MutableOptions, discover_config_file
from stencil.config.io import extract_stencil_table, load_toml_dict, to_toml
from stencil.core.errors import ConfigurationError


def test_load_invalid_toml(tmp_path: Path) -> None:
    """Malformed TOML is a configuration error."""
    path = tmp_path / "stencil.toml"
    path.write_text("delimiter = \n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Invalid TOML"):
        load_toml_dict(path)


def test_load_missing_file(tmp_path: Path) -> None:
    """An unreadable file is a configuration error."""
    with pytest.raises(ConfigurationError, match="Cannot read"):
        load_toml_dict(tmp_path / "absent.toml")


def test_pyproject_table_extraction() -> None:
    """``pyproject.toml`` carries options under ``[tool.stencil]``."""
    data = {"tool": {"stencil": {"delimiter": "$"}}, "project": {}}
    assert extract_stencil_table(Path("pyproject.toml"), data) == {"delimiter": "$"}
    assert extract_stencil_table(Path("pyproject.toml"), {"project": {}}) is None
    assert extract_stencil_table(Path("stencil.toml"), {"delimiter": "$"}) == {"delimiter": "$"}


def test_discovery_prefers_stencil_toml(tmp_path: Path) -> None:
    """In one directory ``stencil.toml`` wins over ``pyproject.toml``."""
    (tmp_path / "pyproject.toml").write_text('[tool.stencil]\ndelimiter = "$"\n')
    (tmp_path / "stencil.toml").write_text('delimiter = "?"\n')
    assert discover_config_file(tmp_path) == (tmp_path / "stencil.toml").resolve()


def test_discovery_walks_up_and_skips_foreign_pyproject(tmp_path: Path) -> None:
    """A ``pyproject.toml`` without a Stencil table does not stop the search."""
    (tmp_path / "pyproject.toml").write_text('[tool.stencil]\ncache = true\n')
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    (tmp_path / "a" / "pyproject.toml").write_text('[project]\nname = "x"\n')
    assert discover_config_file(nested) == (tmp_path / "pyproject.toml").resolve()


def test_merge_pyproject_file(tmp_path: Path) -> None:
    """Options are read from ``[tool.stencil]`` and type-checked."""
    path = tmp_path / "pyproject.toml"
    path.write_text('[tool.stencil]\ndelimiter = "$"\ncache = "no"\n', encoding="utf-8")
    opts = MutableOptions.from_defaults().merge_toml_file(path).freeze()
    assert opts.delimiter == "$"
    assert opts.cache is False
    assert any("Expected boolean" in d.message for d in opts.diagnostics)


def test_to_toml_drops_none() -> None:
    """``None`` values are not serialized."""
    text = to_toml({"delimiter": "%", "filename": None, "cache": False})
    assert "filename" not in text
    assert 'delimiter = "%"' in text
    assert "cache = false" in text
