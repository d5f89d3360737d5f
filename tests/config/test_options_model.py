# topmark:header:start
#
#   project      : Stencil
#   file         : test_options_model.py
#   file_relpath : tests/config/test_options_model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the options model: defaults, merging, freezing and thawing."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from stencil.config import MutableOptions, Options, load_options_file, option_keys_in
from stencil.constants import DEFAULT_DEFERRED_MARKER
from stencil.core.errors import ConfigurationError
from stencil.core.escaping import escape_xml


def test_defaults() -> None:
    """Built-in defaults match the documented option values."""
    opts = MutableOptions.from_defaults().freeze()
    assert opts.delimiter == "%"
    assert opts.filename is None
    assert (opts.cache, opts.watch_files, opts.debug) == (False, False, False)
    assert opts.compile_debug is True
    assert opts.escape is escape_xml
    assert opts.rm_whitespace is False
    assert opts.deferred_marker == DEFAULT_DEFERRED_MARKER


def test_options_are_frozen() -> None:
    """Frozen options cannot be mutated."""
    opts = Options()
    with pytest.raises(FrozenInstanceError):
        opts.delimiter = "?"  # type: ignore[misc]


def test_merge_accepts_camel_case_aliases() -> None:
    """camelCase keys are accepted for the multi-word options."""
    opts = MutableOptions.from_mapping(
        {"compileDebug": False, "watchFiles": True, "rmWhitespace": True}
    ).freeze()
    assert (opts.compile_debug, opts.watch_files, opts.rm_whitespace) == (False, True, True)


def test_unknown_and_mistyped_values_become_warnings() -> None:
    """Unknown keys and wrongly typed values are ignored and reported."""
    builder = MutableOptions.from_mapping({"colour": "red", "cache": "yes", "escape": 3})
    assert builder.diagnostics.has_warning()
    opts = builder.freeze()
    assert opts.cache is False
    assert opts.escape is escape_xml
    messages = [d.message for d in opts.diagnostics]
    assert "Unknown option ignored: colour" in messages
    assert str(opts.diagnostics[0]) == "Warning: Unknown option ignored: colour"
    assert any("Expected boolean in options.cache" in m for m in messages)
    assert any("Expected callable in options.escape" in m for m in messages)


def test_none_values() -> None:
    """``None`` keeps the current value, except for ``filename`` which it unsets."""
    builder = MutableOptions.from_mapping({"filename": "a.stencil", "delimiter": "?"})
    builder.merge_mapping({"filename": None, "delimiter": None})
    assert builder.filename is None
    assert builder.delimiter == "?"


@pytest.mark.parametrize("delimiter", ["", "%%"])
def test_freeze_rejects_bad_delimiter(delimiter: str) -> None:
    """Only one-character delimiters are valid."""
    with pytest.raises(ConfigurationError, match="exactly one character"):
        MutableOptions.from_mapping({"delimiter": delimiter}).freeze()


def test_freeze_rejects_bad_deferred_marker() -> None:
    """The deferred marker must be a regular expression."""
    with pytest.raises(ConfigurationError, match="deferred_marker"):
        MutableOptions.from_mapping({"deferred_marker": "done("}).freeze()


def test_thaw_round_trip_keeps_values() -> None:
    """Thawing and freezing again preserves every option."""
    opts = MutableOptions.from_mapping({"delimiter": "$", "cache": True, "filename": "f"}).freeze()
    assert opts.thaw().freeze() == opts
    assert opts.with_filename("g").filename == "g"


def test_to_toml_dict_exports_file_options_only() -> None:
    """Runtime-only options are not exported."""
    exported = Options().to_toml_dict()
    assert "filename" not in exported
    assert "escape" not in exported
    assert exported["delimiter"] == "%"


def test_option_keys_in_picks_options_from_data() -> None:
    """Data keys naming options are recognized (including aliases)."""
    data = {"cache": True, "compileDebug": False, "user": "x"}
    assert option_keys_in(data) == {"cache": True, "compileDebug": False}


def test_option_keys_in_prefers_view_options_settings() -> None:
    """``settings["view options"]`` replaces the top level as the option source."""
    data = {
        "cache": True,
        "settings": {"view options": {"delimiter": "?", "title": "x"}},
    }
    assert option_keys_in(data) == {"delimiter": "?"}
    assert option_keys_in({"cache": True, "settings": {"env": "dev"}}) == {"cache": True}


def test_load_options_file(tmp_path: Path) -> None:
    """A TOML file is layered over the defaults and recorded as provenance."""
    path = tmp_path / "stencil.toml"
    path.write_text('delimiter = "?"\nrm_whitespace = true\nbogus = 1\n', encoding="utf-8")
    opts = load_options_file(path)
    assert opts.delimiter == "?"
    assert opts.rm_whitespace is True
    assert opts.config_files == (str(path),)
    assert any("Unknown key" in d.message and "bogus" in d.message for d in opts.diagnostics)


def test_load_options_file_without_path() -> None:
    """No file means defaults."""
    assert load_options_file(None) == MutableOptions.from_defaults().freeze()
