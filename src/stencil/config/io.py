# topmark:header:start
#
#   project      : Stencil
#   file         : io.py
#   file_relpath : src/stencil/config/io.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Load TOML configuration sources.

This module provides I/O helpers for reading Stencil configuration from
on-disk TOML files: a dedicated ``stencil.toml`` or the ``[tool.stencil]``
table of ``pyproject.toml``.

Parsing is done with `tomlkit` and returned as plain `dict` structures. The
small getters below mirror the *checked* getters style: they validate the
expected shape and record **warnings** in a `DiagnosticLog` instead of raising,
so user mistakes are surfaced without crashing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from stencil.config.logging import get_logger
from stencil.constants import DEFAULT_TOML_CONFIG_NAME, PYPROJECT_TOML_NAME, PYPROJECT_TOOL_TABLE
from stencil.core.errors import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

    from stencil.config.logging import StencilLogger
    from stencil.core.diagnostics import DiagnosticLog

TomlTable = dict[str, Any]

logger: StencilLogger = get_logger(__name__)


def load_toml_dict(path: Path) -> TomlTable:
    """Load and parse a TOML file from the filesystem.

    Args:
        path (Path): Path to a TOML document (e.g., ``stencil.toml`` or ``pyproject.toml``).

    Returns:
        TomlTable: A plain Python ``dict`` obtained from ``tomlkit``.

    Raises:
        ConfigurationError: If the file cannot be read or is not valid TOML.
    """
    try:
        text: str = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration file {path}: {exc}") from exc
    try:
        data: TomlTable = tomlkit.parse(text).unwrap()
    except TomlkitParseError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
    logger.debug("Loaded TOML from %s: %d top-level keys", path, len(data))
    return data


def extract_stencil_table(path: Path, data: TomlTable) -> TomlTable | None:
    """Return the Stencil options table of a parsed TOML document.

    ``pyproject.toml`` documents carry the options under ``[tool.stencil]``;
    any other document is the options table itself.

    Args:
        path (Path): Path the document was read from (used to detect ``pyproject.toml``).
        data (TomlTable): Parsed document.

    Returns:
        TomlTable | None: The options table, or ``None`` when a ``pyproject.toml``
            has no ``[tool.stencil]`` table.
    """
    if path.name != PYPROJECT_TOML_NAME:
        return data
    tool: Any = data.get("tool")
    if not isinstance(tool, dict):
        return None
    table: Any = tool.get(PYPROJECT_TOOL_TABLE)
    if not isinstance(table, dict):
        return None
    return table


def discover_config_file(start: Path) -> Path | None:
    """Find the nearest configuration file, searching upward from ``start``.

    In each directory ``stencil.toml`` wins over ``pyproject.toml``; a
    ``pyproject.toml`` only counts when it has a ``[tool.stencil]`` table.

    Args:
        start (Path): Directory (or file) to start the search from.

    Returns:
        Path | None: The configuration file, or ``None`` if none was found.
    """
    current: Path = start.resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate: Path = directory / DEFAULT_TOML_CONFIG_NAME
        if candidate.is_file():
            return candidate
        pyproject: Path = directory / PYPROJECT_TOML_NAME
        if pyproject.is_file():
            try:
                table = extract_stencil_table(pyproject, load_toml_dict(pyproject))
            except ConfigurationError as exc:
                logger.warning("Ignoring unreadable %s: %s", pyproject, exc)
                continue
            if table is not None:
                return pyproject
    return None


def get_string_value_checked(
    table: TomlTable,
    key: str,
    *,
    where: str,
    diagnostics: DiagnosticLog,
) -> str | None:
    """Return a string value, recording a warning when present but not `str`."""
    value: Any | None = table.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return value

    loc: Final[str] = f"{where}.{key}"
    logger.warning("Expected string in %s, got %s: %r", loc, type(value).__name__, value)
    diagnostics.add_warning(f"Expected string in {loc}, got {type(value).__name__}: {value}")
    return None


def get_bool_value_checked(
    table: TomlTable,
    key: str,
    *,
    where: str,
    diagnostics: DiagnosticLog,
) -> bool | None:
    """Return a boolean value, recording a warning when present but not `bool`."""
    value: Any | None = table.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        return value

    loc: Final[str] = f"{where}.{key}"
    logger.warning("Expected boolean in %s, got %s: %r", loc, type(value).__name__, value)
    diagnostics.add_warning(f"Expected boolean in {loc}, got {type(value).__name__}: {value}")
    return None


def to_toml(toml_dict: TomlTable) -> str:
    """Serialize a TOML-compatible dict to text, dropping ``None`` values.

    Args:
        toml_dict (TomlTable): Mapping to serialize.

    Returns:
        str: TOML document text.
    """
    cleaned: TomlTable = {k: v for k, v in toml_dict.items() if v is not None}
    return tomlkit.dumps(cleaned)
