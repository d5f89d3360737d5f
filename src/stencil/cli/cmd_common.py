# topmark:header:start
#
#   project      : Stencil
#   file         : cmd_common.py
#   file_relpath : src/stencil/cli/cmd_common.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Shared helpers for Stencil CLI commands.

Commands stay thin: they resolve the effective options (discovered
configuration file, then command-line overrides), load the data environment
and translate library failures into CLI errors using the helpers below.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from stencil.cli.errors import StencilConfigError, StencilTemplateError, StencilUsageError
from stencil.config.io import discover_config_file
from stencil.config.logging import get_logger
from stencil.config.model import MutableOptions
from stencil.core.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from stencil.cli.console import ConsoleLike
    from stencil.config.logging import StencilLogger
    from stencil.config.model import Options

logger: StencilLogger = get_logger(__name__)


def get_console(ctx: click.Context) -> ConsoleLike:
    """Return the console stored on the Click context by the group."""
    return ctx.obj["console"]


def resolve_cli_options(ctx: click.Context, overrides: Mapping[str, Any]) -> Options:
    """Build the effective options of a command.

    Layering: built-in defaults, then the configuration file (``--config`` or
    discovered from the working directory unless ``--no-config``), then the
    command-line ``overrides``. Configuration warnings are shown on stderr.

    Raises:
        StencilConfigError: If the configuration cannot be read or is invalid.
    """
    console: ConsoleLike = get_console(ctx)
    config_path: Path | None = ctx.obj.get("config_path")
    if config_path is None and not ctx.obj.get("no_config", False):
        config_path = discover_config_file(Path.cwd())

    builder: MutableOptions = MutableOptions.from_defaults()
    try:
        if config_path is not None:
            logger.info("Using configuration file %s", config_path)
            builder.merge_toml_file(config_path)
        builder.merge_mapping(overrides)
        options: Options = builder.freeze()
    except ConfigurationError as exc:
        raise StencilConfigError(str(exc)) from exc

    for diagnostic in options.diagnostics:
        console.warn(str(diagnostic))
    return options


def load_data_file(path: Path) -> dict[str, Any]:
    """Load the data environment from a JSON or TOML file.

    Raises:
        StencilUsageError: If the file type is not supported.
        StencilTemplateError: If the file is malformed or not a table/object.
    """
    text: str = path.read_text(encoding="utf-8")
    suffix: str = path.suffix.lower()
    data: Any
    if suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StencilTemplateError(f"Invalid JSON in {path}: {exc}") from exc
    elif suffix == ".toml":
        try:
            data = tomlkit.parse(text).unwrap()
        except TomlkitParseError as exc:
            raise StencilTemplateError(f"Invalid TOML in {path}: {exc}") from exc
    else:
        raise StencilUsageError(f"Unsupported data file type (expected .json or .toml): {path}")
    if not isinstance(data, dict):
        raise StencilTemplateError(f"Data file {path} must contain an object/table at top level")
    logger.debug("Loaded %d data keys from %s", len(data), path)
    return data


def parse_assignments(assignments: Iterable[str]) -> dict[str, Any]:
    """Parse ``KEY=VALUE`` pairs given with ``--set``.

    Values are read as JSON when possible (``count=3``, ``items=[1,2]``,
    ``flag=true``) and kept as plain strings otherwise.

    Raises:
        StencilUsageError: If an assignment has no ``=`` or an empty key.
    """
    result: dict[str, Any] = {}
    for item in assignments:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise StencilUsageError(f"Invalid --set value (expected KEY=VALUE): {item!r}")
        try:
            result[key] = json.loads(raw)
        except json.JSONDecodeError:
            result[key] = raw
    return result
