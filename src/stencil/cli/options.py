# topmark:header:start
#
#   project      : Stencil
#   file         : options.py
#   file_relpath : src/stencil/cli/options.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Common CLI option utilities for the Stencil command line.

This module centralizes reusable options (verbosity, color, template options)
and their resolution logic, so commands and groups can stay thin. The helpers
here are Click-aware.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ParamSpec, TypeVar

import click

from stencil.cli.errors import StencilUsageError
from stencil.config.keys import Opt
from stencil.config.logging import LOG_LEVELS, get_logger

if TYPE_CHECKING:
    from stencil.config.logging import StencilLogger

P = ParamSpec("P")
R = TypeVar("R")

logger: StencilLogger = get_logger(__name__)


def resolve_verbosity(verbose_count: int, quiet_count: int) -> int:
    """Resolve the final verbosity level based on verbose and quiet counts.

    Args:
        verbose_count: Number of times the verbose flag (-v) is passed.
        quiet_count: Number of times the quiet flag (-q) is passed.

    Returns:
        The verbosity as a logging level.

    Raises:
        StencilUsageError: If both verbose and quiet flags are used simultaneously.

    Behavior:
        Three or more -v flags set TRACE level, two set DEBUG, one sets INFO.
        One or more -q flags set ERROR level. Default level is WARNING.
    """
    if verbose_count > 0 and quiet_count > 0:
        raise StencilUsageError("The '--verbose' and '--quiet' options are mutually exclusive.")

    if verbose_count >= 3:  # -vvv
        return LOG_LEVELS["TRACE"]
    if verbose_count == 2:  # -vv
        return LOG_LEVELS["DEBUG"]
    if verbose_count == 1:  # -v
        return LOG_LEVELS["INFO"]

    if quiet_count >= 1:  # -q
        return LOG_LEVELS["ERROR"]

    return LOG_LEVELS["WARNING"]


def common_verbose_options(f: Callable[P, R]) -> Callable[P, R]:
    """Adds --verbose and --quiet options to a command."""
    f = click.option(
        "-v",
        "--verbose",
        count=True,
        help="Increase verbosity. Specify up to three times for more detail.",
    )(f)
    f = click.option(
        "-q",
        "--quiet",
        count=True,
        help="Suppress informational output.",
    )(f)
    return f


class ColorMode(str, Enum):
    """User intent for colorized terminal output."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


def resolve_color_mode(
    *,
    cli_mode: ColorMode | None,
    stdout_isatty: bool | None = None,
) -> bool:
    """Determine whether color output should be enabled.

    Args:
        cli_mode: Explicit color mode from CLI options (auto, always, never).
        stdout_isatty: Whether stdout is a TTY; if None, auto-detected.

    Returns:
        True if color output should be enabled, False otherwise.

    Behavior:
        Honors --color and --no-color CLI flags, then the FORCE_COLOR and
        NO_COLOR environment variables. Defaults to enabling color if stdout
        is a TTY.
    """
    if cli_mode == ColorMode.ALWAYS:
        return True
    if cli_mode == ColorMode.NEVER:
        return False
    force_color = os.getenv("FORCE_COLOR")
    if force_color and force_color != "0":
        return True
    if os.getenv("NO_COLOR") is not None:
        return False
    if stdout_isatty is None:
        isatty = getattr(sys.stdout, "isatty", None)
        stdout_isatty = bool(isatty()) if isatty is not None else False
    return stdout_isatty


def common_color_options(f: Callable[P, R]) -> Callable[P, R]:
    """Adds --color and --no-color options to a command."""
    f = click.option(
        "--color",
        "color_mode",
        type=click.Choice([m.value for m in ColorMode]),
        default=None,
        help="Color output: auto (default), always, or never.",
    )(f)
    f = click.option(
        "--no-color",
        "no_color",
        is_flag=True,
        help="Disable color output (equivalent to --color=never).",
    )(f)
    return f


def template_options(f: Callable[P, R]) -> Callable[P, R]:
    """Adds the compilation options shared by template commands.

    Behavior:
        Adds --delimiter, --rm-whitespace and --compile-debug/--no-compile-debug.
        Options left unset do not override the discovered configuration.
    """
    f = click.option(
        "--delimiter",
        "-d",
        "delimiter",
        metavar="CHAR",
        default=None,
        help="Tag delimiter character (default: %).",
    )(f)
    f = click.option(
        "--rm-whitespace",
        "rm_whitespace",
        is_flag=True,
        default=None,
        help="Strip leading/trailing blanks of every template line.",
    )(f)
    f = click.option(
        "--compile-debug/--no-compile-debug",
        "compile_debug",
        default=None,
        help="Map runtime errors to template lines (default: on).",
    )(f)
    return f


def template_overrides(
    *,
    delimiter: str | None,
    rm_whitespace: bool | None,
    compile_debug: bool | None,
) -> dict[str, Any]:
    """Return the option overrides for the values actually given on the command line."""
    overrides: dict[str, Any] = {}
    if delimiter is not None:
        overrides[Opt.DELIMITER] = delimiter
    if rm_whitespace:
        overrides[Opt.RM_WHITESPACE] = True
    if compile_debug is not None:
        overrides[Opt.COMPILE_DEBUG] = compile_debug
    logger.trace("Option overrides from CLI: %s", overrides)
    return overrides
