# topmark:header:start
#
#   project      : Stencil
#   file         : main.py
#   file_relpath : src/stencil/cli/main.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil command-line entry point.

Key ideas:
- Group-level options are initialized once and placed into ``ctx.obj``.
- Subcommands read the console and configuration choices from ``ctx.obj``.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from stencil.cli.commands.dump import dump_command
from stencil.cli.commands.dump_config import dump_config_command
from stencil.cli.commands.render import render_command
from stencil.cli.commands.version import version_command
from stencil.cli.console import ClickConsole
from stencil.cli.options import (
    ColorMode,
    common_color_options,
    common_verbose_options,
    resolve_color_mode,
    resolve_verbosity,
)
from stencil.config.logging import get_logger, resolve_env_log_level, setup_logging

if TYPE_CHECKING:
    from stencil.cli.console import ConsoleLike
    from stencil.config.logging import StencilLogger

logger: StencilLogger = get_logger(__name__)


def init_common_state(
    ctx: click.Context,
    *,
    verbose: int,
    quiet: int,
    color_mode: ColorMode | None,
    no_color: bool,
    config_path: Path | None,
    no_config: bool,
) -> None:
    """Initialize shared state (verbosity, color, configuration) on the Click context.

    Args:
        ctx (click.Context): Current Click context; will have ``obj`` and ``color`` set.
        verbose (int): Count of ``-v`` flags.
        quiet (int): Count of ``-q`` flags.
        color_mode (ColorMode | None): Explicit color mode from ``--color`` (or ``None``).
        no_color (bool): Whether ``--no-color`` was passed; forces color off.
        config_path (Path | None): Explicit configuration file from ``--config``.
        no_config (bool): Whether ``--no-config`` was passed; skips discovery.
    """
    ctx.obj = ctx.obj or {}

    # Program-output verbosity; internal logging follows STENCIL_LOG_LEVEL when set
    level_cli: int = resolve_verbosity(verbose, quiet)
    ctx.obj["verbosity_level"] = level_cli
    level_env: int | None = resolve_env_log_level()
    ctx.obj["log_level"] = level_env
    setup_logging(level=level_env if level_env is not None else level_cli)

    effective_color_mode = ColorMode.NEVER if no_color else ColorMode(color_mode or "auto")
    enable_color: bool = resolve_color_mode(cli_mode=effective_color_mode)
    ctx.obj["color_enabled"] = enable_color
    ctx.color = enable_color

    ctx.obj["console"] = ClickConsole(enable_color=enable_color)
    ctx.obj["config_path"] = config_path
    ctx.obj["no_config"] = no_config


@click.group(
    cls=click.Group,
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
    help="Stencil: compile and render text templates.",
)
@common_verbose_options
@common_color_options
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (stencil.toml or pyproject.toml). Default: discovered.",
)
@click.option(
    "--no-config",
    "no_config",
    is_flag=True,
    help="Do not discover a configuration file.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: int,
    quiet: int,
    color_mode: ColorMode | None,
    no_color: bool,
    config_path: Path | None,
    no_config: bool,
) -> None:
    """Entry point for the Stencil CLI."""
    init_common_state(
        ctx,
        verbose=verbose,
        quiet=quiet,
        color_mode=color_mode,
        no_color=no_color,
        config_path=config_path,
        no_config=no_config,
    )
    console: ConsoleLike = ctx.obj["console"]

    if ctx.invoked_subcommand is None:
        console.print("Hint: use 'stencil render TEMPLATE' to render a template.")
        console.print()
        console.print(ctx.get_help())


cli.add_command(version_command)

cli.add_command(render_command)

cli.add_command(dump_command)

cli.add_command(dump_config_command)

if __name__ == "__main__":
    cli()
