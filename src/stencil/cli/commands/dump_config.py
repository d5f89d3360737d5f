# topmark:header:start
#
#   project      : Stencil
#   file         : dump_config.py
#   file_relpath : src/stencil/cli/commands/dump_config.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil `dump-config` command.

Emits the effective Stencil options as TOML after applying defaults, the
configuration file and any CLI overrides. The output is wrapped between
`# === BEGIN ===` and `# === END ===` markers for easy parsing in tests or
tooling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from stencil.cli.cmd_common import get_console, resolve_cli_options
from stencil.cli.options import template_options, template_overrides
from stencil.config.io import to_toml

if TYPE_CHECKING:
    from stencil.cli.console import ConsoleLike
    from stencil.config.model import Options


@click.command(
    name="dump-config",
    help="Dump the effective Stencil options as TOML.",
)
@template_options
@click.pass_context
def dump_config_command(
    ctx: click.Context,
    *,
    delimiter: str | None,
    rm_whitespace: bool | None,
    compile_debug: bool | None,
) -> None:
    """Print the merged options as TOML between BEGIN/END markers."""
    console: ConsoleLike = get_console(ctx)
    options: Options = resolve_cli_options(
        ctx,
        template_overrides(
            delimiter=delimiter, rm_whitespace=rm_whitespace, compile_debug=compile_debug
        ),
    )
    for path in options.config_files:
        console.print(f"# Configuration file: {path}")
    console.print("# === BEGIN ===")
    console.print(to_toml(options.to_toml_dict()).rstrip("\n"))
    console.print("# === END ===")
