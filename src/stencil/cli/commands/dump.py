# topmark:header:start
#
#   project      : Stencil
#   file         : dump.py
#   file_relpath : src/stencil/cli/commands/dump.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil `dump` command.

Compiles a template file and prints the program listing: the instruction
sequence, the deferred tail and the include dependencies. Nothing is
rendered, so no data is needed.

Examples:
    Inspect the compiled form of a template:

      $ stencil dump views/page.stencil
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from stencil.cli.cmd_common import get_console, resolve_cli_options
from stencil.cli.errors import cli_error_for
from stencil.cli.options import template_options, template_overrides
from stencil.engine import Engine

if TYPE_CHECKING:
    from stencil.cli.console import ConsoleLike
    from stencil.config.model import Options
    from stencil.engine import Template


@click.command(
    name="dump",
    help="Compile a template file and print its program listing.",
)
@click.argument(
    "template",
    type=click.Path(dir_okay=False, path_type=Path),
)
@template_options
@click.pass_context
def dump_command(
    ctx: click.Context,
    *,
    template: Path,
    delimiter: str | None,
    rm_whitespace: bool | None,
    compile_debug: bool | None,
) -> None:
    """Print the compiled program of ``template``."""
    console: ConsoleLike = get_console(ctx)
    options: Options = resolve_cli_options(
        ctx,
        template_overrides(
            delimiter=delimiter, rm_whitespace=rm_whitespace, compile_debug=compile_debug
        ),
    )
    try:
        compiled: Template = Engine(options).compile_file(template)
    except click.ClickException:
        raise
    except Exception as exc:
        raise cli_error_for(exc) from exc
    console.print(compiled.program.dump())
