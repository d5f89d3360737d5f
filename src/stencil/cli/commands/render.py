# topmark:header:start
#
#   project      : Stencil
#   file         : render.py
#   file_relpath : src/stencil/cli/commands/render.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil `render` command.

Compiles a template file and renders it with a data environment read from a
JSON or TOML file and/or ``--set KEY=VALUE`` assignments. The rendered text
goes to stdout (or ``--output``); failures are reported on stderr with a
sysexits-style exit code.

Examples:
    Render a page with data from a file:

      $ stencil render views/page.stencil --data page.json

    Override a value and use another delimiter:

      $ stencil render page.stencil --set title='"Home"' --delimiter '?'
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from stencil.cli.cmd_common import (
    get_console,
    load_data_file,
    parse_assignments,
    resolve_cli_options,
)
from stencil.cli.errors import cli_error_for
from stencil.cli.options import template_options, template_overrides
from stencil.config.logging import get_logger
from stencil.engine import Engine

if TYPE_CHECKING:
    from stencil.cli.console import ConsoleLike
    from stencil.config.logging import StencilLogger
    from stencil.config.model import Options

logger: StencilLogger = get_logger(__name__)


@click.command(
    name="render",
    help="Render a template file to stdout (or --output).",
)
@click.argument(
    "template",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "--data",
    "data_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON or TOML file providing the data environment.",
)
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Set a data value (JSON, or a plain string). May be repeated.",
)
@click.option(
    "--output",
    "-o",
    "output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the rendered text to this file instead of stdout.",
)
@template_options
@click.pass_context
def render_command(
    ctx: click.Context,
    *,
    template: Path,
    data_file: Path | None,
    assignments: tuple[str, ...],
    output: Path | None,
    delimiter: str | None,
    rm_whitespace: bool | None,
    compile_debug: bool | None,
) -> None:
    """Render ``template`` with the given data.

    Args:
        ctx (click.Context): Click context holding the console and configuration choices.
        template (Path): Template file to render.
        data_file (Path | None): JSON/TOML data file.
        assignments (tuple[str, ...]): ``KEY=VALUE`` data overrides (applied after the file).
        output (Path | None): Output file; stdout when ``None``.
        delimiter (str | None): Tag delimiter override.
        rm_whitespace (bool | None): Strip line whitespace before compiling.
        compile_debug (bool | None): Map runtime errors to template lines.
    """
    console: ConsoleLike = get_console(ctx)
    options: Options = resolve_cli_options(
        ctx,
        template_overrides(
            delimiter=delimiter, rm_whitespace=rm_whitespace, compile_debug=compile_debug
        ),
    )

    data: dict[str, Any] = {}
    try:
        if data_file is not None:
            data.update(load_data_file(data_file))
    except (OSError, UnicodeDecodeError) as exc:
        raise cli_error_for(exc) from exc
    data.update(parse_assignments(assignments))

    engine = Engine(options)
    try:
        text: str = engine.compile_file(template)(data)
    except click.ClickException:
        raise
    except Exception as exc:
        logger.debug("Rendering %s failed", template, exc_info=True)
        raise cli_error_for(exc) from exc

    if output is None:
        console.print(text, nl=False)
        return
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise cli_error_for(exc) from exc
    logger.info("Wrote %s", output)
