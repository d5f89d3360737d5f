# topmark:header:start
#
#   project      : Stencil
#   file         : version.py
#   file_relpath : src/stencil/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil `version` command.

Prints the installed Stencil version.

Examples:
    Show the version:

      $ stencil version
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from stencil.cli.cmd_common import get_console
from stencil.constants import STENCIL_VERSION

if TYPE_CHECKING:
    from stencil.cli.console import ConsoleLike


@click.command(
    name="version",
    help="Show the current version of Stencil.",
)
def version_command() -> None:
    """Show the current version of Stencil."""
    console: ConsoleLike = get_console(click.get_current_context())
    console.print(STENCIL_VERSION)
