# topmark:header:start
#
#   project      : Stencil
#   file         : __main__.py
#   file_relpath : src/stencil/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Module entry point for running Stencil via ``python -m stencil``.

It delegates directly to :func:`stencil.cli.main.cli`, ensuring a single,
authoritative CLI entry point regardless of how Stencil is launched.

Examples:
    Render a template using the module interface::

        python -m stencil render page.stencil --data page.json
"""

from __future__ import annotations

from stencil.cli.main import cli

if __name__ == "__main__":
    # We call the Click group directly
    cli()
