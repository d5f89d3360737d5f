# topmark:header:start
#
#   project      : Stencil
#   file         : __init__.py
#   file_relpath : src/stencil/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil configuration: options model, TOML loading and logging.

Public re-exports:
    - `Options` / `MutableOptions`: frozen options and their builder.
    - `load_options_file`: build options from defaults and a TOML file.
    - `discover_config_file`: locate ``stencil.toml`` / ``pyproject.toml``.
"""

from __future__ import annotations

from stencil.config.io import discover_config_file
from stencil.config.model import MutableOptions, Options, load_options_file, option_keys_in

__all__ = [
    "MutableOptions",
    "Options",
    "discover_config_file",
    "load_options_file",
    "option_keys_in",
]
