# topmark:header:start
#
#   project      : Stencil
#   file         : __init__.py
#   file_relpath : src/stencil/diagnostic/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Template diagnostics: mapping runtime failures to template source lines."""

from __future__ import annotations

from stencil.diagnostic.mapper import context_window, map_error

__all__ = ["context_window", "map_error"]
