# topmark:header:start
#
#   project      : Stencil
#   file         : __init__.py
#   file_relpath : src/stencil/cli/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil command-line interface (Click)."""
