# topmark:header:start
#
#   project      : Stencil
#   file         : __init__.py
#   file_relpath : src/stencil/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil package.

Stencil is a text-templating compiler. Templates mix literal text with
directives delimited by configurable tag markers (``<% ... %>``); they are
compiled into immutable instruction programs and rendered against a data
environment by a small interpreter that delegates embedded Python to a
pluggable evaluator.
"""

from __future__ import annotations
