# topmark:header:start
#
#   project      : Stencil
#   file         : __init__.py
#   file_relpath : src/stencil/compiler/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Template compiler: tokenizer, mode machine, instruction generator and includes.

Public re-exports:
    - `compile_program`: template text → `Program`.
    - `Program` and the instruction types it is made of.
"""

from __future__ import annotations

from stencil.compiler.instructions import (
    EmitEscaped,
    EmitLiteral,
    EmitRaw,
    Exec,
    Instruction,
    LineMarker,
    Program,
    TemplateSource,
)
from stencil.compiler.pipeline import compile_program

__all__ = [
    "EmitEscaped",
    "EmitLiteral",
    "EmitRaw",
    "Exec",
    "Instruction",
    "LineMarker",
    "Program",
    "TemplateSource",
    "compile_program",
]
