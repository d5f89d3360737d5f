# topmark:header:start
#
#   project      : Stencil
#   file         : __init__.py
#   file_relpath : src/stencil/runtime/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Template runtime: program executor and the evaluation capability."""

from __future__ import annotations

from stencil.runtime.evaluator import Evaluator, PythonEvaluator, normalize_statement
from stencil.runtime.executor import ProgramExecutor, stringify

__all__ = [
    "Evaluator",
    "ProgramExecutor",
    "PythonEvaluator",
    "normalize_statement",
    "stringify",
]
