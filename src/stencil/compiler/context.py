# topmark:header:start
#
#   project      : Stencil
#   file         : context.py
#   file_relpath : src/stencil/compiler/context.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Compilation context shared by the compiler steps.

A `CompileContext` carries the state of one template compilation as it flows
through the steps of `stencil.compiler.pipeline`: the template text and
options, the token stream, the segments, the instruction generator and,
finally, the assembled `Program`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stencil.compiler.generator import InstructionGenerator
    from stencil.compiler.instructions import Program
    from stencil.compiler.machine import Segment
    from stencil.compiler.steps import BaseStep
    from stencil.compiler.tokenizer import TokenStream
    from stencil.config.model import Options


@dataclass
class CompileContext:
    """Mutable state of one template compilation.

    Attributes:
        text (str): Template text as given by the caller.
        options (Options): Frozen compilation options.
        tokens (TokenStream | None): Lazy token sequence.
        segments (list[Segment]): Segments produced by the mode machine.
        generator (InstructionGenerator | None): Instruction accumulator.
        program (Program | None): Result of the last step.
        steps (list[BaseStep]): Steps that have been invoked, in order.
    """

    text: str
    options: Options
    tokens: TokenStream | None = None
    segments: list[Segment] = field(default_factory=lambda: [])
    generator: InstructionGenerator | None = None
    program: Program | None = None
    steps: list[BaseStep] = field(default_factory=lambda: [])

    @property
    def filename(self) -> str | None:
        """File identifier of the template being compiled."""
        return self.options.filename
