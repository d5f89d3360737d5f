# topmark:header:start
#
#   project      : Stencil
#   file         : steps.py
#   file_relpath : src/stencil/compiler/steps.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Compiler steps.

The compiler is invoked as a sequence of callable steps over a shared
`CompileContext`. `BaseStep` implements the common lifecycle:

    ctx = step(ctx)  # internally: may_proceed → run? → hint

Steps:
    - `TokenizeStep`: apply ``rm_whitespace`` and build the token stream.
    - `ScanStep`: run the tag/mode state machine.
    - `GenerateStep`: turn segments into instructions, splicing static includes.
    - `StructureStep`: fold instructions into the block tree and assemble the
      `Program`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from stencil.compiler.generator import InstructionGenerator
from stencil.compiler.instructions import Program, TemplateSource
from stencil.compiler.machine import scan
from stencil.compiler.statements import build_tree
from stencil.compiler.tokenizer import strip_line_whitespace, tokenize
from stencil.config.logging import DEBUG_CHANNEL, get_logger

if TYPE_CHECKING:
    from stencil.compiler.context import CompileContext
    from stencil.compiler.generator import IncludeHook
    from stencil.config.logging import StencilLogger

logger: StencilLogger = get_logger(__name__)
debug_logger: StencilLogger = get_logger(DEBUG_CHANNEL)


@dataclass
class BaseStep:
    """Reusable foundation for compiler steps.

    Subclass this to implement a concrete step by overriding ``may_proceed()``,
    ``run()``, and optionally ``hint()``. Do not override ``__call__``.

    Attributes:
        name (str): Stable step identifier for logs.
    """

    name: str

    def __call__(self, ctx: CompileContext) -> CompileContext:
        """Invoke the step lifecycle: gate → run (if allowed) → hint.

        Args:
            ctx (CompileContext): The mutable compilation context.

        Returns:
            CompileContext: The same context instance after mutation.
        """
        ctx.steps.append(self)
        if self.may_proceed(ctx):
            logger.trace("Compiler step %s - running", self.name)
            self.run(ctx)
        else:
            logger.debug("Compiler step %s may not proceed", self.name)
        self.hint(ctx)
        return ctx

    def may_proceed(self, ctx: CompileContext) -> bool:
        """Return whether the step should run given the current context.

        Default: ``True`` (always run).
        """
        return True

    def run(self, ctx: CompileContext) -> None:
        """Perform the step's primary work, mutating ``ctx`` in place."""
        pass

    def hint(self, ctx: CompileContext) -> None:
        """Attach diagnostics after the step ran (optional, never influences the result)."""
        pass


class TokenizeStep(BaseStep):
    """Normalize whitespace (``rm_whitespace``) and tokenize the template."""

    def __init__(self) -> None:
        super().__init__(name=self.__class__.__name__)

    def run(self, ctx: CompileContext) -> None:
        """Set ``ctx.tokens``."""
        text: str = ctx.text
        if ctx.options.rm_whitespace:
            text = strip_line_whitespace(text)
        ctx.tokens = tokenize(text, ctx.options.delimiter)


class ScanStep(BaseStep):
    """Run the tag/mode state machine over the token stream."""

    def __init__(self) -> None:
        super().__init__(name=self.__class__.__name__)

    def may_proceed(self, ctx: CompileContext) -> bool:
        """Require a token stream."""
        return ctx.tokens is not None

    def run(self, ctx: CompileContext) -> None:
        """Set ``ctx.segments``."""
        assert ctx.tokens is not None
        ctx.segments = scan(ctx.tokens, filename=ctx.filename)

    def hint(self, ctx: CompileContext) -> None:
        """Log the segment count."""
        logger.trace("%s: %d segments", self.name, len(ctx.segments))


class GenerateStep(BaseStep):
    """Generate instructions from segments.

    Attributes:
        include (IncludeHook): Compiles statically included templates.
    """

    def __init__(self, include: IncludeHook) -> None:
        super().__init__(name=self.__class__.__name__)
        self.include: IncludeHook = include

    def run(self, ctx: CompileContext) -> None:
        """Set ``ctx.generator``."""
        generator = InstructionGenerator(options=ctx.options, include=self.include)
        for segment in ctx.segments:
            generator.feed(segment)
        ctx.generator = generator


class StructureStep(BaseStep):
    """Fold instructions into the block tree and assemble the `Program`."""

    def __init__(self) -> None:
        super().__init__(name=self.__class__.__name__)

    def may_proceed(self, ctx: CompileContext) -> bool:
        """Require generated instructions."""
        return ctx.generator is not None

    def run(self, ctx: CompileContext) -> None:
        """Set ``ctx.program``."""
        generator: InstructionGenerator | None = ctx.generator
        assert generator is not None
        instructions = tuple(generator.instructions)
        ctx.program = Program(
            instructions=instructions,
            deferred=tuple(generator.deferred),
            dependencies=tuple(generator.dependencies),
            source=TemplateSource(ctx.text, ctx.filename),
            included=tuple(generator.included),
            body=build_tree(instructions, filename=ctx.filename),
        )

    def hint(self, ctx: CompileContext) -> None:
        """Write the program listing to the debug channel when ``debug`` is set."""
        if ctx.program is not None and ctx.options.debug:
            debug_logger.debug("%s", ctx.program.dump())
