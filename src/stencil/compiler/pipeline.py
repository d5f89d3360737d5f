# topmark:header:start
#
#   project      : Stencil
#   file         : pipeline.py
#   file_relpath : src/stencil/compiler/pipeline.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Compilation pipeline.

Overview
--------
``COMPILE``: tokenize → scan → generate → structure

Static includes re-enter `compile_program` recursively with the same options
(``filename`` set to the included path) and a resolver one level deeper in
the include chain.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from stencil.compiler.context import CompileContext
from stencil.compiler.steps import GenerateStep, ScanStep, StructureStep, TokenizeStep
from stencil.config.logging import get_logger

if TYPE_CHECKING:
    from stencil.compiler.includes import IncludeResolver
    from stencil.compiler.instructions import Program
    from stencil.compiler.steps import BaseStep
    from stencil.config.logging import StencilLogger
    from stencil.config.model import Options

logger: StencilLogger = get_logger(__name__)


def compile_program(text: str, options: Options, resolver: IncludeResolver) -> Program:
    """Compile template text into a `Program`.

    Args:
        text (str): Template text.
        options (Options): Frozen compilation options.
        resolver (IncludeResolver): Resolver for static includes of this template.

    Returns:
        Program: The compiled program.

    Raises:
        TemplateSyntaxError: If the template is malformed.
        MissingBasePathError: If a static include is used without ``filename``.
        IncludeResolutionError: If an included template cannot be read.
    """

    def include(reference: str) -> tuple[str, Program]:
        path, included_text, child = resolver.load(reference, options.filename)
        logger.debug("Static include %r -> %s", reference, path)
        return path, compile_program(included_text, options.with_filename(path), child)

    steps: tuple[BaseStep, ...] = (
        TokenizeStep(),
        ScanStep(),
        GenerateStep(include),
        StructureStep(),
    )
    ctx = CompileContext(text=text, options=options)
    for step in steps:
        ctx = step(ctx)
    assert ctx.program is not None
    logger.debug(
        "Compiled %s: %d instructions, %d deferred, %d dependencies",
        options.filename or "<string>",
        len(ctx.program.instructions),
        len(ctx.program.deferred),
        len(ctx.program.dependencies),
    )
    return ctx.program
