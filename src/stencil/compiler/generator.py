# topmark:header:start
#
#   project      : Stencil
#   file         : generator.py
#   file_relpath : src/stencil/compiler/generator.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Instruction generator.

Routes the segments produced by `stencil.compiler.machine` to instructions:

| Segment mode     | Instructions                                            |
|------------------|---------------------------------------------------------|
| none / literal   | `EmitLiteral` (nothing for empty text)                  |
| statement        | static include splice, or `Exec` (main and deferred)    |
| escaped          | `EmitEscaped` (nothing for an empty expression)         |
| raw              | `EmitRaw` (nothing for an empty expression)             |
| comment          | nothing                                                 |

With ``compile_debug`` set, a `LineMarker` carrying the line reached is
appended after every chunk spanning several lines.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stencil.compiler.instructions import (
    EmitEscaped,
    EmitLiteral,
    EmitRaw,
    Exec,
    LineMarker,
)
from stencil.compiler.statements import split_trailing_header, strip_comment
from stencil.compiler.tags import Mode
from stencil.config.logging import get_logger
from stencil.core.errors import MissingBasePathError

if TYPE_CHECKING:
    from stencil.compiler.instructions import Instruction, Program, TemplateSource
    from stencil.compiler.machine import Segment
    from stencil.config.logging import StencilLogger
    from stencil.config.model import Options

logger: StencilLogger = get_logger(__name__)

STATIC_INCLUDE: re.Pattern[str] = re.compile(r"^\s*include\s+([^\s()]+)\s*$")
_TRAILING_SEMICOLON: re.Pattern[str] = re.compile(r";\s*$")

# Compiles the template referenced by a static include; returns (resolved path, program).
IncludeHook = Callable[[str], "tuple[str, Program]"]


def trim_expression(source: str) -> str:
    """Strip one trailing ``;`` and surrounding whitespace from an output expression."""
    return _TRAILING_SEMICOLON.sub("", source).strip()


@dataclass
class InstructionGenerator:
    """Accumulate instructions for one template.

    Attributes:
        options (Options): Compilation options.
        include (IncludeHook | None): Static include compiler; ``None`` when the
            caller cannot resolve includes.
        instructions (list[Instruction]): Main body, in order.
        deferred (list[Instruction]): Deferred tail, in execution order.
        dependencies (list[str]): Resolved paths of static includes.
        included (list[TemplateSource]): Sources of static includes.
    """

    options: Options
    include: IncludeHook | None = None
    instructions: list[Instruction] = field(default_factory=lambda: [])
    deferred: list[Instruction] = field(default_factory=lambda: [])
    dependencies: list[str] = field(default_factory=lambda: [])
    included: list[TemplateSource] = field(default_factory=lambda: [])

    def __post_init__(self) -> None:
        self._deferred_marker: re.Pattern[str] = re.compile(self.options.deferred_marker)

    def feed(self, segment: Segment) -> None:
        """Generate the instructions of one segment."""
        match segment.mode:
            case Mode.NONE | Mode.LITERAL:
                if segment.text:
                    self.instructions.append(EmitLiteral(segment.text))
            case Mode.STATEMENT:
                self._statement(segment)
            case Mode.ESCAPED:
                expression: str = trim_expression(segment.text)
                if expression:
                    self.instructions.append(EmitEscaped(expression))
            case Mode.RAW:
                expression = trim_expression(segment.text)
                if expression:
                    self.instructions.append(EmitRaw(expression))
            case Mode.COMMENT:
                pass
        if self.options.compile_debug and segment.newlines:
            self.instructions.append(LineMarker(segment.end_line))

    def _statement(self, segment: Segment) -> None:
        include_match = STATIC_INCLUDE.match(segment.text)
        if include_match is not None:
            self._splice(include_match.group(1), segment)
            return
        parts: list[str] = self._deferred_marker.split(segment.text)
        main: str = parts[0]
        if len(parts) > 1:
            tail: str = "\n".join(parts[1:])
            if tail.strip():
                # Later registrations run first.
                self.deferred.insert(0, Exec(tail))
        if not main.strip():
            return
        last_line: str = main.rsplit("\n", 1)[-1]
        if strip_comment(last_line) != last_line:
            main += "\n"
        split: tuple[str, str] | None = split_trailing_header(main)
        if split is None:
            self.instructions.append(Exec(main))
        else:
            self.instructions.extend((Exec(split[0]), Exec(split[1])))

    def _splice(self, reference: str, segment: Segment) -> None:
        if self.include is None:
            raise MissingBasePathError()
        path, program = self.include(reference)
        debug: bool = self.options.compile_debug
        if debug:
            self.instructions.append(LineMarker(1, path))
        for instruction in program.instructions:
            if isinstance(instruction, LineMarker):
                if not debug:
                    continue
                if instruction.origin is None:
                    instruction = LineMarker(instruction.line, path)
            self.instructions.append(instruction)
        if debug:
            self.instructions.append(LineMarker(segment.line))
        self.deferred[0:0] = program.deferred
        self.dependencies.extend((path, *program.dependencies))
        self.included.extend((program.source, *program.included))
        logger.debug("Spliced %d instructions from %s", len(program.instructions), path)
