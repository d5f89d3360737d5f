# topmark:header:start
#
#   project      : Stencil
#   file         : instructions.py
#   file_relpath : src/stencil/compiler/instructions.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Compiled program model.

A template compiles to a `Program`: an immutable sequence of tagged
instructions plus a deferred tail, the include dependencies and the template
sources needed to map runtime errors back to lines.

Instruction kinds:
    - `EmitLiteral`: append literal text.
    - `EmitEscaped`: evaluate an expression and append its escaped value.
    - `EmitRaw`: evaluate an expression and append its stringified value.
    - `Exec`: execute a statement (or a block header, see
      `stencil.compiler.statements`).
    - `LineMarker`: record the current template line (and its origin file for
      statically included templates).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from stencil.compiler.statements import Node


@dataclass(frozen=True)
class EmitLiteral:
    """Append ``text`` to the output buffer."""

    text: str


@dataclass(frozen=True)
class EmitEscaped:
    """Evaluate ``source`` and append the escaped result."""

    source: str


@dataclass(frozen=True)
class EmitRaw:
    """Evaluate ``source`` and append the stringified result."""

    source: str


@dataclass(frozen=True)
class Exec:
    """Execute the statement ``source``."""

    source: str


@dataclass(frozen=True)
class LineMarker:
    """Template line reached after the preceding instruction.

    Attributes:
        line (int): 1-based line number.
        origin (str | None): Template file the line belongs to when the marker was
            spliced from a static include; ``None`` for the compiled template itself.
    """

    line: int
    origin: str | None = None


Instruction = Union[EmitLiteral, EmitEscaped, EmitRaw, Exec, LineMarker]


@dataclass(frozen=True)
class TemplateSource:
    """Template text and the file it was read from (if any)."""

    text: str
    filename: str | None = None


@dataclass(frozen=True)
class Program:
    """Compiled, immutable template program.

    Programs hold no reference to the options or engine that built them and are
    safe to share between renders and threads.

    Attributes:
        instructions (tuple[Instruction, ...]): Main body, in execution order.
        deferred (tuple[Instruction, ...]): Tail executed after the main body.
        dependencies (tuple[str, ...]): Resolved paths of statically included templates.
        source (TemplateSource): The template this program was compiled from.
        included (tuple[TemplateSource, ...]): Sources of statically included templates,
            used to map errors raised inside spliced instructions.
        body (tuple[Node, ...]): Block tree folded from ``instructions``.
    """

    instructions: tuple[Instruction, ...]
    deferred: tuple[Instruction, ...] = ()
    dependencies: tuple[str, ...] = ()
    source: TemplateSource = field(default_factory=lambda: TemplateSource(""))
    included: tuple[TemplateSource, ...] = ()
    body: tuple[Node, ...] = ()

    def source_for(self, origin: str | None) -> TemplateSource:
        """Return the template source a line marker with ``origin`` refers to."""
        if origin is None:
            return self.source
        for included in self.included:
            if included.filename == origin:
                return included
        return TemplateSource("", origin)

    def dump(self) -> str:
        """Return a human-readable listing of the program, one instruction per line."""
        lines: list[str] = [f"# program: {self.source.filename or '<string>'}"]
        lines.extend(_format(instruction) for instruction in self.instructions)
        if self.deferred:
            lines.append("# deferred")
            lines.extend(_format(instruction) for instruction in self.deferred)
        if self.dependencies:
            lines.append("# dependencies")
            lines.extend(f"#   {path}" for path in self.dependencies)
        return "\n".join(lines) + "\n"


def _format(instruction: Instruction) -> str:
    match instruction:
        case EmitLiteral(text=text):
            return f"literal  {text!r}"
        case EmitEscaped(source=source):
            return f"escaped  {source!r}"
        case EmitRaw(source=source):
            return f"raw      {source!r}"
        case Exec(source=source):
            return f"exec     {source!r}"
        case LineMarker(line=line, origin=origin):
            return f"line     {line}" + (f" ({origin})" if origin else "")
    return repr(instruction)  # pragma: no cover
