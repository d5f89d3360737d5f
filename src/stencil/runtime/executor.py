# topmark:header:start
#
#   project      : Stencil
#   file         : executor.py
#   file_relpath : src/stencil/runtime/executor.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Program executor.

Walks the block tree of a `Program` against a data environment and returns
the rendered text. The executor performs no I/O: embedded code is delegated
to an `Evaluator`, escaping to the escape function of the options, and
inline includes to a callable supplied by the engine.

Render scope:
    - every key of the data mapping, as a directly addressable name;
    - ``locals``: the data mapping itself, unmodified;
    - ``escape``: the escape function;
    - ``include``: the inline include function, when one is supplied.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stencil.compiler.instructions import EmitEscaped, EmitLiteral, EmitRaw, Exec, LineMarker
from stencil.compiler.statements import Block, IfChain, LoopControl, StatementKind, TryBlock
from stencil.config.logging import get_logger
from stencil.constants import DEFAULT_LOCALS_NAME
from stencil.core.errors import TemplateRuntimeError
from stencil.diagnostic.mapper import map_error

if TYPE_CHECKING:
    from stencil.compiler.instructions import Instruction, Program
    from stencil.compiler.statements import Handler, Node
    from stencil.config.logging import StencilLogger
    from stencil.core.escaping import EscapeFunction
    from stencil.runtime.evaluator import Evaluator

logger: StencilLogger = get_logger(__name__)

IncludeFunction = Callable[..., str]


class _BreakLoop(BaseException):
    """Unwinds the body of the innermost loop on ``break``."""


class _ContinueLoop(BaseException):
    """Unwinds the current iteration of the innermost loop on ``continue``."""


def stringify(value: Any) -> str:
    """Standard stringification of raw output: ``None`` renders as ``""``."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class _RenderState:
    buffer: list[str] = field(default_factory=lambda: [])
    line: int = 1
    origin: str | None = None


class ProgramExecutor:
    """Run compiled programs.

    Attributes:
        evaluator (Evaluator): Evaluates embedded statements and expressions.
        escape (EscapeFunction): Escapes ``<%= %>`` output.
        compile_debug (bool): Map failures to template lines.
    """

    def __init__(
        self, evaluator: Evaluator, escape: EscapeFunction, *, compile_debug: bool = True
    ) -> None:
        self.evaluator: Evaluator = evaluator
        self.escape: EscapeFunction = escape
        self.compile_debug: bool = compile_debug

    def build_scope(
        self, data: Mapping[str, Any], include: IncludeFunction | None = None
    ) -> dict[str, Any]:
        """Return the render scope for ``data``."""
        scope: dict[str, Any] = dict(data)
        scope[DEFAULT_LOCALS_NAME] = data
        scope["escape"] = self.escape
        if include is not None:
            scope["include"] = include
        return scope

    def run(
        self,
        program: Program,
        data: Mapping[str, Any] | None = None,
        *,
        include: IncludeFunction | None = None,
    ) -> str:
        """Render ``program`` with ``data``.

        Args:
            program (Program): Compiled program.
            data (Mapping[str, Any] | None): Data environment.
            include (IncludeFunction | None): Inline include function exposed to
                templates as ``include``.

        Returns:
            str: The rendered text.

        Raises:
            TemplateRuntimeError: If embedded code fails and ``compile_debug`` is set.
            Exception: The unmodified failure when ``compile_debug`` is not set.
        """
        scope: dict[str, Any] = self.build_scope(data if data is not None else {}, include)
        state = _RenderState()
        try:
            self._run_nodes(program.body, scope, state)
            for instruction in program.deferred:
                self._run_instruction(instruction, scope, state)
        except TemplateRuntimeError:
            # Already mapped by an inline include.
            raise
        except Exception as exc:
            if not self.compile_debug:
                raise
            source = program.source_for(state.origin)
            raise map_error(exc, source.text, source.filename, state.line) from exc
        return "".join(state.buffer)

    # ------------------ tree walking ------------------

    def _run_nodes(
        self, nodes: tuple[Node, ...], scope: dict[str, Any], state: _RenderState
    ) -> None:
        for node in nodes:
            match node:
                case Block():
                    self._run_block(node, scope, state)
                case IfChain():
                    self._run_if(node, scope, state)
                case TryBlock():
                    self._run_try(node, scope, state)
                case LoopControl(kind=StatementKind.BREAK):
                    raise _BreakLoop()
                case LoopControl():
                    raise _ContinueLoop()
                case _:
                    self._run_instruction(node, scope, state)

    def _run_instruction(
        self, instruction: Instruction, scope: dict[str, Any], state: _RenderState
    ) -> None:
        match instruction:
            case EmitLiteral(text=text):
                state.buffer.append(text)
            case EmitEscaped(source=source):
                state.buffer.append(self.escape(self.evaluator.evaluate(source, scope)))
            case EmitRaw(source=source):
                state.buffer.append(stringify(self.evaluator.evaluate(source, scope)))
            case Exec(source=source):
                self.evaluator.execute(source, scope)
            case LineMarker(line=line, origin=origin):
                state.line = line
                state.origin = origin

    def _run_block(self, block: Block, scope: dict[str, Any], state: _RenderState) -> None:
        iterations: Iterator[dict[str, Any]] = self.evaluator.iterate(block.header, scope)
        is_loop: bool = block.kind is not StatementKind.WITH
        broken: bool = False
        try:
            for bindings in iterations:
                scope.update(bindings)
                try:
                    self._run_nodes(block.body, scope, state)
                except _ContinueLoop:
                    if not is_loop:
                        raise
                except _BreakLoop:
                    if not is_loop:
                        raise
                    broken = True
                    break
                except Exception as exc:
                    _throw(iterations, exc)
        finally:
            close = getattr(iterations, "close", None)
            if close is not None:
                close()
        if is_loop and not broken:
            self._run_nodes(block.orelse, scope, state)

    def _run_if(self, chain: IfChain, scope: dict[str, Any], state: _RenderState) -> None:
        for branch in chain.branches:
            if branch.condition is None or self.evaluator.evaluate(branch.condition, scope):
                self._run_nodes(branch.body, scope, state)
                return

    def _run_try(self, block: TryBlock, scope: dict[str, Any], state: _RenderState) -> None:
        try:
            try:
                self._run_nodes(block.body, scope, state)
            except Exception as exc:
                handler: Handler | None = self._match_handler(block, exc, scope)
                if handler is None:
                    raise
                if handler.name is not None:
                    scope[handler.name] = exc
                self._run_nodes(handler.body, scope, state)
            else:
                self._run_nodes(block.orelse, scope, state)
        finally:
            self._run_nodes(block.finalbody, scope, state)

    def _match_handler(
        self, block: TryBlock, exc: Exception, scope: dict[str, Any]
    ) -> Handler | None:
        for handler in block.handlers:
            if handler.exception is None:
                return handler
            if isinstance(exc, self.evaluator.evaluate(handler.exception, scope)):
                return handler
        return None


def _throw(iterations: Iterator[dict[str, Any]], exc: Exception) -> None:
    """Throw a body failure into the block iterator (a context manager may suppress it)."""
    throw = getattr(iterations, "throw", None)
    if throw is None:
        raise exc
    try:
        throw(exc)
    except StopIteration:
        pass
