# topmark:header:start
#
#   project      : Stencil
#   file         : evaluator.py
#   file_relpath : src/stencil/runtime/evaluator.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Expression and statement evaluation.

The executor never interprets embedded code itself: it hands source text and
the render scope to an `Evaluator`. The evaluator owns the scoping policy;
the executor only guarantees that it passes the same scope mapping, unmodified,
to every call of one render.

`PythonEvaluator` is the default: statements run with ``exec`` and
expressions with ``eval``, using the scope as globals so every data key is a
directly addressable name and assignments made by one directive are visible
to the following ones.
"""

from __future__ import annotations

import ast
import textwrap
from collections.abc import Iterator, MutableMapping
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Protocol

from stencil.config.logging import get_logger

if TYPE_CHECKING:
    from types import CodeType

    from stencil.config.logging import StencilLogger

logger: StencilLogger = get_logger(__name__)

Scope = MutableMapping[str, Any]

_CODE_NAME: str = "<stencil>"
_BLOCK_FUNCTION: str = "__stencil_block__"


class Evaluator(Protocol):
    """Capability evaluating embedded source against a render scope."""

    def execute(self, source: str, scope: Scope) -> None:
        """Execute statement ``source``; raise on failure."""
        ...

    def evaluate(self, source: str, scope: Scope) -> Any:
        """Evaluate expression ``source`` and return its value; raise on failure."""
        ...

    def iterate(self, header: str, scope: Scope) -> Iterator[dict[str, Any]]:
        """Run the block header ``header`` (``for``/``while``/``with``).

        Yields one mapping of names bound by the header per execution of the
        block body. Exceptions raised by the body are thrown back into the
        iterator so context managers observe them.
        """
        ...


def normalize_statement(source: str) -> str:
    """Remove the indentation a statement inherits from its template layout.

    The whole source is dedented first. When that does not compile because the
    first line started right after the open tag (and so is not indented like the
    following lines), the first line and the following lines are dedented
    separately.
    """
    lines: list[str] = source.rstrip().split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        return ""
    dedented: str = textwrap.dedent("\n".join(lines))
    if len(lines) == 1 or _compiles(dedented):
        return dedented.strip()
    candidate: str = lines[0].strip() + "\n" + textwrap.dedent("\n".join(lines[1:]))
    return candidate if _compiles(candidate) else dedented


def _compiles(source: str) -> bool:
    try:
        _compile(source, "exec")
    except SyntaxError:
        return False
    return True


@lru_cache(maxsize=1024)
def _compile(source: str, mode: str) -> CodeType:
    return compile(source, _CODE_NAME, mode)


class _BoundNames(ast.NodeVisitor):
    """Collect the names a block header assigns, outside nested scopes."""

    def __init__(self) -> None:
        self.names: list[str] = []

    def visit_Name(self, node: ast.Name) -> None:
        """Record a stored name."""
        if isinstance(node.ctx, ast.Store) and node.id not in self.names:
            self.names.append(node.id)

    def visit_Lambda(self, node: ast.Lambda) -> None:
        """Skip nested scopes: their bindings stay local to them."""

    visit_ListComp = visit_SetComp = visit_DictComp = visit_GeneratorExp = visit_Lambda


def bound_names(header: str) -> tuple[str, ...]:
    """Return the names bound by the block header ``header``, in order."""
    tree: ast.Module = ast.parse(f"{header}\n    pass")
    visitor = _BoundNames()
    visitor.visit(tree.body[0])
    return tuple(visitor.names)


@lru_cache(maxsize=1024)
def _block_source(header: str) -> str:
    # Bound names are declared global so the header reads and writes the
    # render scope itself, like a statement at module level would.
    names: tuple[str, ...] = bound_names(header)
    declaration: str = f"    global {', '.join(names)}\n" if names else ""
    bindings: str = ", ".join(f"{name!r}: {name}" for name in names)
    return (
        f"def {_BLOCK_FUNCTION}():\n"
        f"{declaration}"
        f"    {header}\n"
        f"        yield {{{bindings}}}\n"
    )


class PythonEvaluator:
    """Evaluate embedded Python against the render scope.

    Compiled code objects are memoized by source text, so rendering the same
    program repeatedly compiles each directive once.
    """

    def execute(self, source: str, scope: Scope) -> None:
        """Execute statement ``source`` with ``scope`` as globals."""
        code: CodeType = _compile(normalize_statement(source), "exec")
        exec(code, _as_globals(scope))  # noqa: S102

    def evaluate(self, source: str, scope: Scope) -> Any:
        """Evaluate expression ``source`` with ``scope`` as globals."""
        code: CodeType = _compile(f"({source.strip()}\n)", "eval")
        return eval(code, _as_globals(scope))  # noqa: S307

    def iterate(self, header: str, scope: Scope) -> Iterator[dict[str, Any]]:
        """Run ``header`` as a generator yielding the names it binds."""
        namespace: dict[str, Any] = {}
        code: CodeType = _compile(_block_source(header.strip()), "exec")
        exec(code, _as_globals(scope), namespace)  # noqa: S102
        logger.trace("Entering block %r", header)
        block: Iterator[dict[str, Any]] = namespace[_BLOCK_FUNCTION]()
        return block


def _as_globals(scope: Scope) -> dict[str, Any]:
    if not isinstance(scope, dict):
        raise TypeError(f"PythonEvaluator requires a dict scope, got {type(scope).__name__}")
    return scope
