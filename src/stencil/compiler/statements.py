# topmark:header:start
#
#   project      : Stencil
#   file         : statements.py
#   file_relpath : src/stencil/compiler/statements.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Statement classification and block structure.

Python statements cannot span several directives, so Stencil borrows the
``end`` convention: a directive whose last line is a block header (``if``,
``elif``, ``else``, ``for``, ``while``, ``with``, ``try``, ``except``,
``finally`` ending in ``:``) opens a block, and the statement ``end`` closes
it::

    <% for user in users: %>
      <li><%= user.name %></li>
    <% end %>

This module classifies `Exec` sources and folds the flat instruction list
into a tree of nodes the executor can walk. Structure errors (``end`` without
a block, dangling ``elif``/``else``/``except``/``finally``, unclosed blocks,
``break``/``continue`` outside a loop) are reported at compile time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Union

from stencil.compiler.instructions import Exec
from stencil.config.logging import get_logger
from stencil.core.errors import TemplateSyntaxError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from stencil.compiler.instructions import Instruction
    from stencil.config.logging import StencilLogger

logger: StencilLogger = get_logger(__name__)


class StatementKind(Enum):
    """Role of an `Exec` source in the block structure."""

    SIMPLE = "simple"
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    FOR = "for"
    WHILE = "while"
    WITH = "with"
    TRY = "try"
    EXCEPT = "except"
    FINALLY = "finally"
    END = "end"
    BREAK = "break"
    CONTINUE = "continue"

    @property
    def opens_block(self) -> bool:
        """Return True for headers that open a new block."""
        return self in _OPENERS

    @property
    def is_clause(self) -> bool:
        """Return True for headers continuing an open block."""
        return self in _CLAUSES


_OPENERS: frozenset[StatementKind] = frozenset(
    {
        StatementKind.IF,
        StatementKind.FOR,
        StatementKind.WHILE,
        StatementKind.WITH,
        StatementKind.TRY,
    }
)
_CLAUSES: frozenset[StatementKind] = frozenset(
    {StatementKind.ELIF, StatementKind.ELSE, StatementKind.EXCEPT, StatementKind.FINALLY}
)
_LOOPS: frozenset[StatementKind] = frozenset({StatementKind.FOR, StatementKind.WHILE})

_HEADER: re.Pattern[str] = re.compile(
    r"^(if|elif|else|for|while|with|try|except|finally)\b(.*):$", re.DOTALL
)
_BARE_KEYWORDS: frozenset[str] = frozenset({"else", "try", "finally"})
_EXCEPT_AS: re.Pattern[str] = re.compile(r"^(.*?)\s+as\s+([A-Za-z_]\w*)$", re.DOTALL)


def strip_comment(line: str) -> str:
    """Return ``line`` without a trailing ``#`` comment, ignoring ``#`` inside strings."""
    quote: str | None = None
    index: int = 0
    while index < len(line):
        char: str = line[index]
        if quote is not None:
            if char == "\\":
                index += 1
            elif line.startswith(quote, index):
                index += len(quote) - 1
                quote = None
        elif char in "'\"":
            quote = line[index : index + 3] if line.startswith(char * 3, index) else char
            index += len(quote) - 1
        elif char == "#":
            return line[:index]
        index += 1
    return line


@dataclass(frozen=True)
class Statement:
    """Classified statement.

    Attributes:
        kind (StatementKind): Role in the block structure.
        source (str): Original statement source.
        header (str): Comment-free header (``for x in xs:``) for block headers,
            else the stripped source.
        clause (str): Text between keyword and colon (``x in xs`` / condition /
            exception clause); empty when the header has none.
    """

    kind: StatementKind
    source: str
    header: str = ""
    clause: str = ""


def classify(source: str) -> Statement:
    """Classify one statement source.

    Args:
        source (str): Body of an `Exec` instruction.

    Returns:
        Statement: The classified statement.
    """
    code: str = strip_comment(source.strip()).strip()
    bare: str = code.rstrip(";").strip()
    if bare in ("end", "break", "continue"):
        return Statement(kind=StatementKind(bare), source=source, header=bare)
    if "\n" not in code:
        match = _HEADER.match(code)
        if match is not None:
            keyword, clause = match.group(1), match.group(2).strip()
            if keyword in _BARE_KEYWORDS and clause:
                return Statement(kind=StatementKind.SIMPLE, source=source, header=code)
            return Statement(
                kind=StatementKind(keyword), source=source, header=code, clause=clause
            )
    return Statement(kind=StatementKind.SIMPLE, source=source, header=code)


def split_trailing_header(source: str) -> tuple[str, str] | None:
    """Split a statement whose last line is a block header or ``end``.

    Args:
        source (str): Statement source, possibly spanning several lines.

    Returns:
        tuple[str, str] | None: ``(preceding lines, last line)`` when the last
            non-blank line is a header or ``end`` and other lines precede it,
            else ``None``.
    """
    lines: list[str] = source.rstrip().split("\n")
    if len(lines) < 2:
        return None
    last: str = lines[-1]
    if classify(last).kind is StatementKind.SIMPLE:
        return None
    prefix: str = "\n".join(lines[:-1])
    if not prefix.strip():
        return None
    return prefix, last


# ------------------ block tree ------------------


@dataclass(frozen=True)
class Block:
    """``for``, ``while`` or ``with`` block.

    Attributes:
        kind (StatementKind): ``FOR``, ``WHILE`` or ``WITH``.
        header (str): Comment-free header source, ending in ``:``.
        body (tuple[Node, ...]): Nodes executed per iteration.
        orelse (tuple[Node, ...]): Loop ``else`` clause.
    """

    kind: StatementKind
    header: str
    body: tuple[Node, ...]
    orelse: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Branch:
    """One ``if``/``elif``/``else`` branch; ``condition`` is ``None`` for ``else``."""

    condition: str | None
    body: tuple[Node, ...]


@dataclass(frozen=True)
class IfChain:
    """``if`` with its ``elif``/``else`` branches."""

    branches: tuple[Branch, ...]


@dataclass(frozen=True)
class Handler:
    """``except`` clause.

    Attributes:
        exception (str | None): Expression evaluating to the caught exception
            class(es); ``None`` catches every `Exception`.
        name (str | None): Name bound to the caught exception.
        body (tuple[Node, ...]): Handler body.
    """

    exception: str | None
    name: str | None
    body: tuple[Node, ...]


@dataclass(frozen=True)
class TryBlock:
    """``try`` with ``except``, ``else`` and ``finally`` clauses."""

    body: tuple[Node, ...]
    handlers: tuple[Handler, ...] = ()
    orelse: tuple[Node, ...] = ()
    finalbody: tuple[Node, ...] = ()


@dataclass(frozen=True)
class LoopControl:
    """``break`` or ``continue``."""

    kind: StatementKind


Node = Union["Instruction", Block, IfChain, TryBlock, LoopControl]


@dataclass
class _Frame:
    opener: Statement
    # (clause header, collected nodes) in source order
    clauses: list[tuple[Statement, list[Node]]] = field(default_factory=lambda: [])

    @property
    def kind(self) -> StatementKind:
        return self.opener.kind

    @property
    def current(self) -> list[Node]:
        return self.clauses[-1][1]

    @property
    def clause_kinds(self) -> list[StatementKind]:
        return [statement.kind for statement, _ in self.clauses]

    @property
    def in_loop_body(self) -> bool:
        return self.kind in _LOOPS and len(self.clauses) == 1


class BlockBuilder:
    """Fold a flat instruction list into a block tree."""

    def __init__(self, filename: str | None = None) -> None:
        self.filename: str | None = filename
        self._root: list[Node] = []
        self._stack: list[_Frame] = []

    @property
    def _current(self) -> list[Node]:
        return self._stack[-1].current if self._stack else self._root

    def _error(self, message: str) -> TemplateSyntaxError:
        return TemplateSyntaxError(message, filename=self.filename)

    def feed(self, instruction: Instruction) -> None:
        """Add one instruction to the tree under construction."""
        if not isinstance(instruction, Exec):
            self._current.append(instruction)
            return
        statement: Statement = classify(instruction.source)
        kind: StatementKind = statement.kind
        if kind is StatementKind.SIMPLE:
            self._current.append(instruction)
        elif kind.opens_block:
            frame = _Frame(opener=statement)
            frame.clauses.append((statement, []))
            self._stack.append(frame)
        elif kind.is_clause:
            self._add_clause(statement)
        elif kind is StatementKind.END:
            if not self._stack:
                raise self._error('Unexpected "end" with no open block')
            frame = self._stack.pop()
            self._current.append(self._close(frame))
        else:
            if not any(frame.in_loop_body for frame in self._stack):
                raise self._error(f'"{kind.value}" outside loop')
            self._current.append(LoopControl(kind))

    def _add_clause(self, statement: Statement) -> None:
        kind: StatementKind = statement.kind
        frame: _Frame | None = self._stack[-1] if self._stack else None
        allowed: bool = False
        if frame is not None:
            seen: list[StatementKind] = frame.clause_kinds
            open_try: bool = (
                frame.kind is StatementKind.TRY
                and StatementKind.ELSE not in seen
                and StatementKind.FINALLY not in seen
            )
            match kind:
                case StatementKind.ELIF:
                    allowed = frame.kind is StatementKind.IF and StatementKind.ELSE not in seen
                case StatementKind.ELSE:
                    if frame.kind is StatementKind.TRY:
                        allowed = open_try and StatementKind.EXCEPT in seen
                    else:
                        allowed = (
                            frame.kind is not StatementKind.WITH
                            and StatementKind.ELSE not in seen
                        )
                case StatementKind.EXCEPT:
                    allowed = open_try
                case StatementKind.FINALLY:
                    allowed = frame.kind is StatementKind.TRY and StatementKind.FINALLY not in seen
        if frame is None or not allowed:
            raise self._error(f'Unexpected "{statement.header}" without matching block')
        frame.clauses.append((statement, []))

    def _close(self, frame: _Frame) -> Node:
        first_body: tuple[Node, ...] = tuple(frame.clauses[0][1])
        if frame.kind is StatementKind.IF:
            return IfChain(
                branches=tuple(
                    Branch(
                        condition=(
                            None if statement.kind is StatementKind.ELSE else statement.clause
                        ),
                        body=tuple(nodes),
                    )
                    for statement, nodes in frame.clauses
                )
            )
        if frame.kind is StatementKind.TRY:
            handlers: list[Handler] = []
            orelse: tuple[Node, ...] = ()
            finalbody: tuple[Node, ...] = ()
            for statement, nodes in frame.clauses[1:]:
                if statement.kind is StatementKind.EXCEPT:
                    handlers.append(_handler(statement, tuple(nodes)))
                elif statement.kind is StatementKind.ELSE:
                    orelse = tuple(nodes)
                else:
                    finalbody = tuple(nodes)
            if len(frame.clauses) == 1:
                raise self._error('"try:" block needs an "except" or "finally" clause')
            return TryBlock(
                body=first_body, handlers=tuple(handlers), orelse=orelse, finalbody=finalbody
            )
        orelse_nodes: tuple[Node, ...] = (
            tuple(frame.clauses[1][1]) if len(frame.clauses) > 1 else ()
        )
        return Block(
            kind=frame.kind, header=frame.opener.header, body=first_body, orelse=orelse_nodes
        )

    def finish(self) -> tuple[Node, ...]:
        """Return the finished tree.

        Raises:
            TemplateSyntaxError: If a block is still open.
        """
        if self._stack:
            raise self._error(f'Unclosed block "{self._stack[-1].opener.header}"')
        return tuple(self._root)


def _handler(statement: Statement, body: tuple[Node, ...]) -> Handler:
    clause: str = statement.clause
    if not clause:
        return Handler(exception=None, name=None, body=body)
    match = _EXCEPT_AS.match(clause)
    if match is not None:
        return Handler(exception=match.group(1).strip(), name=match.group(2), body=body)
    return Handler(exception=clause, name=None, body=body)


def build_tree(
    instructions: Iterable[Instruction], *, filename: str | None = None
) -> tuple[Node, ...]:
    """Fold ``instructions`` into a block tree.

    Args:
        instructions (Iterable[Instruction]): Flat program body.
        filename (str | None): File identifier used in syntax error messages.

    Returns:
        tuple[Node, ...]: Top-level nodes.

    Raises:
        TemplateSyntaxError: On unbalanced or misplaced block statements.
    """
    builder = BlockBuilder(filename)
    for instruction in instructions:
        builder.feed(instruction)
    tree: tuple[Node, ...] = builder.finish()
    logger.trace("Built block tree with %d top-level nodes", len(tree))
    return tree
