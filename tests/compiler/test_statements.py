# topmark:header:start
#
#   project      : Stencil
#   file         : test_statements.py
#   file_relpath : tests/compiler/test_statements.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Unit tests for statement classification and block structure."""

from __future__ import annotations

import pytest

from stencil.compiler.instructions import EmitLiteral, Exec
from stencil.compiler.statements import (
    Block,
    Branch,
    Handler,
    IfChain,
    LoopControl,
    StatementKind,
    TryBlock,
    build_tree,
    classify,
    split_trailing_header,
    strip_comment,
)
from stencil.core.errors import TemplateSyntaxError


@pytest.mark.parametrize(
    ("source", "kind", "clause"),
    [
        (" for x in xs: ", StatementKind.FOR, "x in xs"),
        ("if a > 1:", StatementKind.IF, "a > 1"),
        ("elif b:  # other", StatementKind.ELIF, "b"),
        ("else:", StatementKind.ELSE, ""),
        ("while n:", StatementKind.WHILE, "n"),
        ("with open(p) as f:", StatementKind.WITH, "open(p) as f"),
        ("try:", StatementKind.TRY, ""),
        ("except KeyError as e:", StatementKind.EXCEPT, "KeyError as e"),
        ("finally:", StatementKind.FINALLY, ""),
        (" end ", StatementKind.END, ""),
        ("end;", StatementKind.END, ""),
        ("break", StatementKind.BREAK, ""),
        ("continue", StatementKind.CONTINUE, ""),
        ("x = 1", StatementKind.SIMPLE, ""),
        ("d = {'a': 1}", StatementKind.SIMPLE, ""),
        ("else: x = 1", StatementKind.SIMPLE, ""),
        ("if a: b()", StatementKind.SIMPLE, ""),
        ("endless = 1", StatementKind.SIMPLE, ""),
        ("x = 1\nfor y in z:", StatementKind.SIMPLE, ""),
    ],
)
def test_classify(source: str, kind: StatementKind, clause: str) -> None:
    """Headers, ``end`` and loop control are recognized; everything else is simple."""
    statement = classify(source)
    assert statement.kind is kind
    assert statement.clause == clause


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("x = 1  # note", "x = 1  "),
        ("s = '#not a comment'", "s = '#not a comment'"),
        ('s = "a\\"#b"  # c', 's = "a\\"#b"  '),
        ("s = '''#'''#c", "s = '''#'''"),
    ],
)
def test_strip_comment_ignores_hashes_in_strings(line: str, expected: str) -> None:
    """Only a ``#`` outside string literals starts a comment."""
    assert strip_comment(line) == expected


def test_split_trailing_header() -> None:
    """A multi-line statement ending in a header is split before the header."""
    assert split_trailing_header(" x = 1\n for i in r: ") == (" x = 1", " for i in r:")
    assert split_trailing_header(" y = 2\n end") == (" y = 2", " end")
    assert split_trailing_header("for i in r:") is None
    assert split_trailing_header("x = 1\ny = 2") is None
    assert split_trailing_header("\n\nfor i in r:") is None


def test_for_loop_tree() -> None:
    """A ``for`` header and ``end`` fold into a `Block`."""
    tree = build_tree(
        [Exec("for x in xs:"), EmitLiteral("a"), Exec("else:"), EmitLiteral("b"), Exec("end")]
    )
    assert tree == (
        Block(
            kind=StatementKind.FOR,
            header="for x in xs:",
            body=(EmitLiteral("a"),),
            orelse=(EmitLiteral("b"),),
        ),
    )


def test_if_chain_tree() -> None:
    """``if``/``elif``/``else`` fold into one `IfChain`."""
    tree = build_tree(
        [
            Exec("if a:"),
            EmitLiteral("1"),
            Exec("elif b:"),
            EmitLiteral("2"),
            Exec("else:"),
            EmitLiteral("3"),
            Exec("end"),
        ]
    )
    assert tree == (
        IfChain(
            branches=(
                Branch("a", (EmitLiteral("1"),)),
                Branch("b", (EmitLiteral("2"),)),
                Branch(None, (EmitLiteral("3"),)),
            )
        ),
    )


def test_try_tree() -> None:
    """``try`` collects handlers, ``else`` and ``finally``."""
    tree = build_tree(
        [
            Exec("try:"),
            EmitLiteral("t"),
            Exec("except (KeyError, IndexError) as err:"),
            EmitLiteral("h"),
            Exec("except:"),
            EmitLiteral("any"),
            Exec("else:"),
            EmitLiteral("e"),
            Exec("finally:"),
            EmitLiteral("f"),
            Exec("end"),
        ]
    )
    assert tree == (
        TryBlock(
            body=(EmitLiteral("t"),),
            handlers=(
                Handler("(KeyError, IndexError)", "err", (EmitLiteral("h"),)),
                Handler(None, None, (EmitLiteral("any"),)),
            ),
            orelse=(EmitLiteral("e"),),
            finalbody=(EmitLiteral("f"),),
        ),
    )


def test_loop_control_nested_in_if() -> None:
    """``break`` inside an ``if`` inside a loop is accepted."""
    tree = build_tree(
        [Exec("for x in xs:"), Exec("if x:"), Exec("break"), Exec("end"), Exec("end")]
    )
    block = tree[0]
    assert isinstance(block, Block)
    assert block.body == (IfChain((Branch("x", (LoopControl(StatementKind.BREAK),)),)),)


@pytest.mark.parametrize(
    ("sources", "message"),
    [
        (["end"], 'Unexpected "end" with no open block'),
        (["if a:"], 'Unclosed block "if a:"'),
        (["else:"], 'Unexpected "else:" without matching block'),
        (["for x in y:", "elif z:", "end"], 'Unexpected "elif z:"'),
        (["if a:", "else:", "else:", "end"], 'Unexpected "else:"'),
        (["with a:", "else:", "end"], 'Unexpected "else:"'),
        (["try:", "else:", "end"], 'Unexpected "else:"'),
        (["try:", "finally:", "except:", "end"], 'Unexpected "except:"'),
        (["try:", "end"], '"try:" block needs an "except" or "finally" clause'),
        (["break"], '"break" outside loop'),
        (["if a:", "continue", "end"], '"continue" outside loop'),
        (["for x in y:", "else:", "break", "end"], '"break" outside loop'),
    ],
)
def test_structure_errors(sources: list[str], message: str) -> None:
    """Misplaced block statements fail at compile time."""
    with pytest.raises(TemplateSyntaxError, match=message):
        build_tree([Exec(source) for source in sources])
