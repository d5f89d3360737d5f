# topmark:header:start
#
#   project      : Stencil
#   file         : machine.py
#   file_relpath : src/stencil/compiler/machine.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tag/mode state machine.

Consumes the token sequence of `stencil.compiler.tokenizer` and produces
`Segment`s: literal text to emit, or a directive body together with the mode
it was written in. The machine owns tag balance checking and the whitespace
rules tied to tag markers:

- blanks (spaces/tabs) right before ``<D_`` are removed;
- blanks right after ``_D>`` are removed;
- after ``-D>`` or ``_D>`` a single leading line terminator (CRLF, CR or LF)
  is removed from the next literal chunk.

A ``<DD`` literal escape needs no close: an open marker met while in literal
mode simply leaves literal mode first.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stencil.compiler.tags import Mode, TagKind
from stencil.config.logging import get_logger
from stencil.core.errors import TemplateSyntaxError

if TYPE_CHECKING:
    from stencil.compiler.tokenizer import Token
    from stencil.config.logging import StencilLogger

logger: StencilLogger = get_logger(__name__)

_LEADING_LINE_BREAK: re.Pattern[str] = re.compile(r"^(?:\r\n|\r|\n)")

# Characters of surrounding text quoted in unmatched-close errors.
_CONTEXT_CHARS: int = 20


@dataclass(frozen=True)
class Segment:
    """Unit of work for the instruction generator.

    Attributes:
        mode (Mode): ``NONE`` or ``LITERAL`` for text to emit verbatim, else the
            directive mode the body was written in.
        text (str): Literal text after whitespace rules, or the directive body.
        line (int): 1-based line on which the underlying chunk starts.
        end_line (int): Line on which the underlying chunk ends (before any trimming).
    """

    mode: Mode
    text: str
    line: int
    end_line: int

    @property
    def is_literal(self) -> bool:
        """Return True for text emitted verbatim."""
        return self.mode in (Mode.NONE, Mode.LITERAL)

    @property
    def newlines(self) -> int:
        """Number of line feeds in the underlying chunk."""
        return self.end_line - self.line


class ModeMachine:
    """Stateful scanner turning tokens into segments.

    Attributes:
        filename (str | None): File identifier used in syntax error messages.
        mode (Mode): Currently active mode.
        truncate (bool): A leading line terminator is pending removal.
    """

    def __init__(self, filename: str | None = None) -> None:
        self.filename: str | None = filename
        self.mode: Mode = Mode.NONE
        self.truncate: bool = False
        self.slurp_next: bool = False
        self._opener: Token | None = None
        self._previous_text: str = ""

    def scan(self, tokens: Iterable[Token]) -> Iterator[Segment]:
        """Yield segments for ``tokens``.

        Args:
            tokens (Iterable[Token]): Token sequence of one template.

        Yields:
            Segment: Literal text and directive bodies, in template order.

        Raises:
            TemplateSyntaxError: On an open marker inside a directive, a close marker
                without open, or a directive left open at end of input.
        """
        iterator: Iterator[Token] = iter(tokens)
        current: Token | None = next(iterator, None)
        while current is not None:
            following: Token | None = next(iterator, None)
            if current.tag is None:
                segment: Segment | None = self._on_text(current, following)
            elif current.tag.is_open:
                segment = self._on_open(current)
            else:
                segment = self._on_close(current, following)
            if segment is not None:
                yield segment
            current = following
        if self.mode not in (Mode.NONE, Mode.LITERAL):
            opener: str = self._opener.text if self._opener is not None else ""
            raise TemplateSyntaxError(
                f'Could not find matching close tag for "{opener}".', filename=self.filename
            )

    # ------------------ token handlers ------------------

    def _on_text(self, token: Token, following: Token | None) -> Segment | None:
        self._previous_text = token.text
        if self.mode not in (Mode.NONE, Mode.LITERAL):
            return Segment(
                mode=self.mode,
                text=token.text,
                line=token.line,
                end_line=token.end_line,
            )
        text: str = token.text
        if self.slurp_next:
            text = text.lstrip(" \t")
            self.slurp_next = False
        if self.truncate:
            text = _LEADING_LINE_BREAK.sub("", text, count=1)
            self.truncate = False
        if following is not None and following.tag is TagKind.OPEN_SLURP:
            text = text.rstrip(" \t")
        return Segment(mode=self.mode, text=text, line=token.line, end_line=token.end_line)

    def _on_open(self, token: Token) -> Segment | None:
        if self.mode is Mode.LITERAL:
            logger.trace("Leaving literal mode at line %d", token.line)
            self.mode = Mode.NONE
        if self.mode is not Mode.NONE:
            raise TemplateSyntaxError(
                f'Could not find matching close tag for "{self._opener_text()}".',
                filename=self.filename,
            )
        self.slurp_next = False
        self._opener = token
        assert token.tag is not None
        self.mode = token.tag.mode or Mode.NONE
        if token.tag is TagKind.OPEN_LITERAL:
            # `<DD` renders as `<D`
            return Segment(
                mode=Mode.LITERAL, text=token.text[:-1], line=token.line, end_line=token.line
            )
        return None

    def _on_close(self, token: Token, following: Token | None) -> Segment | None:
        assert token.tag is not None
        if self.mode is Mode.NONE:
            near: str = self._previous_text[-_CONTEXT_CHARS:] + token.text
            if following is not None and following.tag is None:
                near += following.text[:_CONTEXT_CHARS]
            raise TemplateSyntaxError(
                f'Could not find matching open tag for "{token.text}" near "{near.strip()}".',
                filename=self.filename,
            )
        segment: Segment | None = None
        if self.mode is Mode.LITERAL:
            segment = Segment(
                mode=Mode.LITERAL, text=token.text, line=token.line, end_line=token.line
            )
        self.mode = Mode.NONE
        self._opener = None
        self.truncate = token.tag.truncates
        self.slurp_next = token.tag is TagKind.CLOSE_SLURP
        return segment

    def _opener_text(self) -> str:
        return self._opener.text if self._opener is not None else ""


def scan(tokens: Iterable[Token], *, filename: str | None = None) -> list[Segment]:
    """Run a fresh `ModeMachine` over ``tokens`` and collect its segments."""
    return list(ModeMachine(filename).scan(tokens))
