# topmark:header:start
#
#   project      : Stencil
#   file         : tokenizer.py
#   file_relpath : src/stencil/compiler/tokenizer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Template tokenizer.

Splits template text into alternating literal chunks and tag markers. The
token sequence is lazy and restartable: iterating a `TokenStream` twice scans
the text twice and yields equal tokens. Concatenating the text of every token
reproduces the input exactly; empty literal chunks are never produced.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stencil.compiler.tags import tag_table
from stencil.config.logging import get_logger

if TYPE_CHECKING:
    from stencil.compiler.tags import TagKind, TagTable
    from stencil.config.logging import StencilLogger

logger: StencilLogger = get_logger(__name__)

_LINE_WHITESPACE: re.Pattern[str] = re.compile(r"^[ \t]+|[ \t]+$", re.MULTILINE)


@dataclass(frozen=True)
class Token:
    """A literal chunk or a tag marker.

    Attributes:
        text (str): Exact source text of the token.
        line (int): 1-based line on which the token starts.
        tag (TagKind | None): Tag kind for markers, ``None`` for literal chunks.
    """

    text: str
    line: int
    tag: TagKind | None = None

    @property
    def is_tag(self) -> bool:
        """Return True if this token is a tag marker."""
        return self.tag is not None

    @property
    def end_line(self) -> int:
        """Line on which the token ends (counting ``\\n`` only)."""
        return self.line + self.text.count("\n")


class TokenStream:
    """Restartable, lazy token sequence over one template text."""

    def __init__(self, text: str, delimiter: str) -> None:
        self.text: str = text
        self.table: TagTable = tag_table(delimiter)

    def __iter__(self) -> Iterator[Token]:
        text: str = self.text
        pos: int = 0
        line: int = 1
        for match in self.table.pattern.finditer(text):
            start: int = match.start()
            if start > pos:
                chunk: str = text[pos:start]
                yield Token(text=chunk, line=line)
                line += chunk.count("\n")
            marker: str = match.group(0)
            yield Token(text=marker, line=line, tag=self.table.kind_of(marker))
            pos = match.end()
        if pos < len(text):
            yield Token(text=text[pos:], line=line)

    def __repr__(self) -> str:
        return f"TokenStream(delimiter={self.table.delimiter!r}, length={len(self.text)})"


def tokenize(text: str, delimiter: str) -> TokenStream:
    """Return the lazy token sequence of ``text`` for ``delimiter``.

    Args:
        text (str): Template text.
        delimiter (str): Single delimiter character.

    Returns:
        TokenStream: Restartable iterable of `Token`.

    Raises:
        ConfigurationError: If ``delimiter`` is not exactly one character.
    """
    logger.trace("Tokenizing %d characters with delimiter %r", len(text), delimiter)
    return TokenStream(text, delimiter)


def strip_line_whitespace(text: str) -> str:
    """Remove carriage returns and leading/trailing blanks of every line.

    The number of lines is preserved so line numbers stay aligned with the
    template the author wrote.
    """
    return _LINE_WHITESPACE.sub("", text.replace("\r", ""))
