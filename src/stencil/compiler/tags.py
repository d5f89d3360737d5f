# topmark:header:start
#
#   project      : Stencil
#   file         : tags.py
#   file_relpath : src/stencil/compiler/tags.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tag markers and the directive modes they select.

Every tag is parameterized by a single delimiter character ``D`` (``%`` by
default):

| Tag   | Kind                    | Mode entered / effect                       |
|-------|-------------------------|---------------------------------------------|
| `<D`  | open                    | statement                                   |
| `<D_` | open, slurp blanks      | statement; blanks before the tag removed    |
| `<D=` | open                    | escaped output                              |
| `<D-` | open                    | raw output                                  |
| `<D#` | open                    | comment                                     |
| `<DD` | open                    | literal; emits `<D`                         |
| `D>`  | close                   | back to literal text                        |
| `-D>` | close, trim newline     | drops one line terminator after the tag     |
| `_D>` | close, slurp blanks     | drops blanks after the tag                  |
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from stencil.core.errors import ConfigurationError


class Mode(Enum):
    """Directive mode active between an open and a close tag."""

    NONE = "none"
    STATEMENT = "statement"
    ESCAPED = "escaped"
    RAW = "raw"
    COMMENT = "comment"
    LITERAL = "literal"


class TagKind(Enum):
    """Closed set of tag markers, as templates (``{d}`` is the delimiter).

    Declaration order is the match order of the tag pattern: at a given
    position the longer marker is tried first.
    """

    OPEN_LITERAL = "<{d}{d}"
    OPEN_ESCAPED = "<{d}="
    OPEN_RAW = "<{d}-"
    OPEN_SLURP = "<{d}_"
    OPEN_COMMENT = "<{d}#"
    OPEN_STATEMENT = "<{d}"
    CLOSE_TRIM = "-{d}>"
    CLOSE_SLURP = "_{d}>"
    CLOSE = "{d}>"

    @property
    def is_open(self) -> bool:
        """Return True for open markers."""
        return self.value.startswith("<")

    @property
    def is_close(self) -> bool:
        """Return True for close markers."""
        return not self.is_open

    @property
    def truncates(self) -> bool:
        """Return True when this close marker sets the truncate flag."""
        return self in (TagKind.CLOSE_TRIM, TagKind.CLOSE_SLURP)

    @property
    def mode(self) -> Mode | None:
        """Mode entered by this open marker (``None`` for close markers)."""
        return _OPEN_MODES.get(self)

    def render(self, delimiter: str) -> str:
        """Return the concrete marker text for ``delimiter``."""
        return self.value.format(d=delimiter)


_OPEN_MODES: dict[TagKind, Mode] = {
    TagKind.OPEN_STATEMENT: Mode.STATEMENT,
    TagKind.OPEN_SLURP: Mode.STATEMENT,
    TagKind.OPEN_ESCAPED: Mode.ESCAPED,
    TagKind.OPEN_RAW: Mode.RAW,
    TagKind.OPEN_COMMENT: Mode.COMMENT,
    TagKind.OPEN_LITERAL: Mode.LITERAL,
}


@dataclass(frozen=True)
class TagTable:
    """Concrete markers for one delimiter, with the compiled tag pattern.

    Attributes:
        delimiter (str): The single delimiter character.
        pattern (re.Pattern[str]): Alternation of all markers, longest first.
        kinds (dict[str, TagKind]): Marker text to tag kind.
    """

    delimiter: str
    pattern: re.Pattern[str]
    kinds: dict[str, TagKind]

    def kind_of(self, text: str) -> TagKind | None:
        """Return the tag kind of ``text``, or ``None`` if it is not a marker."""
        return self.kinds.get(text)

    def marker(self, kind: TagKind) -> str:
        """Return the concrete text of ``kind``."""
        return kind.render(self.delimiter)


@lru_cache(maxsize=32)
def tag_table(delimiter: str) -> TagTable:
    """Build (and memoize) the tag table for ``delimiter``.

    Args:
        delimiter (str): Exactly one character.

    Returns:
        TagTable: The markers and their compiled alternation.

    Raises:
        ConfigurationError: If ``delimiter`` is not exactly one character.
    """
    if len(delimiter) != 1:
        raise ConfigurationError(f"delimiter must be exactly one character, got {delimiter!r}")
    escaped: str = re.escape(delimiter)
    alternation: str = "|".join(
        escaped.join(re.escape(part) for part in kind.value.split("{d}")) for kind in TagKind
    )
    kinds: dict[str, TagKind] = {}
    for kind in TagKind:
        # First declared kind wins when two markers coincide for odd delimiters.
        kinds.setdefault(kind.render(delimiter), kind)
    return TagTable(delimiter=delimiter, pattern=re.compile(f"({alternation})"), kinds=kinds)
