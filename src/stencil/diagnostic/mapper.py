# topmark:header:start
#
#   project      : Stencil
#   file         : mapper.py
#   file_relpath : src/stencil/diagnostic/mapper.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Map runtime errors back to template source lines.

When ``compile_debug`` is enabled the executor remembers the last
`LineMarker` it passed. If embedded code then fails, `map_error` rewrites the
failure as a `TemplateRuntimeError` quoting the surrounding template lines::

    views/user.stencil:4
        1| <ul>
        2| <% for user in users: %>
        3|   <li><%= user.name %></li>
     >> 4|   <li><%= user.mail %></li>
        5| <% end %>
        6| </ul>

    'User' object has no attribute 'mail'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from stencil.config.logging import get_logger
from stencil.constants import DEFAULT_SOURCE_LABEL
from stencil.core.errors import TemplateRuntimeError

if TYPE_CHECKING:
    from stencil.config.logging import StencilLogger

logger: StencilLogger = get_logger(__name__)

LINES_BEFORE: Final[int] = 3
LINES_AFTER: Final[int] = 3


def context_window(text: str, lineno: int) -> str:
    """Return numbered template lines around ``lineno``.

    Args:
        text (str): Template text.
        lineno (int): 1-based failing line.

    Returns:
        str: Up to three lines before and after the failing line, each prefixed
            with its number; the failing line is marked with ``>>``.
    """
    lines: list[str] = text.split("\n")
    start: int = max(lineno - LINES_BEFORE - 1, 0)
    end: int = min(len(lines), lineno + LINES_AFTER)
    rendered: list[str] = []
    for index, line in enumerate(lines[start:end], start=start + 1):
        marker: str = " >> " if index == lineno else "    "
        rendered.append(f"{marker}{index}| {line}")
    return "\n".join(rendered)


def map_error(
    error: BaseException, text: str, filename: str | None, lineno: int
) -> TemplateRuntimeError:
    """Build the mapped error for a failure at ``lineno`` of a template.

    Args:
        error (BaseException): The failure raised by embedded code.
        text (str): Template text the failing line belongs to.
        filename (str | None): File identifier of that template.
        lineno (int): 1-based line active when the failure occurred.

    Returns:
        TemplateRuntimeError: The error to raise (chain it with ``from error``).
    """
    label: str = filename or DEFAULT_SOURCE_LABEL
    message: str = f"{label}:{lineno}\n{context_window(text, lineno)}\n\n{error}\n"
    logger.debug("Mapped %s at %s:%d", type(error).__name__, label, lineno)
    return TemplateRuntimeError(message, path=filename, lineno=lineno)
