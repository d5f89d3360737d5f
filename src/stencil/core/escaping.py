# topmark:header:start
#
#   project      : Stencil
#   file         : escaping.py
#   file_relpath : src/stencil/core/escaping.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Output escaping for ``<%= ... %>`` directives.

The escaping function is a capability passed through the compilation options;
`escape_xml` is the default. Any callable taking one value and returning a
string can replace it.
"""

from __future__ import annotations

from typing import Any, Callable, Final

EscapeFunction = Callable[[Any], str]

_ENCODE_HTML_RULES: Final[dict[int, str]] = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&#34;",
        "'": "&#39;",
    }
)


def escape_xml(markup: Any) -> str:
    """Escape characters reserved in XML and HTML.

    ``None`` escapes to the empty string; any other value is converted with
    ``str()`` first.

    Args:
        markup (Any): Value to escape.

    Returns:
        str: The escaped text.
    """
    if markup is None:
        return ""
    return str(markup).translate(_ENCODE_HTML_RULES)
