# topmark:header:start
#
#   project      : Stencil
#   file         : keys.py
#   file_relpath : src/stencil/config/keys.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Canonical option names for Stencil configuration.

This module defines the authoritative string constants used when reading
options from keyword arguments, data mappings and TOML sources
(``stencil.toml`` and ``[tool.stencil]`` in ``pyproject.toml``).

Design notes:
    - Keys defined here represent *external configuration API*.
    - Renaming or removing keys is a breaking change.
    - camelCase aliases are accepted on input for compatibility with templates
      written for the JavaScript engines Stencil descends from.
"""

from __future__ import annotations

from typing import Final


class Opt:
    """Option keys accepted by `stencil.config.MutableOptions`.

    Notes:
        - Values must match user-facing keys exactly.
        - ``filename`` and ``escape`` are runtime-only: they are never read
          from TOML files.
    """

    DELIMITER: Final[str] = "delimiter"
    FILENAME: Final[str] = "filename"
    CACHE: Final[str] = "cache"
    WATCH_FILES: Final[str] = "watch_files"
    DEBUG: Final[str] = "debug"
    COMPILE_DEBUG: Final[str] = "compile_debug"
    ESCAPE: Final[str] = "escape"
    RM_WHITESPACE: Final[str] = "rm_whitespace"
    DEFERRED_MARKER: Final[str] = "deferred_marker"


# Every option key, in documentation order.
ALL_OPTION_KEYS: Final[tuple[str, ...]] = (
    Opt.DELIMITER,
    Opt.FILENAME,
    Opt.CACHE,
    Opt.WATCH_FILES,
    Opt.DEBUG,
    Opt.COMPILE_DEBUG,
    Opt.ESCAPE,
    Opt.RM_WHITESPACE,
    Opt.DEFERRED_MARKER,
)

# Keys that may appear in TOML configuration.
TOML_OPTION_KEYS: Final[frozenset[str]] = frozenset(
    {
        Opt.DELIMITER,
        Opt.CACHE,
        Opt.WATCH_FILES,
        Opt.DEBUG,
        Opt.COMPILE_DEBUG,
        Opt.RM_WHITESPACE,
        Opt.DEFERRED_MARKER,
    }
)

# camelCase spellings accepted on input.
OPTION_ALIASES: Final[dict[str, str]] = {
    "watchFiles": Opt.WATCH_FILES,
    "compileDebug": Opt.COMPILE_DEBUG,
    "rmWhitespace": Opt.RM_WHITESPACE,
    "deferredMarker": Opt.DEFERRED_MARKER,
}


def canonical_key(key: str) -> str:
    """Return the canonical option key for ``key`` (resolving camelCase aliases)."""
    return OPTION_ALIASES.get(key, key)
