# topmark:header:start
#
#   project      : Stencil
#   file         : __init__.py
#   file_relpath : src/stencil/api/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Public Stencil API (stable surface).

Module-level convenience functions backed by one lazily created default
`Engine`. Applications needing isolated defaults or caches construct their
own `Engine` instead.

Versioning policy
-----------------
- The signatures in this module follow semver.
- Adding optional parameters with defaults is allowed in minor releases.
- Removing/renaming anything here is a breaking change (major release).

Options contract
----------------
Every function accepts either a frozen `stencil.config.Options` or a plain
mapping of option values (snake_case or camelCase keys), plus keyword
overrides:

```python
from stencil import api

api.render("<p><?= name ?></p>", {"name": "geddy"}, delimiter="?")
api.render_file("views/page.stencil", {"user": user}, cache=True)
```

Lifecycle
---------
- `get_default_engine` creates the default engine on first use.
- `reset_default_engine` drops it (and its cache); the next call creates a
  fresh one, optionally with new default options.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from stencil.engine import Engine, Template

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from stencil.engine import OptionsLike

__all__ = [
    "Engine",
    "Template",
    "clear_cache",
    "compile",
    "compile_file",
    "get_default_engine",
    "render",
    "render_async",
    "render_file",
    "reset_default_engine",
]

_default_engine: Engine | None = None
_default_lock: threading.Lock = threading.Lock()


def get_default_engine() -> Engine:
    """Return the default engine, creating it on first use."""
    global _default_engine
    with _default_lock:
        if _default_engine is None:
            _default_engine = Engine()
        return _default_engine


def reset_default_engine(options: OptionsLike = None) -> Engine:
    """Replace the default engine with a fresh one.

    The previous engine's cache is cleared (cancelling its file watches).

    Args:
        options (OptionsLike): Default options of the new engine.

    Returns:
        Engine: The new default engine.
    """
    global _default_engine
    with _default_lock:
        if _default_engine is not None:
            _default_engine.clear_cache()
        _default_engine = Engine(options)
        return _default_engine


def compile(text: str, options: OptionsLike = None, **overrides: Any) -> Template:  # noqa: A001
    """Compile template text with the default engine."""
    return get_default_engine().compile(text, options, **overrides)


def compile_file(path: str | Path, options: OptionsLike = None, **overrides: Any) -> Template:
    """Read and compile a template file with the default engine."""
    return get_default_engine().compile_file(path, options, **overrides)


def render(
    text: str,
    data: Mapping[str, Any] | None = None,
    options: OptionsLike = None,
    **overrides: Any,
) -> str:
    """Compile and render template text with the default engine."""
    return get_default_engine().render(text, data, options, **overrides)


async def render_async(
    text: str,
    data: Mapping[str, Any] | None = None,
    options: OptionsLike = None,
    **overrides: Any,
) -> str:
    """Compile and render template text, completing after one event-loop turn."""
    return await get_default_engine().render_async(text, data, options, **overrides)


def render_file(
    path: str | Path,
    data: Mapping[str, Any] | None = None,
    options: OptionsLike = None,
    **overrides: Any,
) -> str:
    """Compile and render a template file with the default engine."""
    return get_default_engine().render_file(path, data, options, **overrides)


def clear_cache() -> None:
    """Clear the default engine's compiled-artifact cache."""
    get_default_engine().clear_cache()
