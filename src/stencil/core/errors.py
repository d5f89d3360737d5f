# topmark:header:start
#
#   project      : Stencil
#   file         : errors.py
#   file_relpath : src/stencil/core/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil Exceptions.

Every error raised by the engine derives from `StencilError`:

- `TemplateSyntaxError`: malformed tags or blocks, raised at compile time.
- `ConfigurationError`: invalid or inconsistent options, raised before any
  compilation work.
- `IncludeResolutionError`: an include target could not be read.
- `TemplateRuntimeError`: embedded code failed while rendering, rewritten
  with template source context.

`UnwatchableError` is raised by file-system collaborators for paths that
cannot be watched; it is an `OSError` because it reports a file-system
condition, not a template problem.
"""

from __future__ import annotations


class StencilError(Exception):
    """Base exception for all Stencil errors."""

    pass


class TemplateSyntaxError(StencilError):
    """Raised when the tag or block structure of a template is malformed."""

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        self.filename = filename
        if filename:
            message = f"{message} in {filename}"
        super().__init__(message)


class ConfigurationError(StencilError):
    """Raised when compilation options are invalid or inconsistent."""

    pass


class MissingBasePathError(ConfigurationError):
    """Raised when an include is requested without a ``filename`` to resolve it against."""

    def __init__(self) -> None:
        super().__init__("`include` requires the 'filename' option.")


class IncludeResolutionError(StencilError):
    """Raised when an included template cannot be read."""

    def __init__(self, reference: str, includer: str, message: str | None = None) -> None:
        self.reference = reference
        self.includer = includer
        super().__init__(message or f"Cannot include '{reference}' in '{includer}' template")


class CircularIncludeError(IncludeResolutionError):
    """Raised when a template includes itself, directly or through other templates.

    Attributes:
        chain (list[str]): Resolved paths from the outermost template to the repeated one.
    """

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__(chain[-1], chain[-2], "Circular include: " + " -> ".join(chain))


class TemplateRuntimeError(StencilError):
    """Raised when embedded code fails while rendering, with template context.

    Attributes:
        path (str | None): File identifier of the failing template, if known.
        lineno (int): 1-based template line that was active when the failure occurred.
    """

    def __init__(self, message: str, *, path: str | None, lineno: int) -> None:
        self.path = path
        self.lineno = lineno
        super().__init__(message)


class UnwatchableError(OSError):
    """Raised by a file-system collaborator when a path cannot be watched."""

    pass
