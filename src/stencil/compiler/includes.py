# topmark:header:start
#
#   project      : Stencil
#   file         : includes.py
#   file_relpath : src/stencil/compiler/includes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Include resolution.

Both include forms resolve their reference the same way:

- relative to the directory of the including template's ``filename``;
- ``.stencil`` is appended when the reference has no extension;
- the file is read through the `FileSystem` collaborator and a leading BOM is
  stripped.

An `IncludeResolver` also carries the chain of templates currently being
included, so that a template including itself (directly or through other
templates) fails fast with `CircularIncludeError` instead of recursing
without bound.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from stencil.config.logging import get_logger
from stencil.constants import BOM, DEFAULT_TEMPLATE_EXTENSION
from stencil.core.errors import (
    CircularIncludeError,
    IncludeResolutionError,
    MissingBasePathError,
)

if TYPE_CHECKING:
    from stencil.config.logging import StencilLogger
    from stencil.filesystem import FileSystem

logger: StencilLogger = get_logger(__name__)


def resolve_include_path(name: str, filename: str | None) -> str:
    """Resolve an include reference against the including template.

    Args:
        name (str): Reference as written in the template.
        filename (str | None): File identifier of the including template.

    Returns:
        str: Absolute path of the included template.

    Raises:
        MissingBasePathError: If ``filename`` is not set.
    """
    if not filename:
        raise MissingBasePathError()
    path: Path = (Path(filename).parent / name).resolve()
    if not path.suffix:
        path = path.with_name(path.name + DEFAULT_TEMPLATE_EXTENSION)
    return str(path)


def decode_template(data: bytes) -> str:
    """Decode template bytes as UTF-8 and strip a leading BOM."""
    text: str = data.decode("utf-8")
    if text.startswith(BOM):
        text = text[len(BOM) :]
    return text


class IncludeResolver:
    """Resolve, cycle-check and read included templates.

    Attributes:
        filesystem (FileSystem): Collaborator used to read template files.
        chain (tuple[str, ...]): Resolved paths of the templates currently being
            compiled or rendered, outermost first.
    """

    def __init__(self, filesystem: FileSystem, chain: tuple[str, ...] = ()) -> None:
        self.filesystem: FileSystem = filesystem
        self.chain: tuple[str, ...] = chain

    @classmethod
    def for_template(cls, filesystem: FileSystem, filename: str | None) -> IncludeResolver:
        """Return a resolver rooted at the template ``filename`` (if any)."""
        if not filename:
            return cls(filesystem)
        return cls(filesystem, (str(Path(filename).resolve()),))

    def descend(self, path: str) -> IncludeResolver:
        """Return a resolver for compiling the template at ``path``.

        Raises:
            CircularIncludeError: If ``path`` is already being included.
        """
        if path in self.chain:
            raise CircularIncludeError([*self.chain, path])
        return IncludeResolver(self.filesystem, (*self.chain, path))

    def read(self, reference: str, path: str, includer: str | None) -> str:
        """Read the included template at ``path``.

        Args:
            reference (str): Reference as written in the including template.
            path (str): Resolved path.
            includer (str | None): File identifier of the including template.

        Returns:
            str: Template text without BOM.

        Raises:
            IncludeResolutionError: If the file cannot be read or decoded.
        """
        try:
            text: str = decode_template(self.filesystem.read_file(path))
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Cannot read include %s: %s", path, exc)
            raise IncludeResolutionError(reference, includer or "") from exc
        logger.trace("Read include %s (%d characters)", path, len(text))
        return text

    def load(self, reference: str, includer: str | None) -> tuple[str, str, IncludeResolver]:
        """Resolve, cycle-check and read ``reference``.

        Returns:
            tuple[str, str, IncludeResolver]: Resolved path, template text and the
                resolver to use while compiling the included template.
        """
        path: str = resolve_include_path(reference, includer)
        child: IncludeResolver = self.descend(path)
        return path, self.read(reference, path, includer), child
