# topmark:header:start
#
#   project      : Stencil
#   file         : cache.py
#   file_relpath : src/stencil/cache.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Compiled-artifact cache.

Maps absolute template paths to compiled programs. Entries can be watched:
the file-system collaborator then reports changes and the entry is removed,
so the next render recompiles the template.

Operations on the cache are serialized by a re-entrant lock, so a watch
callback removing an entry never races a fresh `TemplateCache.set` for the
same key. Concurrent sets of one key are last-write-wins.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from stencil.config.logging import get_logger
from stencil.core.errors import UnwatchableError

if TYPE_CHECKING:
    from stencil.compiler.instructions import Program
    from stencil.config.logging import StencilLogger
    from stencil.filesystem import FileSystem, WatchHandle

logger: StencilLogger = get_logger(__name__)


def cache_key(filename: str) -> str:
    """Return the cache key of a template file (its absolute path)."""
    return str(Path(filename).resolve())


@dataclass(frozen=True)
class CacheEntry:
    """Cached program and the watch invalidating it (if any)."""

    program: Program
    watch: WatchHandle | None = None


class TemplateCache:
    """Thread-safe store of compiled programs keyed by absolute path.

    Attributes:
        filesystem (FileSystem): Collaborator used to watch cached files.
    """

    def __init__(self, filesystem: FileSystem) -> None:
        self.filesystem: FileSystem = filesystem
        self._entries: dict[str, CacheEntry] = {}
        self._lock: threading.RLock = threading.RLock()

    def get(self, key: str) -> Program | None:
        """Return the program cached under ``key``, or ``None``."""
        with self._lock:
            entry: CacheEntry | None = self._entries.get(key)
        if entry is None:
            logger.trace("Cache miss: %s", key)
            return None
        logger.trace("Cache hit: %s", key)
        return entry.program

    def set(self, key: str, program: Program, watch: bool = False) -> None:
        """Store ``program`` under ``key``, optionally watching the file.

        A path that cannot be watched is tolerated: the entry is cached without
        automatic invalidation.
        """
        with self._lock:
            self._drop(key)
            handle: WatchHandle | None = None
            if watch:
                try:
                    handle = self.filesystem.watch(key, self._on_change)
                except UnwatchableError as exc:
                    logger.debug("Caching %s without invalidation: %s", key, exc)
            self._entries[key] = CacheEntry(program=program, watch=handle)
        logger.debug("Cached %s (watch=%s)", key, handle is not None)

    def delete(self, key: str) -> bool:
        """Remove the entry for ``key`` and cancel its watch.

        Returns:
            bool: True if an entry was removed.
        """
        with self._lock:
            return self._drop(key)

    def invalidate_all(self) -> None:
        """Remove every entry and cancel every watch."""
        with self._lock:
            for key in list(self._entries):
                self._drop(key)
        logger.debug("Cache cleared")

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _drop(self, key: str) -> bool:
        entry: CacheEntry | None = self._entries.pop(key, None)
        if entry is None:
            return False
        if entry.watch is not None:
            self.filesystem.unwatch(entry.watch)
        return True

    def _on_change(self, handle: WatchHandle) -> None:
        with self._lock:
            entry: CacheEntry | None = self._entries.get(handle.path)
            # A change reported by a replaced watch must not drop the new entry.
            if entry is None or entry.watch != handle:
                logger.trace("Ignoring stale change notification: %s", handle.path)
                return
            self._drop(handle.path)
        logger.debug("Invalidated %s after change", handle.path)
