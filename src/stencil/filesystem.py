# topmark:header:start
#
#   project      : Stencil
#   file         : filesystem.py
#   file_relpath : src/stencil/filesystem.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""File-system collaborator.

The engine never touches the file system directly: template files are read
and watched through a `FileSystem`. `LocalFileSystem` is the default
implementation; tests substitute an in-memory fake.

Watching is done by polling: each watched path gets a daemon thread that
compares the file's modification time and size every ``interval`` seconds
and calls ``on_change`` with the watch handle once per detected change.
"""

from __future__ import annotations

import itertools
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Protocol

from stencil.config.logging import get_logger
from stencil.core.errors import UnwatchableError

if TYPE_CHECKING:
    from stencil.config.logging import StencilLogger

logger: StencilLogger = get_logger(__name__)

DEFAULT_POLL_INTERVAL: float = 0.5

_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class WatchHandle:
    """Opaque token identifying one registered watch."""

    path: str
    id: int = field(default_factory=lambda: next(_handle_ids))


ChangeCallback = Callable[[WatchHandle], None]


class FileSystem(Protocol):
    """File operations consumed by the engine."""

    def read_file(self, path: str) -> bytes:
        """Return the content of ``path``; raise `OSError` when it cannot be read."""
        ...

    def watch(self, path: str, on_change: ChangeCallback) -> WatchHandle:
        """Call ``on_change(handle)`` whenever ``path`` changes.

        Raises:
            UnwatchableError: If ``path`` cannot be watched.
        """
        ...

    def unwatch(self, handle: WatchHandle) -> None:
        """Cancel a watch; unknown handles are ignored."""
        ...


def _signature(path: str) -> tuple[int, int]:
    stat: os.stat_result = os.stat(path)
    return stat.st_mtime_ns, stat.st_size


class _Poller(threading.Thread):
    def __init__(self, handle: WatchHandle, on_change: ChangeCallback, interval: float) -> None:
        super().__init__(name=f"stencil-watch:{Path(handle.path).name}", daemon=True)
        self.handle: WatchHandle = handle
        self.path: str = handle.path
        self.on_change: ChangeCallback = on_change
        self.interval: float = interval
        self.stopped: threading.Event = threading.Event()
        self.signature: tuple[int, int] | None = _signature(self.path)

    def run(self) -> None:
        while not self.stopped.wait(self.interval):
            try:
                current: tuple[int, int] | None = _signature(self.path)
            except OSError:
                current = None
            if current != self.signature:
                self.signature = current
                logger.debug("Change detected: %s", self.path)
                try:
                    self.on_change(self.handle)
                except Exception:
                    logger.exception("Change callback failed for %s", self.path)


class LocalFileSystem:
    """`FileSystem` backed by the local disk, with polling watchers.

    Attributes:
        interval (float): Polling interval of watcher threads, in seconds.
    """

    def __init__(self, interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self.interval: float = interval
        self._pollers: dict[WatchHandle, _Poller] = {}
        self._lock: threading.Lock = threading.Lock()

    def read_file(self, path: str) -> bytes:
        """Read ``path`` from disk."""
        return Path(path).read_bytes()

    def watch(self, path: str, on_change: ChangeCallback) -> WatchHandle:
        """Start a polling watcher for ``path``."""
        handle = WatchHandle(path)
        try:
            poller = _Poller(handle, on_change, self.interval)
        except OSError as exc:
            raise UnwatchableError(f"Cannot watch {path}: {exc}") from exc
        with self._lock:
            self._pollers[handle] = poller
        poller.start()
        logger.trace("Watching %s (handle %d)", path, handle.id)
        return handle

    def unwatch(self, handle: WatchHandle) -> None:
        """Stop the watcher registered under ``handle``."""
        with self._lock:
            poller: _Poller | None = self._pollers.pop(handle, None)
        if poller is not None:
            poller.stopped.set()
            logger.trace("Stopped watching %s (handle %d)", handle.path, handle.id)

    @property
    def watch_count(self) -> int:
        """Number of active watchers."""
        with self._lock:
            return len(self._pollers)
