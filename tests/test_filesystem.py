# topmark:header:start
#
#   project      : Stencil
#   file         : test_filesystem.py
#   file_relpath : tests/test_filesystem.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the local file-system collaborator."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from stencil.core.errors import UnwatchableError
from stencil.filesystem import LocalFileSystem, WatchHandle
from tests.conftest import mark_integration


def test_read_file(tmp_path: Path) -> None:
    """Files are read as bytes."""
    path = tmp_path / "a.stencil"
    path.write_bytes(b"\xef\xbb\xbfhi")
    assert LocalFileSystem().read_file(str(path)) == b"\xef\xbb\xbfhi"


def test_read_missing_file(tmp_path: Path) -> None:
    """Reading a missing file raises `FileNotFoundError`."""
    with pytest.raises(FileNotFoundError):
        LocalFileSystem().read_file(str(tmp_path / "absent.stencil"))


def test_watch_missing_path_is_unwatchable(tmp_path: Path) -> None:
    """A path that does not exist cannot be watched."""
    fs = LocalFileSystem()
    with pytest.raises(UnwatchableError):
        fs.watch(str(tmp_path / "absent.stencil"), lambda _path: None)
    assert fs.watch_count == 0


def test_unwatch_stops_watcher(tmp_path: Path) -> None:
    """Unwatching removes the watcher; unknown handles are ignored."""
    path = tmp_path / "a.stencil"
    path.write_text("a", encoding="utf-8")
    fs = LocalFileSystem(interval=0.01)
    handle = fs.watch(str(path), lambda _path: None)
    assert fs.watch_count == 1
    fs.unwatch(handle)
    fs.unwatch(handle)
    assert fs.watch_count == 0


@mark_integration
def test_change_is_reported(tmp_path: Path) -> None:
    """Modifying a watched file calls the callback with the watch handle."""
    path = tmp_path / "a.stencil"
    path.write_text("a", encoding="utf-8")
    fs = LocalFileSystem(interval=0.01)
    seen: list[str] = []
    changed = threading.Event()

    def on_change(watch: WatchHandle) -> None:
        seen.append(watch.path)
        changed.set()

    handle = fs.watch(str(path), on_change)
    try:
        path.write_text("a longer body", encoding="utf-8")
        assert changed.wait(5.0)
    finally:
        fs.unwatch(handle)
    assert seen[0] == str(path)
