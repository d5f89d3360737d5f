# topmark:header:start
#
#   project      : Stencil
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pytest configuration for the Stencil test suite.

This file sets up global fixtures and customizes the logging configuration for
test runs, ensuring consistent and verbose logging output during testing.

Notes:
    Tests should respect the immutable/mutable options split:

    - Build options using `stencil.config.MutableOptions` (mutable), then
      `freeze()` into `stencil.config.Options` for engine calls.
    - Do **not** mutate frozen `Options`. If you need to tweak them, call
      `Options.thaw()`, edit the returned `MutableOptions`, then `freeze()`
      again.

    Engine tests use `MemoryFileSystem`, an in-memory `FileSystem` whose
    watches are triggered explicitly with `MemoryFileSystem.touch`.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import pytest

from stencil.config import MutableOptions, Options
from stencil.config import logging as stencil_logging
from stencil.core.errors import UnwatchableError
from stencil.engine import Engine
from stencil.filesystem import ChangeCallback, WatchHandle

F = TypeVar("F", bound=Callable[..., object])

# This defines the type for the decorator function itself:
# It takes a Callable (F) and returns the same Callable (F).
DecoratorType = Callable[[F], F]

FIXTURES_DIR: Path = Path(__file__).parent / "fixtures"


def as_typed_mark(mark: Any) -> DecoratorType[Any]:
    """Wrap a pytest mark so static type checkers preserve the function type.

    Args:
        mark (Any): A pytest mark decorator such as `pytest.mark.integration`.

    Returns:
        DecoratorType[Any]: A decorator that preserves the wrapped function's type.
    """

    def _decorator(func: F) -> F:
        return cast("F", mark(func))

    return _decorator


mark_integration: DecoratorType[Any] = as_typed_mark(pytest.mark.integration)
mark_cli: DecoratorType[Any] = as_typed_mark(pytest.mark.cli)


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`."""
    return as_typed_mark(pytest.hookimpl(*args, **kwargs))


class MemoryFileSystem:
    """In-memory `FileSystem` for engine tests.

    Paths are normalized with `Path.resolve` so templates can be registered
    with relative or absolute paths.

    Attributes:
        files (dict[str, bytes]): File contents keyed by absolute path.
        reads (list[str]): Paths read, in order.
        unwatchable (set[str]): Paths whose watch registration fails.
    """

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.reads: list[str] = []
        self.unwatchable: set[str] = set()
        self.watches: dict[WatchHandle, ChangeCallback] = {}

    @staticmethod
    def key(path: str | Path) -> str:
        """Return the absolute path used as storage key."""
        return str(Path(path).resolve())

    def add(self, path: str | Path, text: str, *, bom: bool = False) -> str:
        """Store a UTF-8 template (optionally with a BOM) and return its key."""
        key: str = self.key(path)
        data: bytes = text.encode("utf-8")
        self.files[key] = (b"\xef\xbb\xbf" + data) if bom else data
        return key

    def touch(self, path: str | Path, text: str | None = None) -> None:
        """Optionally rewrite ``path`` and notify every watcher of it."""
        key: str = self.key(path)
        if text is not None:
            self.files[key] = text.encode("utf-8")
        for handle, callback in list(self.watches.items()):
            if handle.path == key:
                callback(handle)

    def read_file(self, path: str) -> bytes:
        key: str = self.key(path)
        self.reads.append(key)
        try:
            return self.files[key]
        except KeyError:
            raise FileNotFoundError(2, "No such file", path) from None

    def watch(self, path: str, on_change: ChangeCallback) -> WatchHandle:
        key: str = self.key(path)
        if key in self.unwatchable:
            raise UnwatchableError(f"Cannot watch {key}")
        handle = WatchHandle(key)
        self.watches[handle] = on_change
        return handle

    def unwatch(self, handle: WatchHandle) -> None:
        self.watches.pop(handle, None)

    def watched_paths(self) -> list[str]:
        """Return the watched paths (one entry per active watch)."""
        return [handle.path for handle in self.watches]


@pytest.fixture(autouse=True)
def silence_stencil_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure Stencil's runtime log level is not forced via env during tests.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest monkeypatch fixture used to manipulate
            environment variables.
    """
    monkeypatch.delenv(stencil_logging.LOG_LEVEL_ENV, raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pylint: disable=unused-argument
    """Set the logging level to TRACE so detailed output is captured during tests.

    Args:
        config (pytest.Config): The pytest configuration object.
    """
    stencil_logging.setup_logging(level=stencil_logging.TRACE_LEVEL)


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """Return an empty in-memory file system."""
    return MemoryFileSystem()


@pytest.fixture
def engine(memory_fs: MemoryFileSystem) -> Engine:
    """Return an engine reading templates from ``memory_fs``."""
    return Engine(filesystem=memory_fs)


@pytest.fixture
def isolation(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run a test in an isolated temporary working directory.

    Returns:
        Path: The temporary project root (also the current working directory).
    """
    cwd: Path = tmp_path / "proj"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    return cwd


def make_options(**overrides: Any) -> Options:
    """Return frozen `Options` built from defaults and overrides.

    Args:
        **overrides (Any): Option values (snake_case or camelCase keys).

    Returns:
        Options: An immutable options snapshot for use in tests.
    """
    return MutableOptions.from_mapping(overrides).freeze()
