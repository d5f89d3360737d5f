# topmark:header:start
#
#   project      : Stencil
#   file         : engine.py
#   file_relpath : src/stencil/engine.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Composition root of the template engine.

An `Engine` owns everything that would otherwise be process-wide state: the
default options (including the delimiter), the compiled-artifact cache, the
file-system collaborator and the evaluator. Independent engines never share
state; `stencil.api` keeps one lazily created default engine for the
module-level convenience functions.

Typical use::

    engine = Engine()
    engine.render("<p><%= name %></p>", {"name": "geddy"})
    page = engine.compile_file("views/page.stencil", cache=True)
    page({"user": user})
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from stencil.cache import TemplateCache, cache_key
from stencil.compiler.includes import IncludeResolver, decode_template, resolve_include_path
from stencil.compiler.pipeline import compile_program
from stencil.config.logging import get_logger
from stencil.config.model import MutableOptions, Options, option_keys_in
from stencil.core.errors import ConfigurationError
from stencil.filesystem import LocalFileSystem
from stencil.runtime.evaluator import PythonEvaluator
from stencil.runtime.executor import ProgramExecutor

if TYPE_CHECKING:
    from stencil.compiler.instructions import Program
    from stencil.config.logging import StencilLogger
    from stencil.filesystem import FileSystem
    from stencil.runtime.evaluator import Evaluator
    from stencil.runtime.executor import IncludeFunction

logger: StencilLogger = get_logger(__name__)

OptionsLike = Options | Mapping[str, Any] | None


class Template:
    """Compiled template bound to the engine and options that produced it.

    Calling the template renders it::

        template = engine.compile("Hello <%= name %>")
        template({"name": "world"})

    Attributes:
        program (Program): The compiled program.
        options (Options): Options the program was compiled with.
    """

    def __init__(self, engine: Engine, program: Program, options: Options) -> None:
        self.engine: Engine = engine
        self.program: Program = program
        self.options: Options = options

    @property
    def dependencies(self) -> tuple[str, ...]:
        """Resolved paths of statically included templates."""
        return self.program.dependencies

    def __call__(self, data: Mapping[str, Any] | None = None) -> str:
        return self.engine.execute(self.program, data, self.options)

    def render(self, data: Mapping[str, Any] | None = None) -> str:
        """Render the template with ``data``."""
        return self(data)

    async def render_async(self, data: Mapping[str, Any] | None = None) -> str:
        """Render the template after yielding once to the event loop."""
        await asyncio.sleep(0)
        return self(data)

    def __repr__(self) -> str:
        return f"Template(filename={self.options.filename!r})"


class Engine:
    """Template engine: compile, cache and render templates.

    Attributes:
        defaults (Options): Options applied when a call does not override them.
        filesystem (FileSystem): Reads and watches template files.
        evaluator (Evaluator): Evaluates embedded code.
        cache (TemplateCache): Compiled programs keyed by absolute path.
    """

    def __init__(
        self,
        options: OptionsLike = None,
        *,
        filesystem: FileSystem | None = None,
        evaluator: Evaluator | None = None,
    ) -> None:
        if isinstance(options, Options):
            self.defaults: Options = options
        else:
            self.defaults = MutableOptions.from_mapping(options).freeze()
        self.filesystem: FileSystem = filesystem if filesystem is not None else LocalFileSystem()
        self.evaluator: Evaluator = evaluator if evaluator is not None else PythonEvaluator()
        self.cache: TemplateCache = TemplateCache(self.filesystem)

    # ------------------ options ------------------

    def resolve_options(self, options: OptionsLike = None, **overrides: Any) -> Options:
        """Merge ``options`` and keyword overrides over the engine defaults.

        Args:
            options (OptionsLike): Frozen options (used as the base instead of the
                defaults) or a mapping of option values.
            **overrides (Any): Option values taking precedence over ``options``.

        Returns:
            Options: The frozen, validated options.

        Raises:
            ConfigurationError: If the merged options are invalid.
        """
        if isinstance(options, Options):
            builder: MutableOptions = options.thaw()
        else:
            builder = self.defaults.thaw().merge_mapping(options)
        known: int = len(builder.diagnostics)
        builder.merge_mapping(overrides)
        for diagnostic in builder.diagnostics.items[known:]:
            logger.warning("%s", diagnostic.message)
        return builder.freeze()

    # ------------------ compilation ------------------

    def compile(self, text: str, options: OptionsLike = None, **overrides: Any) -> Template:
        """Compile template text.

        With ``cache`` set the program is looked up (and stored) under the
        absolute path of ``filename``; a cached program is returned as is.

        Raises:
            ConfigurationError: If ``cache`` is set without ``filename``.
            TemplateSyntaxError: If the template is malformed.
        """
        opts: Options = self.resolve_options(options, **overrides)
        program: Program = self._load(opts, lambda: text)
        return Template(self, program, opts)

    def compile_file(
        self, path: str | Path, options: OptionsLike = None, **overrides: Any
    ) -> Template:
        """Read and compile the template file at ``path``.

        The file is only read when no cached program exists for it.

        Raises:
            OSError: If the file cannot be read.
        """
        opts: Options = self.resolve_options(options, **overrides).with_filename(str(path))
        program: Program = self._load(opts, lambda: self.read_template(str(path)))
        return Template(self, program, opts)

    def read_template(self, path: str) -> str:
        """Read a template file through the file-system collaborator."""
        return decode_template(self.filesystem.read_file(path))

    def _load(
        self, opts: Options, read: Callable[[], str], resolver: IncludeResolver | None = None
    ) -> Program:
        key: str | None = None
        if opts.cache:
            if not opts.filename:
                raise ConfigurationError("cache option requires a filename")
            key = cache_key(opts.filename)
            cached: Program | None = self.cache.get(key)
            if cached is not None:
                return cached
        if resolver is None:
            resolver = IncludeResolver.for_template(self.filesystem, opts.filename)
        program: Program = compile_program(read(), opts, resolver)
        if key is not None:
            self.cache.set(key, program, watch=opts.watch_files)
        return program

    # ------------------ rendering ------------------

    def render(
        self,
        text: str,
        data: Mapping[str, Any] | None = None,
        options: OptionsLike = None,
        **overrides: Any,
    ) -> str:
        """Compile and render template text in one call."""
        return self.compile(text, options, **overrides)(data)

    async def render_async(
        self,
        text: str,
        data: Mapping[str, Any] | None = None,
        options: OptionsLike = None,
        **overrides: Any,
    ) -> str:
        """Like `render`, but completes only after yielding once to the event loop."""
        await asyncio.sleep(0)
        return self.render(text, data, options, **overrides)

    def render_file(
        self,
        path: str | Path,
        data: Mapping[str, Any] | None = None,
        options: OptionsLike = None,
        **overrides: Any,
    ) -> str:
        """Compile and render a template file.

        When neither ``options`` nor overrides are given, data keys that name
        options (``cache``, ``delimiter``, ...) are used as options.
        """
        if options is None and not overrides and data:
            options = option_keys_in(data)
        return self.compile_file(path, options, **overrides)(data)

    def execute(
        self,
        program: Program,
        data: Mapping[str, Any] | None,
        options: Options,
        resolver: IncludeResolver | None = None,
    ) -> str:
        """Run a compiled program with ``data``.

        Args:
            program (Program): Compiled program.
            data (Mapping[str, Any] | None): Data environment.
            options (Options): Options the program was compiled with.
            resolver (IncludeResolver | None): Include chain of the rendering template.

        Returns:
            str: The rendered text.
        """
        if resolver is None:
            resolver = IncludeResolver.for_template(self.filesystem, options.filename)
        executor = ProgramExecutor(
            self.evaluator, options.escape, compile_debug=options.compile_debug
        )
        scope_data: Mapping[str, Any] = data if data is not None else {}
        include: IncludeFunction = self._inline_include(scope_data, options, resolver)
        return executor.run(program, scope_data, include=include)

    def _inline_include(
        self, data: Mapping[str, Any], options: Options, resolver: IncludeResolver
    ) -> IncludeFunction:
        def include(path: str, extra: Mapping[str, Any] | None = None) -> str:
            full_path: str = resolve_include_path(path, options.filename)
            child: IncludeResolver = resolver.descend(full_path)
            child_options: Options = options.with_filename(full_path)
            logger.debug("Inline include %r -> %s", path, full_path)
            program: Program = self._load(
                child_options,
                lambda: child.read(path, full_path, options.filename),
                child,
            )
            merged: dict[str, Any] = dict(data)
            if extra:
                merged.update(extra)
            return self.execute(program, merged, child_options, child)

        return include

    def clear_cache(self) -> None:
        """Drop every cached program and cancel every file watch."""
        self.cache.invalidate_all()
