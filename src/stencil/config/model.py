# topmark:header:start
#
#   project      : Stencil
#   file         : model.py
#   file_relpath : src/stencil/config/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Compilation options model and merge policy.

This module defines:
    - `Options`: an immutable snapshot consumed by the compiler, the executor
      and the cache.
    - `MutableOptions`: a mutable builder used while layering defaults,
      configuration files, engine defaults and per-call overrides; it can be
      frozen into `Options` and thawed back for edits.

Scope:
    - *In scope*: option shapes, defaulting rules, merge policy
      (`MutableOptions.merge_mapping`) and freeze/thaw mechanics.
    - *Out of scope*: TOML parsing, which lives in `stencil.config.io`.

Immutability:
    - `Options` is ``frozen=True``; a `Program` compiled with a given snapshot
      can never observe a later change. Use `Options.thaw` → edit →
      `MutableOptions.freeze` for updates.

Validation:
    - Values from mappings are type-checked leniently: wrongly typed values
      are ignored and reported as warnings in the builder's `DiagnosticLog`.
    - `MutableOptions.freeze` enforces the hard invariants (single-character
      delimiter, compilable deferred marker, callable escape function) and
      raises `ConfigurationError` when they do not hold.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

from stencil.config.io import (
    extract_stencil_table,
    get_bool_value_checked,
    get_string_value_checked,
    load_toml_dict,
)
from stencil.config.keys import ALL_OPTION_KEYS, TOML_OPTION_KEYS, Opt, canonical_key
from stencil.config.logging import get_logger
from stencil.constants import (
    DEFAULT_DEFERRED_MARKER,
    DEFAULT_DELIMITER,
    VIEW_OPTIONS_KEY,
    VIEW_SETTINGS_KEY,
)
from stencil.core.diagnostics import Diagnostic, DiagnosticLog
from stencil.core.errors import ConfigurationError
from stencil.core.escaping import escape_xml

if TYPE_CHECKING:
    from stencil.config.io import TomlTable
    from stencil.config.logging import StencilLogger
    from stencil.core.escaping import EscapeFunction

logger: StencilLogger = get_logger(__name__)

_BOOL_KEYS: frozenset[str] = frozenset(
    {Opt.CACHE, Opt.WATCH_FILES, Opt.DEBUG, Opt.COMPILE_DEBUG, Opt.RM_WHITESPACE}
)


# ------------------ Immutable runtime options ------------------


@dataclass(frozen=True)
class Options:
    """Immutable compilation and rendering options.

    Attributes:
        delimiter (str): Single character parameterizing every tag marker (``%`` → ``<% %>``).
        filename (str | None): File identifier of the template; enables relative
            includes, cache keying and file names in diagnostics.
        cache (bool): Store compiled programs in the engine cache (requires ``filename``).
        watch_files (bool): Invalidate cached programs when their file changes.
        debug (bool): Write the generated program listing to the ``stencil.debug`` logger.
        compile_debug (bool): Record line markers so runtime errors are mapped back to
            template source lines.
        escape (EscapeFunction): Escaping capability used by ``<%= %>`` directives.
        rm_whitespace (bool): Strip carriage returns and leading/trailing blanks of every
            line before compiling.
        deferred_marker (str): Regular expression of the call-shaped marker that splits a
            statement into a main and a deferred part.
        config_files (tuple[str, ...]): Provenance: configuration files merged into these options.
        diagnostics (tuple[Diagnostic, ...]): Warnings collected while building the options.
    """

    delimiter: str = DEFAULT_DELIMITER
    filename: str | None = None
    cache: bool = False
    watch_files: bool = False
    debug: bool = False
    compile_debug: bool = True
    escape: EscapeFunction = escape_xml
    rm_whitespace: bool = False
    deferred_marker: str = DEFAULT_DEFERRED_MARKER
    config_files: tuple[str, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    def with_filename(self, filename: str | None) -> Options:
        """Return a copy of these options bound to another template file."""
        return replace(self, filename=filename)

    def to_toml_dict(self) -> TomlTable:
        """Convert the file-configurable options into a TOML-serializable dict.

        Runtime-only options (``filename``, ``escape``) are not exported.

        Returns:
            TomlTable: the TOML-serializable dict representing the options.
        """
        return {
            Opt.DELIMITER: self.delimiter,
            Opt.CACHE: self.cache,
            Opt.WATCH_FILES: self.watch_files,
            Opt.DEBUG: self.debug,
            Opt.COMPILE_DEBUG: self.compile_debug,
            Opt.RM_WHITESPACE: self.rm_whitespace,
            Opt.DEFERRED_MARKER: self.deferred_marker,
        }

    def thaw(self) -> MutableOptions:
        """Return a mutable copy of these frozen options.

        Returns:
            MutableOptions: A mutable builder initialized from this snapshot.
        """
        return MutableOptions(
            delimiter=self.delimiter,
            filename=self.filename,
            cache=self.cache,
            watch_files=self.watch_files,
            debug=self.debug,
            compile_debug=self.compile_debug,
            escape=self.escape,
            rm_whitespace=self.rm_whitespace,
            deferred_marker=self.deferred_marker,
            config_files=list(self.config_files),
            diagnostics=DiagnosticLog.from_iterable(self.diagnostics),
        )


# ------------------ Mutable builder ------------------


@dataclass
class MutableOptions:
    """Mutable options builder used while layering option sources.

    Typical flow::

        opts = MutableOptions.from_defaults()
        opts.merge_toml_file(Path("stencil.toml"))
        opts.merge_mapping({"delimiter": "?", "compileDebug": False})
        frozen = opts.freeze()
    """

    delimiter: str = DEFAULT_DELIMITER
    filename: str | None = None
    cache: bool = False
    watch_files: bool = False
    debug: bool = False
    compile_debug: bool = True
    escape: EscapeFunction = escape_xml
    rm_whitespace: bool = False
    deferred_marker: str = DEFAULT_DEFERRED_MARKER
    config_files: list[str] = field(default_factory=lambda: [])
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    @classmethod
    def from_defaults(cls) -> MutableOptions:
        """Return a builder holding Stencil's built-in defaults."""
        return cls()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> MutableOptions:
        """Return a builder with defaults overridden by ``mapping``.

        Args:
            mapping (Mapping[str, Any] | None): Option values keyed by option name
                (snake_case or camelCase).

        Returns:
            MutableOptions: The populated builder.
        """
        return cls.from_defaults().merge_mapping(mapping)

    def merge_mapping(self, mapping: Mapping[str, Any] | None) -> MutableOptions:
        """Overlay option values from a mapping onto this builder.

        Unknown keys and wrongly typed values are ignored and recorded as warnings.
        A ``None`` value leaves the current value unchanged, except for ``filename``
        where ``None`` explicitly unsets the file identifier.

        Args:
            mapping (Mapping[str, Any] | None): Option values keyed by option name.

        Returns:
            MutableOptions: ``self``, to allow chaining.
        """
        if not mapping:
            return self
        for raw_key, value in mapping.items():
            key: str = canonical_key(raw_key)
            if key not in ALL_OPTION_KEYS:
                self.diagnostics.add_warning(f"Unknown option ignored: {raw_key}")
                logger.debug("Ignoring unknown option %r", raw_key)
                continue
            if key == Opt.FILENAME:
                self.filename = None if value is None else str(value)
                continue
            if value is None:
                continue
            self._set_checked(key, value, where="options")
        return self

    def merge_toml_file(self, path: Path) -> MutableOptions:
        """Overlay options read from a TOML file onto this builder.

        Args:
            path (Path): ``stencil.toml`` or a ``pyproject.toml`` with a
                ``[tool.stencil]`` table.

        Returns:
            MutableOptions: ``self``, to allow chaining.
        """
        table: TomlTable | None = extract_stencil_table(path, load_toml_dict(path))
        self.config_files.append(str(path))
        if table is None:
            logger.debug("No Stencil table in %s", path)
            return self
        return self.merge_toml_table(table, where=str(path))

    def merge_toml_table(self, table: TomlTable, *, where: str) -> MutableOptions:
        """Overlay options from an already parsed TOML table.

        Args:
            table (TomlTable): The options table.
            where (str): Location label used in warnings.

        Returns:
            MutableOptions: ``self``, to allow chaining.
        """
        for key in table:
            if key not in TOML_OPTION_KEYS:
                self.diagnostics.add_warning(f"Unknown key in {where}: {key}")
        for key in sorted(TOML_OPTION_KEYS):
            if key in _BOOL_KEYS:
                flag: bool | None = get_bool_value_checked(
                    table, key, where=where, diagnostics=self.diagnostics
                )
                if flag is not None:
                    setattr(self, key, flag)
            else:
                text: str | None = get_string_value_checked(
                    table, key, where=where, diagnostics=self.diagnostics
                )
                if text is not None:
                    setattr(self, key, text)
        return self

    def _set_checked(self, key: str, value: Any, *, where: str) -> None:
        if key in _BOOL_KEYS:
            if isinstance(value, bool):
                setattr(self, key, value)
                return
            expected = "boolean"
        elif key == Opt.ESCAPE:
            if callable(value):
                self.escape = value
                return
            expected = "callable"
        elif isinstance(value, str):
            setattr(self, key, value)
            return
        else:
            expected = "string"
        self.diagnostics.add_warning(
            f"Expected {expected} in {where}.{key}, got {type(value).__name__}: {value!r}"
        )

    def freeze(self) -> Options:
        """Validate this builder and return an immutable `Options` snapshot.

        Returns:
            Options: The frozen options.

        Raises:
            ConfigurationError: If the delimiter is not exactly one character or the
                deferred marker is not a valid regular expression.
        """
        if len(self.delimiter) != 1:
            raise ConfigurationError(
                f"delimiter must be exactly one character, got {self.delimiter!r}"
            )
        try:
            re.compile(self.deferred_marker)
        except re.error as exc:
            raise ConfigurationError(
                f"deferred_marker is not a valid regular expression: {exc}"
            ) from exc
        return Options(
            delimiter=self.delimiter,
            filename=self.filename,
            cache=self.cache,
            watch_files=self.watch_files,
            debug=self.debug,
            compile_debug=self.compile_debug,
            escape=self.escape,
            rm_whitespace=self.rm_whitespace,
            deferred_marker=self.deferred_marker,
            config_files=tuple(self.config_files),
            diagnostics=tuple(self.diagnostics.items),
        )


def option_keys_in(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return the entries of ``data`` whose keys are recognized option names.

    Used by ``render_file`` to honour options passed inside the data mapping.
    When ``data["settings"]["view options"]`` is a mapping, options are taken
    from it instead of from the top level of ``data``.
    """
    source: Mapping[str, Any] = data
    settings: Any = data.get(VIEW_SETTINGS_KEY)
    if isinstance(settings, Mapping):
        view_options: Any = cast("Mapping[str, Any]", settings).get(VIEW_OPTIONS_KEY)
        if isinstance(view_options, Mapping):
            source = cast("Mapping[str, Any]", view_options)
    return {k: v for k, v in source.items() if canonical_key(k) in ALL_OPTION_KEYS}


def load_options_file(path: Path | None) -> Options:
    """Build options from defaults and an optional TOML configuration file."""
    builder: MutableOptions = MutableOptions.from_defaults()
    if path is not None:
        builder.merge_toml_file(path)
    return builder.freeze()
