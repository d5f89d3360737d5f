# topmark:header:start
#
#   project      : Stencil
#   file         : constants.py
#   file_relpath : src/stencil/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil Constants."""

from __future__ import annotations

from importlib.metadata import version as get_version

STENCIL_VERSION: str = get_version("stencil-templates")

DEFAULT_DELIMITER: str = "%"
DEFAULT_TEMPLATE_EXTENSION: str = ".stencil"

# Name under which the unmodified data mapping is exposed to embedded code.
DEFAULT_LOCALS_NAME: str = "locals"

# File label used by diagnostics when a template has no file identifier.
DEFAULT_SOURCE_LABEL: str = "stencil"

# Web framework form of per-render options: data["settings"]["view options"].
VIEW_SETTINGS_KEY: str = "settings"
VIEW_OPTIONS_KEY: str = "view options"

# Call-shaped marker splitting a statement into main and deferred parts.
DEFAULT_DEFERRED_MARKER: str = r"(?<![\w.])done\([^)]*\);?"

DEFAULT_TOML_CONFIG_NAME: str = "stencil.toml"
PYPROJECT_TOML_NAME: str = "pyproject.toml"
PYPROJECT_TOOL_TABLE: str = "stencil"

BOM: str = "\ufeff"
