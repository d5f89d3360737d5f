# topmark:header:start
#
#   project      : Stencil
#   file         : errors.py
#   file_relpath : src/stencil/cli/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exceptions for the Stencil CLI.

Usage:
    Raise these exceptions in CLI commands to signal errors with standardized
    messages and exit codes. Library errors are translated with
    `cli_error_for`, so every command maps failures the same way.

Styling:
    Exceptions prefer the project console if available (see `show()`); if no
    console is present in the Click context, they fall back to Click's default
    styling.
"""

from __future__ import annotations

from typing import IO, Any

import click

from stencil.cli.exit_codes import ExitCode
from stencil.core.errors import (
    CircularIncludeError,
    ConfigurationError,
    IncludeResolutionError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)


class StencilCliError(click.ClickException):
    """Base class for all Stencil CLI errors."""

    exit_code = ExitCode.FAILURE

    def format_message(self) -> str:
        """Return the plain error message text (colorized later in `show()`)."""
        return str(getattr(self, "message", ""))

    def show(self, file: IO[Any] | None = None) -> None:
        """Display the error using the project console if available.

        Falls back to Click's default error display when no console is present.
        """
        ctx: click.Context | None = click.get_current_context(silent=True)
        if ctx is not None and isinstance(ctx.obj, dict):
            console = ctx.obj.get("console")
            if console is not None:
                console.error(self.format_message())
                return
        super().show(file)


class StencilUsageError(StencilCliError):
    """Error for command-line invocation errors (invalid flags/args)."""

    exit_code = ExitCode.USAGE_ERROR


class StencilTemplateError(StencilCliError):
    """Error for malformed templates and data files."""

    exit_code = ExitCode.TEMPLATE_ERROR


class StencilRenderError(StencilCliError):
    """Error raised by embedded code while rendering."""

    exit_code = ExitCode.RENDER_ERROR


class StencilConfigError(StencilCliError):
    """Error for configuration errors (missing/invalid/malformed config)."""

    exit_code = ExitCode.CONFIG_ERROR


class StencilFileNotFoundError(StencilCliError):
    """Error when a template, include or data file does not exist."""

    exit_code = ExitCode.FILE_NOT_FOUND


class StencilPermissionDeniedError(StencilCliError):
    """Error for insufficient permissions (read/write)."""

    exit_code = ExitCode.PERMISSION_DENIED


class StencilIOError(StencilCliError):
    """Error for I/O errors reading/writing files."""

    exit_code = ExitCode.IO_ERROR


class StencilUnexpectedError(StencilCliError):
    """Error for unhandled/unknown errors (last-resort)."""

    exit_code = ExitCode.UNEXPECTED_ERROR


def cli_error_for(exc: Exception) -> StencilCliError:
    """Translate a library or OS failure into the matching CLI error.

    Args:
        exc (Exception): The failure raised while compiling or rendering.

    Returns:
        StencilCliError: An error carrying the exit code for ``exc``.
    """
    message: str = str(exc)
    match exc:
        case TemplateSyntaxError() | CircularIncludeError() | UnicodeDecodeError():
            return StencilTemplateError(message)
        case ConfigurationError():
            return StencilConfigError(message)
        case IncludeResolutionError():
            return StencilFileNotFoundError(message)
        case TemplateRuntimeError():
            return StencilRenderError(message)
        case FileNotFoundError():
            return StencilFileNotFoundError(message)
        case PermissionError():
            return StencilPermissionDeniedError(message)
        case OSError():
            return StencilIOError(message)
        case _:
            return StencilRenderError(f"{type(exc).__name__}: {message}")
