# topmark:header:start
#
#   project      : Stencil
#   file         : logging.py
#   file_relpath : src/stencil/config/logging.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stencil logging: a TRACE level, a colouring formatter and level resolution.

Library modules log through ``logger = get_logger(__name__)`` and never print.
Compile, cache and include events are logged at DEBUG or TRACE level.

Program listings produced for the ``debug`` option go to the dedicated
``stencil.debug`` logger (`DEBUG_CHANNEL`), so they can be enabled or
captured on their own.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Final, cast

from yachalk import chalk

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

TRACE_LEVEL: Final[int] = logging.DEBUG - 5

LOG_LEVEL_ENV: Final[str] = "STENCIL_LOG_LEVEL"

DEBUG_CHANNEL: Final[str] = "stencil.debug"

# Level names accepted by STENCIL_LOG_LEVEL and the CLI verbosity flags
LOG_LEVELS: Final[dict[str, int]] = {
    "TRACE": TRACE_LEVEL,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "NOTSET": logging.NOTSET,
}

LOG_FORMAT: Final[str] = "[%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT: Final[str] = "[%(levelname)s] [%(name)s:%(lineno)d] %(message)s"


class StencilLogger(logging.Logger):
    """Logger with a ``trace`` method for the TRACE level below DEBUG."""

    def trace(
        self,
        msg: object,
        *args: object,
        extra: Mapping[str, object] | None = None,
    ) -> None:
        """Log ``msg % args`` with severity TRACE.

        Args:
            msg (object): The message to be logged.
            *args (object): Arguments merged into ``msg``.
            extra (Mapping[str, object] | None): Extra attributes for the record.
        """
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, extra=extra, stacklevel=2)


logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.setLoggerClass(StencilLogger)


class ChalkFormatter(logging.Formatter):
    """Formatter colouring each record by severity with ``yachalk``."""

    # Ordered from most to least severe; the first threshold reached wins
    STYLES: Final[tuple[tuple[int, Callable[[str], str]], ...]] = (
        (logging.ERROR, chalk.red),
        (logging.WARNING, chalk.yellow),
        (logging.INFO, chalk.green),
        (logging.DEBUG, chalk.gray),
        (TRACE_LEVEL, chalk.blue),
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format ``record`` and colour it by its level."""
        message: str = super().format(record)
        for threshold, style in self.STYLES:
            if record.levelno >= threshold:
                return style(message)
        return message


def parse_log_level(value: str) -> int | None:
    """Return the level named by ``value`` (a name or a number), or None if unknown."""
    name: str = value.strip().upper()
    if name.isdigit():
        return int(name)
    return LOG_LEVELS.get(name)


def resolve_env_log_level() -> int | None:
    """Return the level set through ``STENCIL_LOG_LEVEL``, or None if unset or unknown."""
    value: str | None = os.environ.get(LOG_LEVEL_ENV)
    return parse_log_level(value) if value else None


def setup_logging(level: int | None = None) -> None:
    """Send log records of ``level`` and above to stderr, coloured.

    Without ``level`` the environment is consulted; the fallback is CRITICAL
    so a library user who never configures logging sees nothing. Handlers
    installed by an earlier call are replaced.
    """
    if level is None:
        level = resolve_env_log_level() or logging.CRITICAL

    root_logger: logging.Logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr keeps rendered output on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ChalkFormatter(LOG_FORMAT if level >= logging.INFO else DEBUG_LOG_FORMAT))
    root_logger.addHandler(handler)


def get_logger(name: str) -> StencilLogger:
    """Return the `StencilLogger` called ``name``."""
    return cast("StencilLogger", logging.getLogger(name))
