# topmark:header:start
#
#   project      : Stencil
#   file         : diagnostics.py
#   file_relpath : src/stencil/core/diagnostics.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Diagnostics support.

Structured, non-fatal messages collected while loading configuration. Fatal
conditions are raised as exceptions (see `stencil.core.errors`); diagnostics
record what was ignored or defaulted so callers can surface it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class DiagnosticLevel(Enum):
    """Severity levels for diagnostics, ordered by importance: ERROR > WARNING > INFO."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def label(self) -> str:
        """Return the capitalized level name used as message prefix."""
        return self.value.capitalize()


@dataclass(frozen=True)
class Diagnostic:
    """Structured diagnostic with a severity level and message."""

    level: DiagnosticLevel
    message: str

    def __str__(self) -> str:
        return f"{self.level.label}: {self.message}"


@dataclass
class DiagnosticLog:
    """Mutable collection of diagnostics."""

    items: list[Diagnostic] = field(default_factory=lambda: [])

    @classmethod
    def from_iterable(cls, diagnostics: Iterable[Diagnostic]) -> DiagnosticLog:
        """Create a DiagnosticLog from an iterable of diagnostics.

        Args:
            diagnostics: Existing diagnostics (e.g., from a frozen snapshot).

        Returns:
            A new DiagnosticLog containing the provided diagnostics.
        """
        return cls(items=list(diagnostics))

    def add_warning(self, message: str) -> None:
        """Add a ``warning`` diagnostic to the diagnostic log."""
        self.items.append(Diagnostic(DiagnosticLevel.WARNING, message))

    def has_warning(self) -> bool:
        """Return True if the DiagnosticLog contains warning diagnostics."""
        return any(d.level == DiagnosticLevel.WARNING for d in self.items)

    def __len__(self) -> int:
        return len(self.items)
