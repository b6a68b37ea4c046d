"""Structured diagnostics for non-fatal scaffold conditions.

Components never print warnings directly. They report them to a
``DiagnosticSink`` handed in by the caller, which records each event and
echoes it to the operator console. Tests create a silent sink and assert on
the recorded events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rich.console import Console
from rich.markup import escape

from .utils import console as default_console


class DiagnosticKind(str, Enum):
    """Non-fatal conditions a scaffold run can report."""

    MISSING_MANIFEST = "missing_manifest"
    UNREADABLE_FILE = "unreadable_file"
    MISSING_REMOVAL_TARGET = "missing_removal_target"
    UI_INIT_FAILED = "ui_init_failed"
    CLEANUP_FAILED = "cleanup_failed"


@dataclass
class Diagnostic:
    """A single recorded non-fatal event."""

    kind: DiagnosticKind
    message: str
    path: str = ""
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def __str__(self) -> str:
        if self.path:
            return f"{self.kind.value}: {self.message} ({self.path})"
        return f"{self.kind.value}: {self.message}"


class DiagnosticSink:
    """Collects diagnostics and mirrors them to a Rich console.

    Args:
        console: Console used for echoing. Defaults to the shared operator
            console.
        echo: When ``False`` nothing is printed; events are only recorded.
    """

    def __init__(self, console: Console | None = None, echo: bool = True) -> None:
        self.console = console or default_console
        self.echo = echo
        self.events: list[Diagnostic] = []

    def warn(self, kind: DiagnosticKind, message: str, path: str = "") -> Diagnostic:
        """Record a non-fatal condition and print it as a warning."""
        event = Diagnostic(kind=kind, message=message, path=path)
        self.events.append(event)
        if self.echo:
            self.console.print(f"  [yellow]![/yellow] {escape(message)}")
        return event

    def info(self, message: str) -> None:
        """Print a progress message. Info messages are not recorded."""
        if self.echo:
            self.console.print(f"  [dim]{escape(message)}[/dim]")

    def success(self, message: str) -> None:
        """Print a completed-step message. Not recorded."""
        if self.echo:
            self.console.print(f"  [green]+[/green] {escape(message)}")

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        """Return every recorded event of the given kind, in order."""
        return [event for event in self.events if event.kind == kind]
