"""Shared utility functions for react-scaffold.

Provides the operator console, Rich-based status helpers, JSON I/O and
duration formatting used by the scaffolder and its CLI.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Platform helpers
# ---------------------------------------------------------------------------


def platform_binary(name: str) -> str:
    """Return the platform-specific name of an npm-style launcher.

    npm and npx ship as ``.cmd`` shims on Windows, which
    ``create_subprocess_exec`` will not resolve without the suffix.
    """
    if sys.platform == "win32" and not name.lower().endswith(".cmd"):
        return f"{name}.cmd"
    return name


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file that must contain an object.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> Path:
    """Save data as pretty-printed JSON with a trailing newline.

    Parent directories are created automatically.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(
        json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
    )
    return file_path


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a scaffold step or run duration.

    Sub-minute durations keep one decimal (``"42.3s"``); longer ones are
    shown as whole minutes and seconds (``"3m 07s"``).
    """
    seconds = max(seconds, 0.0)
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs:02d}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------

_STATUS_STYLES: dict[str, tuple[str, str]] = {
    "success": ("green", "+"),
    "warning": ("yellow", "!"),
    "error": ("red", "x"),
}


def _print_status(status: str, message: str) -> None:
    colour, marker = _STATUS_STYLES[status]
    console.print(f"[bold {colour}]{marker} {escape(message)}[/bold {colour}]")


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print a scaffold result as a two-column table."""
    table = Table(title=title, title_justify="left", show_header=False, box=None)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")
    for key, value in data.items():
        table.add_row(key, escape(str(value)))
    console.print(table)


def print_success(message: str) -> None:
    _print_status("success", message)


def print_error(message: str) -> None:
    _print_status("error", message)


def print_warning(message: str) -> None:
    _print_status("warning", message)
