"""Data model for captured project trees.

A *FileMap* is a plain ``dict`` mapping a ``/``-separated path, relative to
the captured root, to a ``FileEntry``. Directories are never entries; they
only exist implicitly as path prefixes.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .diagnostics import Diagnostic


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class FileEncoding(str, Enum):
    """How a ``FileEntry``'s content is encoded."""
    TEXT = "text"
    BINARY = "binary"


class UiLibraryStatus(str, Enum):
    """Outcome of the best-effort UI library initialisation step."""
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED_NON_FATAL = "failed_non_fatal"


# ---------------------------------------------------------------------------
# File entries
# ---------------------------------------------------------------------------

class FileEntry(BaseModel):
    """Captured content of one file.

    ``TEXT`` content is the file decoded as UTF-8; ``BINARY`` content is the
    base64 encoding of the raw bytes. On the wire the encoding is published
    under the key ``type``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    encoding: FileEncoding = Field(alias="type")
    content: str

    @classmethod
    def text(cls, content: str) -> "FileEntry":
        return cls(encoding=FileEncoding.TEXT, content=content)

    @classmethod
    def binary(cls, data: bytes) -> "FileEntry":
        return cls(
            encoding=FileEncoding.BINARY,
            content=base64.b64encode(data).decode("ascii"),
        )

    @property
    def is_binary(self) -> bool:
        return self.encoding is FileEncoding.BINARY

    def to_bytes(self) -> bytes:
        """Return the raw bytes this entry represents."""
        if self.is_binary:
            return base64.b64decode(self.content)
        return self.content.encode("utf-8")


FileMap = dict[str, FileEntry]


def file_map_to_dict(files: FileMap) -> dict[str, dict[str, str]]:
    """Serialise a FileMap to ``{path: {"type": ..., "content": ...}}``."""
    return {
        path: entry.model_dump(mode="json", by_alias=True)
        for path, entry in files.items()
    }


def file_map_from_dict(data: dict[str, Any]) -> FileMap:
    """Inverse of ``file_map_to_dict``."""
    return {path: FileEntry.model_validate(raw) for path, raw in data.items()}


def write_file_map(files: FileMap, dest: str | Path) -> list[Path]:
    """Materialise a FileMap under *dest*.

    Binary entries are base64-decoded; text entries are written as UTF-8
    without newline translation.

    Returns:
        The paths written, in map iteration order.

    Raises:
        ValueError: If a key is absolute or resolves outside *dest*.
    """
    root = Path(dest).resolve()
    written: list[Path] = []
    for rel_path, entry in files.items():
        target = (root / rel_path).resolve()
        if Path(rel_path).is_absolute() or not target.is_relative_to(root):
            raise ValueError(f"Refusing to write outside {root}: {rel_path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(entry.to_bytes())
        written.append(target)
    return written


# ---------------------------------------------------------------------------
# Run result
# ---------------------------------------------------------------------------

@dataclass
class ScaffoldResult:
    """Structured result of one scaffold run."""

    files: FileMap
    template: str
    ui_library: UiLibraryStatus = UiLibraryStatus.SKIPPED
    diagnostics: list[Diagnostic] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def binary_count(self) -> int:
        return sum(1 for entry in self.files.values() if entry.is_binary)

    def summary(self) -> str:
        """Return a human-readable summary of the result."""
        lines = [
            f"Template: {self.template}",
            f"Files: {len(self.files)} ({self.binary_count} binary)",
            f"UI library: {self.ui_library.value}",
            f"Duration: {self.duration_seconds:.1f}s",
        ]
        if self.diagnostics:
            lines.append(f"Diagnostics: {len(self.diagnostics)}")
            for diagnostic in self.diagnostics[:5]:
                lines.append(f"  - {diagnostic}")
        return "\n".join(lines)
