"""Removal of unwanted files from a captured FileMap."""

from __future__ import annotations

from collections.abc import Iterable

from .diagnostics import DiagnosticKind, DiagnosticSink
from .models import FileMap


def remove_files(
    files: FileMap,
    paths: Iterable[str] | None,
    sink: DiagnosticSink | None = None,
) -> FileMap:
    """Delete each of *paths* from *files* by exact key match.

    The map is modified in place and returned. A path that is not present is
    reported as a ``MISSING_REMOVAL_TARGET`` diagnostic and skipped. An empty
    or ``None`` list leaves the map untouched.
    """
    if not paths:
        return files

    for path in paths:
        if path in files:
            del files[path]
            if sink is not None:
                sink.success(f"Removed file: {path}")
        elif sink is not None:
            sink.warn(
                DiagnosticKind.MISSING_REMOVAL_TARGET,
                f"File not found for removal: {path}",
                path=path,
            )

    return files
