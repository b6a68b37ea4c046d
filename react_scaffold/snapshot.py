"""Directory snapshotting.

Reads a generated project tree into a FileMap. Whether a file is captured as
text or as base64 is decided by its extension alone: only the image and font
extensions in ``BINARY_EXTENSIONS`` are treated as binary. Any other file,
including binary assets with unlisted extensions, is decoded as UTF-8 with
replacement characters, which corrupts such assets. Content is never sniffed.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from .diagnostics import DiagnosticKind, DiagnosticSink
from .models import FileEntry, FileMap

BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {"png", "jpg", "jpeg", "gif", "ico", "woff", "woff2", "ttf", "eot"}
)


def is_binary_path(name: str) -> bool:
    """Return ``True`` if *name* has an allow-listed binary extension.

    The comparison is case-insensitive and only looks at the final suffix.
    """
    _, dot, ext = name.rpartition(".")
    return bool(dot) and ext.lower() in BINARY_EXTENSIONS


def read_entry(path: str | Path) -> FileEntry:
    """Read one file into a ``FileEntry`` according to its extension.

    Raises:
        OSError: If the file cannot be read.
    """
    data = Path(path).read_bytes()
    if is_binary_path(Path(path).name):
        return FileEntry.binary(data)
    return FileEntry.text(data.decode("utf-8", errors="replace"))


def snapshot_directory(
    root: str | Path,
    sink: DiagnosticSink | None = None,
    exclude_dirs: Iterable[str] = (),
) -> FileMap:
    """Capture every regular file under *root*.

    Args:
        root: Directory to capture. If it does not exist the result is an
            empty map.
        sink: Receives an ``UNREADABLE_FILE`` diagnostic for each file that
            could not be read. Such files are left out of the map.
        exclude_dirs: Directory names pruned at any depth.

    Returns:
        A FileMap keyed by ``/``-separated paths relative to *root*.
    """
    root_path = Path(root)
    files: FileMap = {}
    if not root_path.is_dir():
        return files

    _walk(root_path, "", files, sink, frozenset(exclude_dirs))
    return files


def _walk(
    directory: Path,
    prefix: str,
    files: FileMap,
    sink: DiagnosticSink | None,
    exclude: frozenset[str],
) -> None:
    try:
        entries = list(os.scandir(directory))
    except OSError as exc:
        if sink is not None:
            sink.warn(
                DiagnosticKind.UNREADABLE_FILE,
                f"Could not list directory {prefix or '.'}: {exc}",
                path=prefix,
            )
        return

    for entry in entries:
        rel_path = f"{prefix}/{entry.name}" if prefix else entry.name

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False

        if is_dir:
            if entry.name not in exclude:
                _walk(Path(entry.path), rel_path, files, sink, exclude)
            continue

        try:
            if not entry.is_file():
                raise OSError("not a regular file")
            files[rel_path] = read_entry(entry.path)
        except OSError as exc:
            if sink is not None:
                sink.warn(
                    DiagnosticKind.UNREADABLE_FILE,
                    f"Could not read file {rel_path}: {exc}",
                    path=rel_path,
                )
