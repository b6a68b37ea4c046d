"""Merging module dependencies into a generated ``package.json``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .config import DependencyGroups
from .diagnostics import DiagnosticKind, DiagnosticSink
from .errors import ScaffoldError


class ManifestParseError(ScaffoldError):
    """Raised when an existing manifest is not a valid JSON object."""

    def __init__(self, message: str, path: str | Path = "") -> None:
        self.path = str(path)
        super().__init__(message)


def _merge_group(
    manifest: dict[str, Any],
    key: str,
    incoming: dict[str, str] | None,
    manifest_path: Path,
) -> None:
    if incoming is None:
        return
    existing = manifest.get(key)
    if existing is None:
        existing = {}
    elif not isinstance(existing, dict):
        raise ManifestParseError(
            f"'{key}' in {manifest_path} is {type(existing).__name__}, expected an object",
            path=manifest_path,
        )
    manifest[key] = {**existing, **incoming}


def merge_dependencies(
    manifest_path: str | Path,
    groups: DependencyGroups | dict[str, Any] | None,
    sink: DiagnosticSink | None = None,
) -> bool:
    """Merge ``groups.npm`` dependency groups into the manifest on disk.

    ``npm.dependencies`` is merged into the manifest's top-level
    ``dependencies`` and ``npm.devDependencies`` into ``devDependencies``.
    Incoming keys win; keys the module does not mention are preserved. The
    file is rewritten with 2-space indentation and a trailing newline.

    Args:
        manifest_path: Path to the ``package.json`` to update.
        groups: The module's dependency groups.
        sink: Receives a ``MISSING_MANIFEST`` diagnostic if the file is absent.

    Returns:
        ``True`` if the manifest was rewritten, ``False`` if there was nothing
        to merge or no manifest to merge into.

    Raises:
        ManifestParseError: If the manifest is not a JSON object, even when
            there is nothing to merge. Nothing is written in that case.
    """
    path = Path(manifest_path)

    if groups is not None and not isinstance(groups, DependencyGroups):
        groups = DependencyGroups.model_validate(groups)

    if not path.is_file():
        if sink is not None:
            sink.warn(
                DiagnosticKind.MISSING_MANIFEST,
                f"Manifest not found, skipping dependency merge: {path}",
                path=str(path),
            )
        return False

    try:
        manifest = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestParseError(f"Invalid JSON in {path}: {exc}", path=path) from exc

    if not isinstance(manifest, dict):
        raise ManifestParseError(
            f"Expected a JSON object in {path}, got {type(manifest).__name__}",
            path=path,
        )

    if groups is None or groups.is_empty:
        return False

    _merge_group(manifest, "dependencies", groups.npm.dependencies, path)
    _merge_group(manifest, "devDependencies", groups.npm.dev_dependencies, path)

    path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    if sink is not None:
        added = len(groups.npm.dependencies or {}) + len(groups.npm.dev_dependencies or {})
        sink.success(f"Merged {added} dependencies into {path.name}")
    return True
