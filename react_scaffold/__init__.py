"""react-scaffold -- Vite/React project scaffolding for module orchestrators.

Quick usage::

    from react_scaffold import scaffold

    files = await scaffold(
        {"generation": {"files": {"remove": ["src/App.css"]}}},
        {"project": {"name": "shop"}, "module": {"fieldValues": {"useTypeScript": True}}},
    )
    files["package.json"].content
"""

from .config import (
    DependencyGroups,
    ModuleConfig,
    ScaffoldContext,
    ScaffoldSettings,
)
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink
from .errors import ScaffoldError
from .manifest import ManifestParseError, merge_dependencies
from .models import (
    FileEncoding,
    FileEntry,
    FileMap,
    ScaffoldResult,
    UiLibraryStatus,
    file_map_from_dict,
    file_map_to_dict,
    write_file_map,
)
from .remover import remove_files
from .runner import (
    CommandError,
    CommandExitError,
    CommandLaunchError,
    CommandResult,
    CommandRunner,
    CommandTimeoutError,
)
from .scaffolder import ReactScaffolder, scaffold
from .snapshot import BINARY_EXTENSIONS, snapshot_directory

__all__ = [
    # Orchestration
    "ReactScaffolder",
    "ScaffoldResult",
    "scaffold",
    # Configuration
    "ScaffoldSettings",
    "ModuleConfig",
    "ScaffoldContext",
    "DependencyGroups",
    # File maps
    "FileMap",
    "FileEntry",
    "FileEncoding",
    "file_map_to_dict",
    "file_map_from_dict",
    "write_file_map",
    "snapshot_directory",
    "BINARY_EXTENSIONS",
    "remove_files",
    "merge_dependencies",
    # Commands
    "CommandRunner",
    "CommandResult",
    "CommandError",
    "CommandLaunchError",
    "CommandExitError",
    "CommandTimeoutError",
    # Diagnostics & errors
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticSink",
    "UiLibraryStatus",
    "ScaffoldError",
    "ManifestParseError",
]
