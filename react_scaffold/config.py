"""react-scaffold configuration.

Two families of typed models live here:

* ``ScaffoldSettings``: how this tool runs (binaries, packages, timeouts,
  fast mode). Built once, usually from the environment.
* The input models (``ModuleConfig``, ``ScaffoldContext`` and children):
  the read-only module metadata and project context supplied by the calling
  orchestrator. They accept the camelCase keys of the JSON metadata as well
  as snake_case field names, and are validated once at the scaffolder
  boundary.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils import platform_binary

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})

TYPESCRIPT_TEMPLATE = "react-ts"
JAVASCRIPT_TEMPLATE = "react"


def _env_flag(name: str, default: bool = False) -> bool:
    """Interpret an environment variable as a boolean flag."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY_VALUES


# ---------------------------------------------------------------------------
# Tool settings
# ---------------------------------------------------------------------------


class ScaffoldSettings(BaseModel):
    """Tuning knobs for a scaffold run.

    Instances are typically created once by the CLI (``from_env``) or by the
    caller and then handed to ``ReactScaffolder``.
    """

    fast_mode: bool = Field(
        default=False,
        description="Skip npm install and UI library initialisation",
    )
    npm_binary: str = Field(default_factory=lambda: platform_binary("npm"))
    npx_binary: str = Field(default_factory=lambda: platform_binary("npx"))
    create_package: str = Field(
        default="vite@latest", description="Package passed to `npm create`"
    )
    ui_init_package: str = Field(
        default="shadcn@latest", description="Package whose `init` sets up the UI library"
    )
    ui_library_enabled: bool = Field(default=True)
    command_timeout: Optional[float] = Field(
        default=600.0, ge=10, description="Per-command timeout in seconds (None disables)"
    )
    snapshot_exclude: list[str] = Field(
        default_factory=lambda: ["node_modules"],
        description="Directory names never captured by the snapshot",
    )
    workspace_root: Optional[Path] = Field(
        default=None, description="Parent for temporary workspaces (system temp if unset)"
    )
    show_progress: bool = Field(default=True)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the settings to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ScaffoldSettings":
        """Load previously-saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScaffoldSettings":
        """Build ``ScaffoldSettings`` from environment variables.

        Recognised variables (all optional):
            SCAFFOLD_FAST_MODE, SCAFFOLD_NPM_BINARY, SCAFFOLD_NPX_BINARY,
            SCAFFOLD_CREATE_PACKAGE, SCAFFOLD_UI_INIT_PACKAGE,
            SCAFFOLD_UI_LIBRARY, SCAFFOLD_COMMAND_TIMEOUT,
            SCAFFOLD_SNAPSHOT_EXCLUDE, SCAFFOLD_WORKSPACE_ROOT.

        ``SCAFFOLD_COMMAND_TIMEOUT=0`` disables the timeout.
        """
        kwargs: dict[str, Any] = {
            "fast_mode": _env_flag("SCAFFOLD_FAST_MODE"),
            "ui_library_enabled": _env_flag("SCAFFOLD_UI_LIBRARY", default=True),
        }
        if os.environ.get("SCAFFOLD_NPM_BINARY"):
            kwargs["npm_binary"] = os.environ["SCAFFOLD_NPM_BINARY"]
        if os.environ.get("SCAFFOLD_NPX_BINARY"):
            kwargs["npx_binary"] = os.environ["SCAFFOLD_NPX_BINARY"]
        if os.environ.get("SCAFFOLD_CREATE_PACKAGE"):
            kwargs["create_package"] = os.environ["SCAFFOLD_CREATE_PACKAGE"]
        if os.environ.get("SCAFFOLD_UI_INIT_PACKAGE"):
            kwargs["ui_init_package"] = os.environ["SCAFFOLD_UI_INIT_PACKAGE"]
        if os.environ.get("SCAFFOLD_COMMAND_TIMEOUT"):
            timeout = float(os.environ["SCAFFOLD_COMMAND_TIMEOUT"])
            kwargs["command_timeout"] = timeout if timeout > 0 else None
        if "SCAFFOLD_SNAPSHOT_EXCLUDE" in os.environ:
            raw = os.environ["SCAFFOLD_SNAPSHOT_EXCLUDE"]
            kwargs["snapshot_exclude"] = [p.strip() for p in raw.split(",") if p.strip()]
        if os.environ.get("SCAFFOLD_WORKSPACE_ROOT"):
            kwargs["workspace_root"] = Path(os.environ["SCAFFOLD_WORKSPACE_ROOT"])

        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Module configuration (read-only input)
# ---------------------------------------------------------------------------


class _InputModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class NpmDependencies(_InputModel):
    """The ``npm`` dependency group of a module."""

    dependencies: Optional[dict[str, str]] = None
    dev_dependencies: Optional[dict[str, str]] = Field(default=None, alias="devDependencies")


class DependencyGroups(_InputModel):
    """Dependencies a module adds to the generated project."""

    npm: Optional[NpmDependencies] = None

    @property
    def is_empty(self) -> bool:
        return self.npm is None or (
            self.npm.dependencies is None and self.npm.dev_dependencies is None
        )


class BaseTemplate(_InputModel):
    """Base template block; ``config`` is free-form generator options.

    Recognised keys in ``config``: ``template`` (overrides the Vite template
    selected from the TypeScript flag) and ``createPackage`` (overrides the
    package passed to ``npm create``).
    """

    config: dict[str, Any] = Field(default_factory=dict)


class FilesConfig(_InputModel):
    remove: list[str] = Field(default_factory=list)


class GenerationConfig(_InputModel):
    base_template: Optional[BaseTemplate] = Field(default=None, alias="baseTemplate")
    files: Optional[FilesConfig] = None


class ModuleConfig(_InputModel):
    """Module metadata driving one scaffold run."""

    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    dependencies: Optional[DependencyGroups] = None

    @property
    def template_config(self) -> dict[str, Any]:
        base = self.generation.base_template
        return dict(base.config) if base else {}

    @property
    def files_to_remove(self) -> list[str]:
        files = self.generation.files
        return list(files.remove) if files else []


# ---------------------------------------------------------------------------
# Scaffold context (read-only input)
# ---------------------------------------------------------------------------


class FieldValues(_InputModel):
    """User-chosen options of the module instance.

    ``use_typescript`` defaults to ``True`` unless explicitly ``False``;
    an explicit ``null`` also means ``True``.
    """

    use_typescript: bool = Field(default=True, alias="useTypeScript")
    react_version: Optional[str] = Field(default=None, alias="reactVersion")
    build_tool: Optional[str] = Field(default=None, alias="buildTool")

    @field_validator("use_typescript", mode="before")
    @classmethod
    def _null_means_typescript(cls, value: Any) -> Any:
        return True if value is None else value

    @property
    def template(self) -> str:
        return TYPESCRIPT_TEMPLATE if self.use_typescript else JAVASCRIPT_TEMPLATE


class ProjectInfo(_InputModel):
    name: str


class ModuleInstance(_InputModel):
    field_values: FieldValues = Field(default_factory=FieldValues, alias="fieldValues")

    @field_validator("field_values", mode="before")
    @classmethod
    def _null_means_defaults(cls, value: Any) -> Any:
        return {} if value is None else value


class ScaffoldContext(_InputModel):
    """Project and module instance the scaffold run is for."""

    project: ProjectInfo
    module: ModuleInstance = Field(default_factory=ModuleInstance)
