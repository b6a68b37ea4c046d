"""React (Vite) scaffold orchestrator.

Runs one scaffold in a private temporary workspace:

1. GENERATE  -- ``npm create vite@latest project -- --template <t>``.
2. AUGMENT   -- merge the module's npm dependencies into ``package.json``.
3. PROVISION -- ``npm install`` then best-effort ``npx shadcn@latest init -d``
   (both skipped in fast mode).
4. CAPTURE   -- snapshot the generated project into a FileMap.
5. FILTER    -- drop the files the module lists for removal.
6. CLEANUP   -- delete the workspace, whatever happened above.

Usage::

    python -m react_scaffold meta.json --project-name shop --output ./frontend
    python -m react_scaffold meta.json --fast --json files.json
"""

from __future__ import annotations

import asyncio
import json
import shutil
import sys
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel

from .config import ModuleConfig, ScaffoldContext, ScaffoldSettings
from .diagnostics import DiagnosticKind, DiagnosticSink
from .errors import ScaffoldError
from .manifest import merge_dependencies
from .models import FileMap, ScaffoldResult, UiLibraryStatus, file_map_to_dict, write_file_map
from .remover import remove_files
from .runner import CommandError, CommandRunner
from .snapshot import snapshot_directory
from .utils import (
    console,
    format_duration,
    load_json,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    save_json,
)

PROJECT_DIR_NAME = "project"
MANIFEST_NAME = "package.json"
WORKSPACE_PREFIX = "react-scaffold-"


class ReactScaffolder:
    """Scaffolds a React project with Vite and returns its files.

    Attributes:
        settings: Tool settings (binaries, fast mode, timeouts).
        runner: Executes the external CLIs. Injected in tests.
    """

    def __init__(
        self,
        settings: ScaffoldSettings | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self.settings = settings or ScaffoldSettings.from_env()
        self.runner = runner or CommandRunner(
            timeout_seconds=self.settings.command_timeout,
            show_progress=self.settings.show_progress,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        module_config: ModuleConfig | dict[str, Any],
        context: ScaffoldContext | dict[str, Any],
        sink: DiagnosticSink | None = None,
    ) -> ScaffoldResult:
        """Run one scaffold and return the captured, filtered files.

        Args:
            module_config: Module metadata (``generation``, ``dependencies``).
            context: Project and module instance (``fieldValues``).
            sink: Receives non-fatal diagnostics. A fresh sink is used when
                omitted.

        Returns:
            A ``ScaffoldResult``; its ``files`` belong to the caller.

        Raises:
            pydantic.ValidationError: If the inputs are malformed. Raised
                before any workspace exists.
            CommandError: If ``npm create`` or ``npm install`` fails.
            ManifestParseError: If the generated ``package.json`` is invalid.
        """
        module = (
            module_config
            if isinstance(module_config, ModuleConfig)
            else ModuleConfig.model_validate(module_config)
        )
        ctx = context if isinstance(context, ScaffoldContext) else ScaffoldContext.model_validate(context)
        sink = sink if sink is not None else DiagnosticSink()

        template_config = module.template_config
        template = template_config.get("template") or ctx.module.field_values.template
        create_package = template_config.get("createPackage") or self.settings.create_package

        console.print(
            Panel(
                f"[cyan]Scaffolding React project[/cyan]\n"
                f"  Project: {escape(ctx.project.name)}\n"
                f"  Template: {template}\n"
                f"  TypeScript: {ctx.module.field_values.use_typescript}\n"
                f"  Fast mode: {self.settings.fast_mode}",
                title="React Scaffolder",
                border_style="cyan",
            )
        )

        start_time = time.monotonic()
        workspace = self._create_workspace()
        try:
            project_dir = workspace / PROJECT_DIR_NAME

            with self._step("generate"):
                await self.runner.run(
                    self.settings.npm_binary,
                    ["create", create_package, PROJECT_DIR_NAME, "--", "--template", template],
                    cwd=workspace,
                )
            sink.success("Vite project created")

            # Never in a worker thread: nothing may write to the workspace once _cleanup starts.
            with self._step("augment"):
                merge_dependencies(project_dir / MANIFEST_NAME, module.dependencies, sink)

            if self.settings.fast_mode:
                sink.info("Fast mode: skipping npm install and UI library initialisation")
                ui_library = UiLibraryStatus.SKIPPED
            else:
                with self._step("install"):
                    await self.runner.run(self.settings.npm_binary, ["install"], cwd=project_dir)
                sink.success("Dependencies installed")
                ui_library = await self._init_ui_library(project_dir, sink)

            sink.info("Reading generated files...")
            files = await asyncio.to_thread(
                snapshot_directory, project_dir, sink, self.settings.snapshot_exclude,
            )
            sink.success(f"Read {len(files)} files from Vite project")

            remove_files(files, module.files_to_remove, sink)

            result = ScaffoldResult(
                files=files,
                template=template,
                ui_library=ui_library,
                diagnostics=sink.events,
                duration_seconds=time.monotonic() - start_time,
            )
        finally:
            self._cleanup(workspace, sink)

        self._display_result(result)
        return result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @contextmanager
    def _step(self, name: str) -> Iterator[None]:
        """Run one mandatory step, tagging any fatal error with its name."""
        try:
            yield
        except ScaffoldError as exc:
            exc.step = name
            print_error(f"Step '{name}' failed: {exc}")
            raise

    async def _init_ui_library(self, project_dir: Path, sink: DiagnosticSink) -> UiLibraryStatus:
        """Initialise the UI component library; failure is not fatal."""
        if not self.settings.ui_library_enabled:
            sink.info("UI library initialisation disabled")
            return UiLibraryStatus.SKIPPED

        try:
            await self.runner.run(
                self.settings.npx_binary,
                [self.settings.ui_init_package, "init", "-d"],
                cwd=project_dir,
            )
        except CommandError as exc:
            sink.warn(
                DiagnosticKind.UI_INIT_FAILED,
                f"UI library initialisation failed, continuing without it: {exc}",
            )
            return UiLibraryStatus.FAILED_NON_FATAL

        sink.success("UI library initialised")
        return UiLibraryStatus.SUCCEEDED

    # ------------------------------------------------------------------
    # Workspace lifecycle
    # ------------------------------------------------------------------

    def _create_workspace(self) -> Path:
        parent = self.settings.workspace_root
        if parent is not None:
            parent.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=parent))

    def _cleanup(self, workspace: Path, sink: DiagnosticSink) -> None:
        """Remove the workspace synchronously so cancellation cannot skip it."""
        try:
            shutil.rmtree(workspace)
        except FileNotFoundError:
            pass
        except OSError as exc:
            sink.warn(
                DiagnosticKind.CLEANUP_FAILED,
                f"Could not clean up temporary directory {workspace}: {exc}",
                path=str(workspace),
            )

    def _display_result(self, result: ScaffoldResult) -> None:
        print_summary_table(
            {
                "Template": result.template,
                "Files": f"{len(result.files)} ({result.binary_count} binary)",
                "UI library": result.ui_library.value,
                "Diagnostics": len(result.diagnostics),
                "Duration": format_duration(result.duration_seconds),
            },
            title="Scaffold Complete",
        )


async def scaffold(
    module_config: ModuleConfig | dict[str, Any],
    context: ScaffoldContext | dict[str, Any],
    settings: ScaffoldSettings | None = None,
) -> FileMap:
    """Scaffold a project and return only its FileMap."""
    result = await ReactScaffolder(settings).run(module_config, context)
    return result.files


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``react-scaffold`` / ``python -m react_scaffold``."""
    import argparse

    import yaml

    from .verify import check_file_map, load_scenarios

    parser = argparse.ArgumentParser(
        description="Scaffold a React (Vite) project from module metadata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  react-scaffold meta.json --project-name shop -o ./frontend\n"
            "  react-scaffold meta.json --javascript --json files.json\n"
            "  react-scaffold meta.json --fast --check tests.yaml --scenario react-ts-vite\n"
        ),
    )
    parser.add_argument("module_config", help="Path to the module metadata JSON file")
    parser.add_argument("--project-name", default="my-app", help="Project name (default: my-app)")
    parser.add_argument("--context", default=None, help="Path to a context JSON file (overrides flags)")
    parser.add_argument("--javascript", action="store_true", help="Use the plain JavaScript template")
    parser.add_argument("--output", "-o", default=None, help="Write the generated files to this directory")
    parser.add_argument("--json", default=None, help="Dump the FileMap as JSON to this file ('-' for stdout)")
    parser.add_argument("--fast", action="store_true", help="Skip npm install and UI library init")
    parser.add_argument("--check", default=None, help="Scenario suite (YAML/JSON) to check the output against")
    parser.add_argument(
        "--scenario", default=None,
        help="Scenario name in --check; its fieldValues drive the run (required if the suite has several)",
    )

    args = parser.parse_args(argv)

    scenario = None
    try:
        raw_module = load_json(args.module_config)
        if args.check:
            suite = load_scenarios(args.check)
            if args.scenario:
                scenario = suite.get(args.scenario)
            elif len(suite.scenarios) == 1:
                scenario = suite.scenarios[0]
            else:
                raise ValueError(
                    f"{args.check} defines {len(suite.scenarios)} scenarios; pick one with --scenario"
                )
        if args.context:
            raw_context = load_json(args.context)
        elif scenario is not None:
            raw_context = scenario.context(args.project_name).model_dump(by_alias=True)
        else:
            raw_context = {
                "project": {"name": args.project_name},
                "module": {"fieldValues": {"useTypeScript": not args.javascript}},
            }
    except (OSError, ValueError, KeyError, yaml.YAMLError) as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    try:
        settings = ScaffoldSettings.from_env()
    except (ValueError, ValidationError) as exc:
        print_error(f"Invalid SCAFFOLD_* environment settings:\n{exc}")
        sys.exit(1)
    if args.fast:
        settings.fast_mode = True

    try:
        result = asyncio.run(ReactScaffolder(settings).run(raw_module, raw_context))
    except ValidationError as exc:
        print_error(f"Invalid module configuration:\n{exc}")
        sys.exit(1)
    except ScaffoldError as exc:
        print_error(f"Scaffold failed: {exc}")
        sys.exit(1)

    if args.output:
        written = write_file_map(result.files, args.output)
        print_success(f"Wrote {len(written)} files to {Path(args.output).resolve()}")
    if args.json == "-":
        sys.stdout.write(json.dumps(file_map_to_dict(result.files), indent=2, ensure_ascii=False) + "\n")
    elif args.json:
        save_json(file_map_to_dict(result.files), args.json)
        print_success(f"Wrote FileMap to {args.json}")

    if scenario is None:
        return

    failures = check_file_map(result.files, scenario, prefix=scenario.mount_prefix)
    if failures:
        for failure in failures:
            print_warning(str(failure))
        print_error(f"Scenario '{scenario.name}': {len(failures)} check(s) failed.")
        sys.exit(1)
    print_success(f"Scenario '{scenario.name}' passed.")
