"""Shared pytest fixtures for the react-scaffold test suite.

Provides reusable fixtures for:
- Silent diagnostic sinks
- Fake Vite project trees (TypeScript and JavaScript flavours)
- A fake command runner standing in for npm/npx
- Scaffold settings pointed at a temporary workspace root
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from react_scaffold.config import ScaffoldSettings
from react_scaffold.diagnostics import DiagnosticSink
from react_scaffold.runner import CommandResult

# 1x1 transparent PNG.
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c4"
    "890000000d4944415478da63f8ffff3f0005fe02fea7d6a4b30000000049454e44ae426082"
)
ICO_BYTES = b"\x00\x00\x01\x00\x01\x00\x10\x10\x00\x00\x01\x00\x20\x00\xff\xfe\x80"


# ---------------------------------------------------------------------------
# Fake Vite output
# ---------------------------------------------------------------------------


def vite_package_json(typescript: bool = True) -> dict[str, Any]:
    dev_dependencies = {
        "@vitejs/plugin-react": "^4.3.4",
        "eslint": "^9.17.0",
        "vite": "^6.0.5",
    }
    if typescript:
        dev_dependencies["@types/react"] = "^18.3.18"
        dev_dependencies["typescript"] = "~5.6.2"
    return {
        "name": "project",
        "private": True,
        "version": "0.0.0",
        "type": "module",
        "scripts": {"dev": "vite", "build": "vite build", "preview": "vite preview"},
        "dependencies": {"react": "^18.3.1", "react-dom": "^18.3.1"},
        "devDependencies": dev_dependencies,
    }


def write_vite_project(project_dir: Path, template: str) -> None:
    """Write the files ``npm create vite`` would produce for *template*."""
    typescript = template.endswith("-ts")
    ext = "tsx" if typescript else "jsx"
    config_ext = "ts" if typescript else "js"

    files: dict[str, str | bytes] = {
        "package.json": json.dumps(vite_package_json(typescript), indent=2) + "\n",
        "index.html": (
            '<!doctype html>\n<html lang="en">\n  <body>\n    <div id="root"></div>\n'
            f'    <script type="module" src="/src/main.{ext}"></script>\n  </body>\n</html>\n'
        ),
        f"vite.config.{config_ext}": (
            "import { defineConfig } from 'vite'\n"
            "import react from '@vitejs/plugin-react'\n\n"
            "export default defineConfig({\n  plugins: [react()],\n})\n"
        ),
        ".gitignore": "node_modules\ndist\n",
        "README.md": "# React + Vite\n",
        "eslint.config.js": "export default []\n",
        f"src/main.{ext}": "import App from './App'\n",
        f"src/App.{ext}": "export default function App() { return <h1>Vite + React</h1> }\n",
        "src/App.css": "#root { max-width: 1280px; }\n",
        "src/index.css": ":root { font-family: Inter, sans-serif; }\n",
        "src/assets/react.svg": '<svg xmlns="http://www.w3.org/2000/svg"></svg>\n',
        "public/vite.png": PNG_BYTES,
        "public/favicon.ico": ICO_BYTES,
    }
    if typescript:
        files["tsconfig.json"] = json.dumps({"files": [], "references": []}, indent=2) + "\n"
        files["tsconfig.node.json"] = json.dumps({"compilerOptions": {}}, indent=2) + "\n"
        files["src/vite-env.d.ts"] = '/// <reference types="vite/client" />\n'

    for rel_path, content in files.items():
        target = project_dir / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------


class FakeRunner:
    """Stands in for ``CommandRunner``; records calls and fakes npm/npx.

    ``failures`` maps the first argument of a call (``"create"``,
    ``"install"``, ``"shadcn@latest"``) to the exception it should raise.
    ``manifest_text`` replaces the generated ``package.json`` when set.
    """

    def __init__(
        self,
        failures: dict[str, BaseException] | None = None,
        manifest_text: str | None = None,
        hooks: dict[str, Any] | None = None,
    ) -> None:
        self.failures = failures or {}
        self.manifest_text = manifest_text
        self.hooks = hooks or {}
        self.calls: list[tuple[str, list[str], Path]] = []

    @property
    def invoked(self) -> list[str]:
        return [args[0] if args else command for command, args, _ in self.calls]

    @property
    def workspace(self) -> Path:
        """The cwd of the first call, i.e. the temporary workspace."""
        return self.calls[0][2]

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: str | Path | None = None,
    ) -> CommandResult:
        args = list(args)
        workdir = Path(cwd) if cwd is not None else Path.cwd()
        self.calls.append((command, args, workdir))
        key = args[0] if args else command

        hook = self.hooks.get(key)
        if hook is not None:
            await hook(workdir)
        if key in self.failures:
            raise self.failures[key]

        if key == "create":
            template = args[args.index("--template") + 1]
            project_dir = workdir / args[2]
            write_vite_project(project_dir, template)
            if self.manifest_text is not None:
                (project_dir / "package.json").write_text(self.manifest_text, encoding="utf-8")
        elif key == "install":
            module_dir = workdir / "node_modules" / "react"
            module_dir.mkdir(parents=True, exist_ok=True)
            (module_dir / "index.js").write_text("module.exports = {}\n", encoding="utf-8")
            (workdir / "package-lock.json").write_text("{}\n", encoding="utf-8")
        elif key.startswith("shadcn"):
            (workdir / "components.json").write_text('{"style": "default"}\n', encoding="utf-8")
            lib_dir = workdir / "src" / "lib"
            lib_dir.mkdir(parents=True, exist_ok=True)
            (lib_dir / "utils.ts").write_text("export function cn() {}\n", encoding="utf-8")

        return CommandResult(command=" ".join([command, *args]))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def silent_sink() -> DiagnosticSink:
    """A sink that records diagnostics without printing them."""
    return DiagnosticSink(echo=False)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_runner():
    """Factory for ``FakeRunner`` instances with custom failures/hooks."""
    return FakeRunner


@pytest.fixture
def make_vite_project():
    """Factory writing a fake Vite project: ``make_vite_project(dir, template)``."""
    return write_vite_project


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Parent directory for scaffold workspaces (auto-cleanup)."""
    return tmp_path / "workspaces"


@pytest.fixture
def settings(workspace_root: Path) -> ScaffoldSettings:
    """Settings for a full (non-fast) run with a private workspace root."""
    return ScaffoldSettings(
        fast_mode=False,
        npm_binary="npm",
        npx_binary="npx",
        show_progress=False,
        workspace_root=workspace_root,
    )


@pytest.fixture
def ts_context() -> dict[str, Any]:
    return {
        "project": {"name": "shop"},
        "module": {"fieldValues": {"reactVersion": "18", "useTypeScript": True, "buildTool": "vite"}},
    }


@pytest.fixture
def js_context() -> dict[str, Any]:
    return {
        "project": {"name": "shop"},
        "module": {"fieldValues": {"reactVersion": "18", "useTypeScript": False, "buildTool": "vite"}},
    }


@pytest.fixture
def module_config() -> dict[str, Any]:
    """Module metadata in the camelCase shape the orchestrator supplies."""
    return {
        "id": "code-react",
        "generation": {
            "baseTemplate": {"config": {}},
            "files": {"remove": ["src/App.css", "eslint.config.js"]},
        },
        "dependencies": {
            "npm": {
                "dependencies": {
                    "axios": "^1.7.9",
                    "@reduxjs/toolkit": "^2.5.0",
                    "react-redux": "^9.2.0",
                    "lucide-react": "^0.469.0",
                },
                "devDependencies": {
                    "tailwindcss": "^4.0.0",
                    "@tailwindcss/vite": "^4.0.0",
                    "autoprefixer": "^10.4.20",
                    "postcss": "^8.4.49",
                },
            },
        },
    }
