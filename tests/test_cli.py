"""Tests for the react-scaffold command line (react_scaffold.scaffolder.main)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from react_scaffold.runner import CommandExitError
from react_scaffold.scaffolder import main

pytestmark = pytest.mark.unit


@pytest.fixture
def meta_file(tmp_path: Path, module_config) -> Path:
    path = tmp_path / "meta.json"
    path.write_text(json.dumps(module_config), encoding="utf-8")
    return path


@pytest.fixture
def cli_runner(monkeypatch, workspace_root: Path, fake_runner):
    """Route the CLI's CommandRunner to a FakeRunner inside a private workspace root."""
    for name in ("SCAFFOLD_FAST_MODE", "SCAFFOLD_UI_LIBRARY", "SCAFFOLD_SNAPSHOT_EXCLUDE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SCAFFOLD_WORKSPACE_ROOT", str(workspace_root))
    with patch("react_scaffold.scaffolder.CommandRunner", return_value=fake_runner):
        yield fake_runner


def _write_suite(path: Path, scenarios: list[dict]) -> Path:
    path.write_text(yaml.safe_dump({"moduleId": "code-react", "scenarios": scenarios}), encoding="utf-8")
    return path


PASSING_SCENARIO = {
    "name": "react-ts-vite",
    "config": {"layers": ["frontend"], "fieldValues": {"useTypeScript": True}},
    "expectedFiles": ["frontend/package.json", "frontend/src/App.tsx"],
    "forbiddenFiles": ["frontend/src/App.css", "frontend/vite.config.js"],
    "validations": [{"file": "frontend/package.json", "contains": ["axios", "tailwindcss"]}],
}


class TestOutput:
    def test_writes_project_directory(self, cli_runner, meta_file: Path, tmp_path: Path, png_bytes: bytes):
        out = tmp_path / "frontend"
        main([str(meta_file), "--project-name", "shop", "-o", str(out)])
        assert (out / "src" / "App.tsx").is_file()
        assert not (out / "src" / "App.css").exists()
        assert (out / "public" / "vite.png").read_bytes() == png_bytes
        assert "axios" in (out / "package.json").read_text(encoding="utf-8")

    def test_javascript_flag(self, cli_runner, meta_file: Path, tmp_path: Path):
        out = tmp_path / "frontend"
        main([str(meta_file), "--javascript", "-o", str(out)])
        assert (out / "src" / "App.jsx").is_file()
        assert cli_runner.calls[0][1][-1] == "react"

    def test_json_file(self, cli_runner, meta_file: Path, tmp_path: Path):
        target = tmp_path / "files.json"
        main([str(meta_file), "--json", str(target)])
        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["public/vite.png"]["type"] == "binary"
        assert data["src/App.tsx"]["type"] == "text"

    def test_json_stdout(self, cli_runner, meta_file: Path, capsys):
        main([str(meta_file), "--json", "-"])
        data = json.loads(capsys.readouterr().out)
        assert "package.json" in data

    def test_fast_flag(self, cli_runner, meta_file: Path):
        main([str(meta_file), "--fast"])
        assert cli_runner.invoked == ["create"]

    def test_context_file(self, cli_runner, meta_file: Path, tmp_path: Path, js_context):
        context = tmp_path / "context.json"
        context.write_text(json.dumps(js_context), encoding="utf-8")
        main([str(meta_file), "--context", str(context)])
        assert cli_runner.calls[0][1][-1] == "react"


class TestCheck:
    def test_passing_scenario(self, cli_runner, meta_file: Path, tmp_path: Path):
        suite = _write_suite(tmp_path / "tests.yaml", [PASSING_SCENARIO])
        main([str(meta_file), "--check", str(suite)])

    def test_failing_scenario_exits_1(self, cli_runner, meta_file: Path, tmp_path: Path):
        failing = dict(PASSING_SCENARIO, expectedFiles=["frontend/src/routes.tsx"])
        suite = _write_suite(tmp_path / "tests.yaml", [failing])
        with pytest.raises(SystemExit) as exc_info:
            main([str(meta_file), "--check", str(suite)])
        assert exc_info.value.code == 1

    def test_scenario_field_values_drive_the_run(self, cli_runner, meta_file: Path, tmp_path: Path):
        js = {
            "name": "react-js-vite",
            "config": {"layers": ["frontend"], "fieldValues": {"useTypeScript": False}},
            "expectedFiles": ["frontend/src/App.jsx"],
        }
        suite = _write_suite(tmp_path / "tests.yaml", [PASSING_SCENARIO, js])
        main([str(meta_file), "--check", str(suite), "--scenario", "react-js-vite"])
        assert cli_runner.calls[0][1][-1] == "react"

    def test_several_scenarios_require_a_name(self, cli_runner, meta_file: Path, tmp_path: Path):
        suite = _write_suite(tmp_path / "tests.yaml", [PASSING_SCENARIO, dict(PASSING_SCENARIO, name="other")])
        with pytest.raises(SystemExit) as exc_info:
            main([str(meta_file), "--check", str(suite)])
        assert exc_info.value.code == 1
        assert cli_runner.calls == []

    def test_unknown_scenario(self, cli_runner, meta_file: Path, tmp_path: Path):
        suite = _write_suite(tmp_path / "tests.yaml", [PASSING_SCENARIO])
        with pytest.raises(SystemExit):
            main([str(meta_file), "--check", str(suite), "--scenario", "vue"])
        assert cli_runner.calls == []


class TestErrors:
    def test_missing_module_config(self, cli_runner, tmp_path: Path):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.json")])
        assert exc_info.value.code == 1

    def test_module_config_not_an_object(self, cli_runner, tmp_path: Path):
        path = tmp_path / "meta.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(SystemExit):
            main([str(path)])

    def test_invalid_module_config(self, cli_runner, tmp_path: Path):
        path = tmp_path / "meta.json"
        path.write_text('{"generation": {"files": {"remove": 3}}}', encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 1
        assert cli_runner.calls == []

    @pytest.mark.parametrize("timeout", ["5", "abc"])
    def test_invalid_environment_settings(self, cli_runner, meta_file: Path, monkeypatch, timeout: str):
        monkeypatch.setenv("SCAFFOLD_COMMAND_TIMEOUT", timeout)
        with pytest.raises(SystemExit) as exc_info:
            main([str(meta_file), "--fast"])
        assert exc_info.value.code == 1
        assert cli_runner.calls == []

    def test_scaffold_failure(self, monkeypatch, workspace_root: Path, make_runner, meta_file: Path):
        monkeypatch.setenv("SCAFFOLD_WORKSPACE_ROOT", str(workspace_root))
        runner = make_runner(failures={"create": CommandExitError("Command failed (exit 1): npm create", exit_code=1)})
        with patch("react_scaffold.scaffolder.CommandRunner", return_value=runner):
            with pytest.raises(SystemExit) as exc_info:
                main([str(meta_file)])
        assert exc_info.value.code == 1
        assert list(workspace_root.iterdir()) == []
