"""Scenario checks for scaffold output.

A scenario describes what a scaffold run for a given set of field values must
produce: files that must exist, files that must not, and substrings that
individual files must or must not contain. Scenario suites are YAML (or JSON)
documents::

    moduleId: code-react
    scenarios:
      - name: react-ts-vite
        config:
          layers: [frontend]
          fieldValues: {useTypeScript: true, reactVersion: "18"}
        expectedFiles: [frontend/package.json, frontend/vite.config.ts]
        forbiddenFiles: [frontend/vite.config.js]
        validations:
          - file: frontend/package.json
            contains: [react, vite]
            notContains: ["@types/jest"]

Scenario paths may carry a mount prefix (``frontend/`` above); pass the same
prefix to ``check_file_map`` to match them against an unprefixed FileMap.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .config import ScaffoldContext
from .models import FileMap


class _ScenarioModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FileValidation(_ScenarioModel):
    file: str
    contains: list[str] = Field(default_factory=list)
    not_contains: list[str] = Field(default_factory=list, alias="notContains")


class Scenario(_ScenarioModel):
    name: str
    description: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    expected_files: list[str] = Field(default_factory=list, alias="expectedFiles")
    forbidden_files: list[str] = Field(default_factory=list, alias="forbiddenFiles")
    validations: list[FileValidation] = Field(default_factory=list)

    @property
    def mount_prefix(self) -> str:
        """``<first layer>/`` from the scenario config, or ``""``."""
        layers = self.config.get("layers") or []
        return f"{layers[0].strip('/')}/" if layers else ""

    def context(self, project_name: str) -> ScaffoldContext:
        """Build the scaffold context this scenario's config describes."""
        return ScaffoldContext.model_validate({
            "project": {"name": project_name},
            "module": {"fieldValues": self.config.get("fieldValues") or {}},
        })


class ScenarioSuite(_ScenarioModel):
    module_id: Optional[str] = Field(default=None, alias="moduleId")
    module_name: Optional[str] = Field(default=None, alias="moduleName")
    scenarios: list[Scenario] = Field(default_factory=list)

    def get(self, name: str) -> Scenario:
        for scenario in self.scenarios:
            if scenario.name == name:
                return scenario
        raise KeyError(f"No scenario named '{name}'")


@dataclass
class CheckFailure:
    """One unmet expectation."""

    scenario: str
    file: str
    reason: str

    def __str__(self) -> str:
        return f"[{self.scenario}] {self.file}: {self.reason}"


def load_scenarios(path: str | Path) -> ScenarioSuite:
    """Load a scenario suite from a YAML or JSON file."""
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if raw is None:
        return ScenarioSuite()
    return ScenarioSuite.model_validate(raw)


def _key(path: str, prefix: str) -> str:
    if prefix and path.startswith(prefix):
        return path[len(prefix):]
    return path


def check_file_map(files: FileMap, scenario: Scenario, prefix: str = "") -> list[CheckFailure]:
    """Check *files* against *scenario*.

    Returns:
        Every failed expectation, in scenario order. Empty means the map
        satisfies the scenario.
    """
    failures: list[CheckFailure] = []

    for path in scenario.expected_files:
        if _key(path, prefix) not in files:
            failures.append(CheckFailure(scenario.name, path, "expected file is missing"))

    for path in scenario.forbidden_files:
        if _key(path, prefix) in files:
            failures.append(CheckFailure(scenario.name, path, "forbidden file is present"))

    for validation in scenario.validations:
        entry = files.get(_key(validation.file, prefix))
        if entry is None:
            failures.append(CheckFailure(scenario.name, validation.file, "file to validate is missing"))
            continue
        if entry.is_binary:
            failures.append(CheckFailure(scenario.name, validation.file, "cannot validate binary content"))
            continue
        for needle in validation.contains:
            if needle not in entry.content:
                failures.append(CheckFailure(scenario.name, validation.file, f"does not contain {needle!r}"))
        for needle in validation.not_contains:
            if needle in entry.content:
                failures.append(CheckFailure(scenario.name, validation.file, f"unexpectedly contains {needle!r}"))

    return failures
