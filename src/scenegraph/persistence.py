"""Scenario persistence used by the save workflow and the HTTP API."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List

from .mapping import load_scenario_from_mapping, scenario_to_payload
from .model import Scenario


class ScenarioStore(ABC):
    """Interface describing how scenarios are persisted."""

    @abstractmethod
    def save(self, scenario: Scenario) -> None:
        """Persist the scenario under its own identifier."""

    @abstractmethod
    def load(self, scenario_id: str) -> Scenario:
        """Return the scenario stored under ``scenario_id``.

        Raises:
            KeyError: If the scenario cannot be found.
        """

    @abstractmethod
    def delete(self, scenario_id: str) -> None:
        """Remove the stored scenario if it exists."""

    @abstractmethod
    def list_scenarios(self) -> List[str]:
        """Return all scenario identifiers stored in this persistence layer."""


class InMemoryScenarioStore(ScenarioStore):
    """Keep scenarios in local process memory."""

    def __init__(self) -> None:
        self._scenarios: Dict[str, Scenario] = {}

    def save(self, scenario: Scenario) -> None:
        self._scenarios[_validate_scenario_id(scenario.id)] = scenario

    def load(self, scenario_id: str) -> Scenario:
        key = _validate_scenario_id(scenario_id)
        try:
            return self._scenarios[key]
        except KeyError as exc:
            raise KeyError(f"Scenario '{scenario_id}' does not exist") from exc

    def delete(self, scenario_id: str) -> None:
        self._scenarios.pop(_validate_scenario_id(scenario_id), None)

    def list_scenarios(self) -> List[str]:
        return sorted(self._scenarios.keys())


class FileScenarioStore(ScenarioStore):
    """Persist scenarios as JSON files on disk, one file per scenario."""

    def __init__(self, storage_dir: Path) -> None:
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def save(self, scenario: Scenario) -> None:
        destination = self._scenario_path(scenario.id)
        temporary = destination.with_suffix(".json.tmp")
        temporary.write_text(
            json.dumps(scenario_to_payload(scenario), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        temporary.replace(destination)

    def load(self, scenario_id: str) -> Scenario:
        scenario_file = self._scenario_path(scenario_id)
        if not scenario_file.exists():
            raise KeyError(f"Scenario '{scenario_id}' does not exist")
        payload = json.loads(scenario_file.read_text(encoding="utf-8"))
        return load_scenario_from_mapping(payload)

    def delete(self, scenario_id: str) -> None:
        scenario_file = self._scenario_path(scenario_id)
        if scenario_file.exists():
            scenario_file.unlink()

    def list_scenarios(self) -> List[str]:
        return sorted(
            scenario_path.stem
            for scenario_path in self.storage_dir.glob("*.json")
            if scenario_path.is_file()
        )

    def _scenario_path(self, scenario_id: str) -> Path:
        validated = _validate_scenario_id(scenario_id)
        if "/" in validated or "\\" in validated or validated in {".", ".."}:
            raise ValueError("scenario_id must not contain path separators")
        return self.storage_dir / f"{validated}.json"


def _validate_scenario_id(scenario_id: str) -> str:
    if not isinstance(scenario_id, str):
        raise TypeError("scenario_id must be a string")
    stripped = scenario_id.strip()
    if not stripped:
        raise ValueError("scenario_id must be a non-empty string")
    return stripped


__all__ = [
    "FileScenarioStore",
    "InMemoryScenarioStore",
    "ScenarioStore",
]
