"""Save workflow guarding scenarios against cyclic scene graphs."""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Sequence

from .cycles import find_cycle
from .layout import LayoutSettings, compute_scene_positions
from .model import Position, Scenario, Scene
from .persistence import ScenarioStore

logger = logging.getLogger(__name__)

NEW_SCENE_TITLE = "New scene"
NEW_SCENE_POSITION = Position(200.0, 200.0)


class SceneGraphError(RuntimeError):
    """Base class for failures raised by the scenario save workflow."""


class SceneCycleError(SceneGraphError):
    """Raised when saving a scene would introduce a loop in the scenario."""

    def __init__(self, scene_id: str, cycle: Sequence[str]) -> None:
        self.scene_id = scene_id
        self.cycle = tuple(cycle)
        super().__init__(
            f"Saving scene '{scene_id}' would create a loop in the scenario: "
            f"{' -> '.join(self.cycle)}."
        )


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ScenarioEditor:
    """Edit a scenario scene by scene, rejecting edits that create cycles.

    The editor keeps an in-memory copy of the scenario. Every accepted edit is
    written to ``store``; a rejected edit discards the in-memory copy and
    reloads the last persisted version so the two never drift apart.
    """

    def __init__(
        self,
        store: ScenarioStore,
        scenario_id: str,
        *,
        layout_settings: LayoutSettings | None = None,
        clock: Callable[[], str] = _utc_timestamp,
    ) -> None:
        self._store = store
        self._scenario_id = scenario_id
        self._layout_settings = layout_settings or LayoutSettings()
        self._clock = clock
        self._scenario = store.load(scenario_id)

    @property
    def scenario(self) -> Scenario:
        return self._scenario

    def reload(self) -> Scenario:
        """Discard in-memory edits and reload the persisted scenario."""

        self._scenario = self._store.load(self._scenario_id)
        return self._scenario

    def new_scene(self) -> Scene:
        """Return a draft scene that has not been saved yet."""

        return Scene(
            id=f"temp-{int(time.time() * 1000)}",
            title=NEW_SCENE_TITLE,
            content="",
            choices=(),
            position=NEW_SCENE_POSITION,
        )

    def update_scene(self, scene: Scene) -> Scenario:
        """Merge ``scene`` into the scenario and persist the result.

        Raises:
            SceneCycleError: If the merged scene graph contains a cycle. The
                in-memory scenario is reloaded from the store before raising.
        """

        candidate = self._scenario.with_scene(scene)
        cycle = find_cycle(candidate.scenes)
        if cycle is not None:
            logger.warning(
                "Rejected scene '%s' in scenario '%s': loop %s",
                scene.id,
                self._scenario_id,
                " -> ".join(cycle),
            )
            self.reload()
            raise SceneCycleError(scene.id, cycle)

        updated = replace(candidate, updated_at=self._clock())
        self._store.save(updated)
        self._scenario = updated
        logger.info("Saved scene '%s' in scenario '%s'", scene.id, self._scenario_id)
        return updated

    def layout(self) -> dict[str, Position]:
        """Compute advisory node positions for the current scenario."""

        return compute_scene_positions(self._scenario.scenes, self._layout_settings)


__all__ = [
    "NEW_SCENE_POSITION",
    "NEW_SCENE_TITLE",
    "SceneCycleError",
    "SceneGraphError",
    "ScenarioEditor",
]
