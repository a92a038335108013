"""FastAPI application exposing scenario layout and validation endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..cycles import find_cycle
from ..editor import SceneCycleError, ScenarioEditor
from ..layout import LayoutSettings, compute_scene_positions, resolve_layout_root
from ..mapping import load_scene_from_mapping, scenario_to_payload
from ..model import Scenario
from ..persistence import FileScenarioStore, InMemoryScenarioStore, ScenarioStore
from .settings import SceneGraphApiSettings

logger = logging.getLogger(__name__)


class PositionResource(BaseModel):
    """Coordinates of a scene node in layout units."""

    x: float
    y: float


class ChoiceResource(BaseModel):
    """Choice leading from one scene to another."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    text: str = ""
    target_scene_id: str = Field(default="", alias="targetSceneId")
    condition: Any | None = None


class SceneResource(BaseModel):
    """Full scene definition as exchanged with editing clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    content: str = ""
    choices: list[ChoiceResource] = Field(default_factory=list)
    is_start_scene: bool = Field(default=False, alias="isStartScene")
    position: PositionResource | None = None
    image: str | None = None
    audio: str | None = None
    image_asset_id: str | None = Field(default=None, alias="imageAssetId")
    audio_asset_id: str | None = Field(default=None, alias="audioAssetId")


class ScenarioResource(BaseModel):
    """Scenario metadata together with its scenes."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    description: str | None = None
    scenes: list[SceneResource] = Field(default_factory=list)
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class ScenarioListResponse(BaseModel):
    """Identifiers of every stored scenario."""

    data: list[str]


class LayoutResponse(BaseModel):
    """Advisory node positions for rendering a scenario graph."""

    scenario_id: str
    start_scene: str | None = None
    positions: dict[str, PositionResource] = Field(default_factory=dict)


class CycleCheckResponse(BaseModel):
    """Outcome of checking a scenario for loops."""

    scenario_id: str
    has_cycle: bool
    cycle: list[str] | None = None


def _scenario_resource(scenario: Scenario) -> ScenarioResource:
    return ScenarioResource.model_validate(scenario_to_payload(scenario))


class SceneGraphService:
    """Business logic supporting the API endpoints."""

    def __init__(
        self,
        store: ScenarioStore,
        *,
        layout_settings: LayoutSettings | None = None,
    ) -> None:
        self._store = store
        self._layout_settings = layout_settings or LayoutSettings()

    def list_scenarios(self) -> ScenarioListResponse:
        return ScenarioListResponse(data=self._store.list_scenarios())

    def get_scenario(self, scenario_id: str) -> ScenarioResource:
        return _scenario_resource(self._store.load(scenario_id))

    def get_layout(self, scenario_id: str) -> LayoutResponse:
        scenario = self._store.load(scenario_id)
        root = resolve_layout_root(scenario.scenes, self._layout_settings)
        positions = compute_scene_positions(scenario.scenes, self._layout_settings)
        return LayoutResponse(
            scenario_id=scenario.id,
            start_scene=root.id if root is not None else None,
            positions={
                scene_id: PositionResource(x=position.x, y=position.y)
                for scene_id, position in positions.items()
            },
        )

    def check_cycles(self, scenario_id: str) -> CycleCheckResponse:
        scenario = self._store.load(scenario_id)
        cycle = find_cycle(scenario.scenes)
        return CycleCheckResponse(
            scenario_id=scenario.id,
            has_cycle=cycle is not None,
            cycle=list(cycle) if cycle is not None else None,
        )

    def save_scene(
        self, scenario_id: str, scene_id: str, payload: SceneResource
    ) -> ScenarioResource:
        """Merge ``payload`` into the scenario unless it introduces a loop.

        Raises:
            KeyError: If the scenario does not exist.
            ValueError: If the payload is malformed or its id disagrees with
                ``scene_id``.
            SceneCycleError: If the merged graph contains a loop.
        """

        if payload.id != scene_id:
            raise ValueError(
                f"Scene id '{payload.id}' does not match the requested "
                f"scene '{scene_id}'."
            )

        scene = load_scene_from_mapping(
            payload.model_dump(by_alias=True, exclude_none=True)
        )
        editor = ScenarioEditor(
            self._store, scenario_id, layout_settings=self._layout_settings
        )
        return _scenario_resource(editor.update_scene(scene))


def create_app(
    store: ScenarioStore | None = None,
    *,
    settings: SceneGraphApiSettings | None = None,
) -> FastAPI:
    """Create a FastAPI app exposing the scene graph endpoints."""

    resolved_settings = settings or SceneGraphApiSettings.from_env()

    resolved_store = store
    if resolved_store is None:
        if resolved_settings.store_root is not None:
            resolved_store = FileScenarioStore(resolved_settings.store_root)
        else:
            resolved_store = InMemoryScenarioStore()

    service = SceneGraphService(
        resolved_store, layout_settings=resolved_settings.layout_settings()
    )

    app = FastAPI(title="Scene Graph API")

    @app.get(
        "/api/scenarios",
        response_model=ScenarioListResponse,
        tags=["Scenarios"],
    )
    def list_scenarios() -> ScenarioListResponse:
        return service.list_scenarios()

    @app.get(
        "/api/scenarios/{scenario_id}",
        response_model=ScenarioResource,
        tags=["Scenarios"],
    )
    def get_scenario(scenario_id: str) -> ScenarioResource:
        try:
            return service.get_scenario(scenario_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=exc.args[0]) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get(
        "/api/scenarios/{scenario_id}/layout",
        response_model=LayoutResponse,
        tags=["Layout"],
    )
    def get_layout(scenario_id: str) -> LayoutResponse:
        try:
            return service.get_layout(scenario_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=exc.args[0]) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get(
        "/api/scenarios/{scenario_id}/cycles",
        response_model=CycleCheckResponse,
        tags=["Layout"],
    )
    def check_cycles(scenario_id: str) -> CycleCheckResponse:
        try:
            return service.check_cycles(scenario_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=exc.args[0]) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.put(
        "/api/scenarios/{scenario_id}/scenes/{scene_id}",
        response_model=ScenarioResource,
        tags=["Scenes"],
    )
    def save_scene(
        scenario_id: str, scene_id: str, payload: SceneResource
    ) -> ScenarioResource:
        try:
            return service.save_scene(scenario_id, scene_id, payload)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=exc.args[0]) from exc
        except SceneCycleError as exc:
            raise HTTPException(
                status_code=400,
                detail={"message": str(exc), "cycle": list(exc.cycle)},
            ) from exc
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except OSError as exc:
            logger.exception("Failed to persist scene '%s'", scene_id)
            raise HTTPException(
                status_code=500, detail="Failed to persist scenario."
            ) from exc

    return app


__all__ = [
    "ChoiceResource",
    "CycleCheckResponse",
    "LayoutResponse",
    "PositionResource",
    "ScenarioListResponse",
    "ScenarioResource",
    "SceneGraphService",
    "SceneResource",
    "create_app",
]
