"""Layout and consistency checks for branching scenario scene graphs."""

from .analytics import (
    DanglingChoice,
    SceneGraphReachabilityReport,
    SceneGraphReport,
    analyse_scene_graph,
    compute_scene_reachability,
)
from .cycles import find_cycle, has_cycle, resolve_cycle_roots
from .editor import SceneCycleError, SceneGraphError, ScenarioEditor
from .layout import (
    LayoutSettings,
    apply_positions,
    compute_scene_positions,
    resolve_layout_root,
)
from .mapping import (
    load_scenario_from_file,
    load_scenario_from_json,
    load_scenario_from_mapping,
    load_scenes_from_mapping,
    scenario_to_payload,
    scene_to_payload,
)
from .model import Choice, Position, Scenario, Scene
from .persistence import FileScenarioStore, InMemoryScenarioStore, ScenarioStore

__all__ = [
    "Choice",
    "Position",
    "Scene",
    "Scenario",
    "LayoutSettings",
    "compute_scene_positions",
    "resolve_layout_root",
    "apply_positions",
    "has_cycle",
    "find_cycle",
    "resolve_cycle_roots",
    "DanglingChoice",
    "SceneGraphReachabilityReport",
    "SceneGraphReport",
    "analyse_scene_graph",
    "compute_scene_reachability",
    "load_scenario_from_file",
    "load_scenario_from_json",
    "load_scenario_from_mapping",
    "load_scenes_from_mapping",
    "scenario_to_payload",
    "scene_to_payload",
    "ScenarioStore",
    "InMemoryScenarioStore",
    "FileScenarioStore",
    "ScenarioEditor",
    "SceneGraphError",
    "SceneCycleError",
]
