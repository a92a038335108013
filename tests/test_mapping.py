"""Tests for converting scenario payloads into model objects."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from scenegraph.mapping import (
    load_scenario_from_file,
    load_scenario_from_mapping,
    load_scene_from_mapping,
    load_scenes_from_mapping,
    scenario_to_payload,
    scene_to_payload,
)
from scenegraph.model import Position

_GRAPHQL_SCENARIO = {
    "mongoId": "6650f0",
    "title": "Lighthouse",
    "description": "A stormy night on the coast.",
    "createdAt": "2024-03-01T10:00:00Z",
    "updatedAt": "2024-03-02T10:00:00Z",
    "scenesList": [
        {
            "mongoId": "s-shore",
            "title": "Shore",
            "text": "Waves crash against the rocks.",
            "isStartScene": True,
            "imageId": {"mongoId": "img-1", "fullUrl": "https://cdn/img-1.png"},
            "soundId": {"mongoId": "snd-1", "url": "/sounds/waves.mp3"},
            "choices": [
                {
                    "mongoId": "c-climb",
                    "text": "Climb the tower",
                    "toSceneId": {"mongoId": "s-tower"},
                    "condition": {"hasItem": "lantern"},
                }
            ],
        },
        {
            "mongoId": "s-tower",
            "title": "Tower",
            "text": "The lamp is dark.",
            "isStartScene": False,
            "imageId": None,
            "soundId": None,
            "choices": [],
        },
    ],
}


def test_graphql_payload_is_mapped() -> None:
    scenario = load_scenario_from_mapping(_GRAPHQL_SCENARIO)

    assert scenario.id == "6650f0"
    assert scenario.description == "A stormy night on the coast."
    assert [scene.id for scene in scenario.scenes] == ["s-shore", "s-tower"]

    shore = scenario.scenes[0]
    assert shore.content == "Waves crash against the rocks."
    assert shore.is_start_scene is True
    assert shore.image == "https://cdn/img-1.png"
    assert shore.image_asset_id == "img-1"
    assert shore.audio == "/sounds/waves.mp3"
    assert shore.audio_asset_id == "snd-1"
    assert shore.position is None

    choice = shore.choices[0]
    assert choice.id == "c-climb"
    assert choice.target_scene_id == "s-tower"
    assert choice.condition == {"hasItem": "lantern"}

    tower = scenario.scenes[1]
    assert tower.image is None
    assert tower.choices == ()


def test_native_scene_payload_is_mapped() -> None:
    scene = load_scene_from_mapping(
        {
            "id": "hall",
            "title": "Hall",
            "content": "Dusty portraits line the walls.",
            "position": {"x": 12, "y": 40.5},
            "choices": [
                {"id": "c1", "text": "Upstairs", "targetSceneId": "attic"},
                {"text": "Nowhere"},
            ],
        }
    )

    assert scene.position == Position(12.0, 40.5)
    assert scene.is_start_scene is False
    assert [choice.id for choice in scene.choices] == ["c1", "hall:1"]
    assert scene.choices[1].target_scene_id == ""


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "No identifier"},
        {"id": "   "},
        {"id": "a", "choices": "not-a-list"},
        {"id": "a", "content": 12},
        {"id": "a", "position": {"x": "left"}},
        {"id": "a", "choices": ["oops"]},
        {"id": "a", "isStartScene": "false"},
        {"id": "a", "isStartScene": 1},
    ],
)
def test_malformed_scene_payload_is_rejected(payload) -> None:
    with pytest.raises(ValueError):
        load_scene_from_mapping(payload)


def test_null_mongo_id_falls_back_to_native_id() -> None:
    scene = load_scene_from_mapping(
        {
            "mongoId": None,
            "id": "hall",
            "choices": [{"mongoId": None, "id": "c1", "targetSceneId": "attic"}],
        }
    )

    assert scene.id == "hall"
    assert scene.choices[0].id == "c1"


def test_null_start_flag_means_not_a_start_scene() -> None:
    scene = load_scene_from_mapping({"id": "hall", "isStartScene": None})

    assert scene.is_start_scene is False


def test_string_start_flag_error_names_the_scene() -> None:
    with pytest.raises(ValueError, match="Scene 'hall' isStartScene"):
        load_scene_from_mapping({"id": "hall", "isStartScene": "false"})


def test_scene_list_must_be_a_list() -> None:
    with pytest.raises(ValueError):
        load_scenes_from_mapping("scenes")  # type: ignore[arg-type]


def test_scene_payload_round_trips_through_native_shape() -> None:
    scenario = load_scenario_from_mapping(_GRAPHQL_SCENARIO)

    payload = scenario_to_payload(scenario)
    reloaded = load_scenario_from_mapping(payload)

    assert reloaded == scenario
    assert payload["scenes"][0]["choices"][0] == {
        "id": "c-climb",
        "text": "Climb the tower",
        "targetSceneId": "s-tower",
        "condition": {"hasItem": "lantern"},
    }


def test_scene_to_payload_omits_unset_optional_fields() -> None:
    scene = load_scene_from_mapping({"id": "hall"})

    assert scene_to_payload(scene) == {
        "id": "hall",
        "title": "",
        "content": "",
        "isStartScene": False,
        "choices": [],
    }


def test_load_scenario_from_file_accepts_bare_scene_list(tmp_path: Path) -> None:
    path = tmp_path / "short-story.json"
    path.write_text(
        json.dumps([{"id": "a", "isStartScene": True, "choices": []}]),
        encoding="utf-8",
    )

    scenario = load_scenario_from_file(path)

    assert scenario.id == "short-story"
    assert [scene.id for scene in scenario.scenes] == ["a"]


def test_load_scenario_from_file_accepts_scenario_object(tmp_path: Path) -> None:
    path = tmp_path / "lighthouse.json"
    path.write_text(json.dumps(_GRAPHQL_SCENARIO), encoding="utf-8")

    assert load_scenario_from_file(path).title == "Lighthouse"
