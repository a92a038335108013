"""Conversion between JSON payloads and scenario model objects.

Two payload shapes are understood. The native shape mirrors the model using
camelCase keys (``id``, ``content``, ``targetSceneId``, ``isStartScene``). The
GraphQL shape returned by the scenario backend uses ``mongoId`` identifiers,
``text`` for scene content, ``scenesList`` for the scene collection and nested
``toSceneId`` / ``imageId`` / ``soundId`` objects for references.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence

from .model import Choice, Position, Scenario, Scene


def _pick_identifier(payload: Mapping[str, Any], *, context: str) -> str:
    value = payload.get("mongoId") or payload.get("id")
    if not isinstance(value, str) or not value.strip():
        raise ValueError(
            f"{context} must provide a non-empty 'id' or 'mongoId' string."
        )
    return value


def _optional_string(
    payload: Mapping[str, Any], key: str, *, context: str
) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{context} field '{key}' must be a string.")
    return value


def _asset_url(reference: Any) -> str | None:
    if isinstance(reference, Mapping):
        return reference.get("fullUrl") or reference.get("url") or None
    if isinstance(reference, str):
        return reference or None
    return None


def _asset_id(reference: Any) -> str | None:
    if isinstance(reference, Mapping):
        return reference.get("mongoId") or None
    return None


def _target_identifier(payload: Mapping[str, Any]) -> str:
    target = payload.get("targetSceneId")
    if target is None:
        nested = payload.get("toSceneId")
        if isinstance(nested, Mapping):
            target = nested.get("mongoId")
        else:
            target = nested
    if target is None:
        return ""
    if not isinstance(target, str):
        return str(target)
    return target


def _load_position(value: Any, *, context: str) -> Position | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValueError(f"{context} position must be an object with 'x' and 'y'.")
    try:
        return Position(float(value["x"]), float(value["y"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(
            f"{context} position must provide numeric 'x' and 'y'."
        ) from exc


def load_choice_from_mapping(
    payload: Mapping[str, Any], *, scene_id: str, index: int
) -> Choice:
    """Convert a single choice payload into a :class:`Choice`."""

    context = f"Choice #{index} in scene '{scene_id}'"
    if not isinstance(payload, Mapping):
        raise ValueError(f"{context} must be an object definition.")

    choice_id = payload.get("mongoId") or payload.get("id")
    if choice_id is None:
        choice_id = f"{scene_id}:{index}"
    if not isinstance(choice_id, str) or not choice_id.strip():
        raise ValueError(f"{context} must provide a non-empty identifier.")

    text = payload.get("text", "")
    if text is None:
        text = ""
    if not isinstance(text, str):
        raise ValueError(f"{context} text must be a string.")

    return Choice(
        id=choice_id,
        target_scene_id=_target_identifier(payload),
        text=text,
        condition=payload.get("condition"),
    )


def load_scene_from_mapping(payload: Mapping[str, Any]) -> Scene:
    """Convert a single scene payload into a :class:`Scene`."""

    if not isinstance(payload, Mapping):
        raise ValueError("Scene definitions must be objects.")

    scene_id = _pick_identifier(payload, context="Scene")
    context = f"Scene '{scene_id}'"

    content = payload.get("content", payload.get("text", ""))
    if content is None:
        content = ""
    if not isinstance(content, str):
        raise ValueError(f"{context} content must be a string.")

    title = payload.get("title", "")
    if title is None:
        title = ""
    if not isinstance(title, str):
        raise ValueError(f"{context} title must be a string.")

    raw_choices = payload.get("choices", [])
    if raw_choices is None:
        raw_choices = []
    if not isinstance(raw_choices, list):
        raise ValueError(f"{context} must define a list of choices.")

    is_start_scene = payload.get("isStartScene", False)
    if is_start_scene is None:
        is_start_scene = False
    if not isinstance(is_start_scene, bool):
        raise ValueError(f"{context} isStartScene must be a boolean.")

    choices = [
        load_choice_from_mapping(choice_payload, scene_id=scene_id, index=index)
        for index, choice_payload in enumerate(raw_choices)
    ]

    return Scene(
        id=scene_id,
        title=title,
        content=content,
        choices=tuple(choices),
        is_start_scene=is_start_scene,
        position=_load_position(payload.get("position"), context=context),
        image=_optional_string(payload, "image", context=context)
        or _asset_url(payload.get("imageId")),
        audio=_optional_string(payload, "audio", context=context)
        or _asset_url(payload.get("soundId")),
        image_asset_id=_optional_string(payload, "imageAssetId", context=context)
        or _asset_id(payload.get("imageId")),
        audio_asset_id=_optional_string(payload, "audioAssetId", context=context)
        or _asset_id(payload.get("soundId")),
    )


def load_scenes_from_mapping(payload: Sequence[Mapping[str, Any]]) -> tuple[Scene, ...]:
    """Convert a list of scene payloads into scenes, preserving order."""

    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise ValueError("Scene data must be a list of scene definitions.")
    return tuple(load_scene_from_mapping(entry) for entry in payload)


def load_scenario_from_mapping(payload: Mapping[str, Any]) -> Scenario:
    """Convert a native or GraphQL shaped payload into a :class:`Scenario`."""

    if not isinstance(payload, Mapping):
        raise ValueError("Scenario data must be an object definition.")

    scenario_id = _pick_identifier(payload, context="Scenario")
    raw_scenes = payload.get("scenes", payload.get("scenesList", []))
    if raw_scenes is None:
        raw_scenes = []

    title = payload.get("title") or ""
    if not isinstance(title, str):
        raise ValueError(f"Scenario '{scenario_id}' title must be a string.")

    context = f"Scenario '{scenario_id}'"
    return Scenario(
        id=scenario_id,
        title=title,
        description=_optional_string(payload, "description", context=context),
        scenes=load_scenes_from_mapping(raw_scenes),
        created_at=_optional_string(payload, "createdAt", context=context),
        updated_at=_optional_string(payload, "updatedAt", context=context),
    )


def load_scenario_from_json(payload: Any, *, default_id: str) -> Scenario:
    """Build a scenario from decoded JSON holding a scenario or a scene list.

    A bare list of scenes is wrapped in a scenario named ``default_id``.
    """

    if isinstance(payload, list):
        return Scenario(
            id=default_id,
            title=default_id,
            scenes=load_scenes_from_mapping(payload),
        )
    return load_scenario_from_mapping(payload)


def load_scenario_from_file(path: str | Path) -> Scenario:
    """Load a scenario definition from a JSON file on disk."""

    file_path = Path(path)
    with file_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    return load_scenario_from_json(payload, default_id=file_path.stem)


def choice_to_payload(choice: Choice) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": choice.id,
        "text": choice.text,
        "targetSceneId": choice.target_scene_id,
    }
    if choice.condition is not None:
        payload["condition"] = choice.condition
    return payload


def scene_to_payload(scene: Scene) -> dict[str, Any]:
    """Return the native JSON representation of ``scene``."""

    payload: dict[str, Any] = {
        "id": scene.id,
        "title": scene.title,
        "content": scene.content,
        "isStartScene": scene.is_start_scene,
        "choices": [choice_to_payload(choice) for choice in scene.choices],
    }
    if scene.position is not None:
        payload["position"] = scene.position.as_dict()
    for key, value in (
        ("image", scene.image),
        ("audio", scene.audio),
        ("imageAssetId", scene.image_asset_id),
        ("audioAssetId", scene.audio_asset_id),
    ):
        if value is not None:
            payload[key] = value
    return payload


def scenario_to_payload(scenario: Scenario) -> dict[str, Any]:
    """Return the native JSON representation of ``scenario``."""

    payload: dict[str, Any] = {
        "id": scenario.id,
        "title": scenario.title,
        "scenes": [scene_to_payload(scene) for scene in scenario.scenes],
    }
    if scenario.description is not None:
        payload["description"] = scenario.description
    if scenario.created_at is not None:
        payload["createdAt"] = scenario.created_at
    if scenario.updated_at is not None:
        payload["updatedAt"] = scenario.updated_at
    return payload


__all__ = [
    "choice_to_payload",
    "load_choice_from_mapping",
    "load_scenario_from_file",
    "load_scenario_from_json",
    "load_scenario_from_mapping",
    "load_scene_from_mapping",
    "load_scenes_from_mapping",
    "scenario_to_payload",
    "scene_to_payload",
]
