"""Value objects describing scenario scenes and the choices linking them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Sequence


def _validate_identifier(value: str, *, field_name: str) -> str:
    """Validate and normalise identifiers used to reference graph elements."""

    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string, got {type(value)!r}")

    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} must be a non-empty string")

    return stripped


def _validate_text(value: str, *, field_name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string, got {type(value)!r}")
    return value


@dataclass(frozen=True)
class Position:
    """Coordinates of a scene node in layout units."""

    x: float
    y: float

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Choice:
    """A labelled edge leading from one scene to another.

    ``target_scene_id`` is kept verbatim: it may be empty or refer to a scene
    that does not exist, and graph algorithms skip such edges.
    """

    id: str
    target_scene_id: str
    text: str = ""
    condition: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "id", _validate_identifier(self.id, field_name="choice id")
        )
        target = self.target_scene_id if self.target_scene_id is not None else ""
        object.__setattr__(
            self,
            "target_scene_id",
            _validate_text(target, field_name="target scene id").strip(),
        )
        object.__setattr__(
            self, "text", _validate_text(self.text, field_name="choice text")
        )


@dataclass(frozen=True)
class Scene:
    """A node of the narrative graph together with its outgoing choices."""

    id: str
    title: str = ""
    content: str = ""
    choices: Sequence[Choice] = field(default_factory=tuple)
    is_start_scene: bool = False
    position: Position | None = None
    image: str | None = None
    audio: str | None = None
    image_asset_id: str | None = None
    audio_asset_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "id", _validate_identifier(self.id, field_name="scene id")
        )
        object.__setattr__(
            self, "title", _validate_text(self.title, field_name="scene title")
        )
        object.__setattr__(
            self, "content", _validate_text(self.content, field_name="scene content")
        )

        normalised_choices = tuple(self.choices)
        for choice in normalised_choices:
            if not isinstance(choice, Choice):
                raise TypeError(
                    f"Scene '{self.id}' choices must be Choice instances, "
                    f"got {type(choice)!r}"
                )
        object.__setattr__(self, "choices", normalised_choices)
        object.__setattr__(self, "is_start_scene", bool(self.is_start_scene))

    def iter_target_ids(self) -> tuple[str, ...]:
        """Return the raw target ids of every choice, in choice order."""

        return tuple(choice.target_scene_id for choice in self.choices)

    def with_position(self, position: Position | None) -> "Scene":
        return replace(self, position=position)


@dataclass(frozen=True)
class Scenario:
    """An authored narrative: metadata plus the ordered list of its scenes."""

    id: str
    title: str = ""
    description: str | None = None
    scenes: Sequence[Scene] = field(default_factory=tuple)
    created_at: str | None = None
    updated_at: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "id", _validate_identifier(self.id, field_name="scenario id")
        )
        object.__setattr__(self, "scenes", tuple(self.scenes))

    def get_scene(self, scene_id: str) -> Scene:
        """Return the scene registered under ``scene_id``.

        Raises:
            KeyError: If no scene uses that identifier.
        """

        for scene in self.scenes:
            if scene.id == scene_id:
                return scene
        raise KeyError(f"Scene '{scene_id}' is not defined.")

    def has_scene(self, scene_id: str) -> bool:
        return any(scene.id == scene_id for scene in self.scenes)

    def with_scene(self, scene: Scene) -> "Scenario":
        """Return a copy where ``scene`` replaces its namesake or is appended."""

        if self.has_scene(scene.id):
            scenes = tuple(
                scene if existing.id == scene.id else existing
                for existing in self.scenes
            )
        else:
            scenes = (*self.scenes, scene)
        return replace(self, scenes=scenes)


__all__ = ["Choice", "Position", "Scenario", "Scene"]
