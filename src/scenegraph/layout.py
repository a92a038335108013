"""Top-down tree layout for scenario scene graphs.

The layout walks the choice graph depth-first from the start scene. Leaves are
placed left to right on a shared horizontal cursor and every parent is centred
above the span of its children. Revisited scenes, cycles and very deep chains
are guarded so the walk always terminates, and scenes that cannot be reached
from the start scene are lined up in a separate row beneath the tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from .model import Position, Scene

logger = logging.getLogger(__name__)

DEFAULT_HORIZONTAL_SPACING = 250.0
DEFAULT_LEVEL_SPACING = 200.0
DEFAULT_MAX_DEPTH = 50
DEFAULT_ORPHAN_ROW_OFFSET = 2


@dataclass(frozen=True)
class LayoutSettings:
    """Spacing constants and guards used when laying out a scene graph."""

    horizontal_spacing: float = DEFAULT_HORIZONTAL_SPACING
    level_spacing: float = DEFAULT_LEVEL_SPACING
    max_depth: int = DEFAULT_MAX_DEPTH
    orphan_row_offset: int = DEFAULT_ORPHAN_ROW_OFFSET
    fallback_to_first_scene: bool = False

    def __post_init__(self) -> None:
        if self.horizontal_spacing <= 0:
            raise ValueError("horizontal_spacing must be greater than zero.")
        if self.level_spacing <= 0:
            raise ValueError("level_spacing must be greater than zero.")
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least one.")
        if self.orphan_row_offset < 0:
            raise ValueError("orphan_row_offset must not be negative.")


@dataclass
class _Frame:
    scene: Scene
    depth: int
    children: tuple[Scene, ...]
    next_child: int = 0
    child_xs: list[float] = field(default_factory=list)


@dataclass
class _LayoutState:
    children: Mapping[str, tuple[Scene, ...]]
    settings: LayoutSettings
    cursor: int = 0
    positions: dict[str, Position] = field(default_factory=dict)
    in_progress: set[str] = field(default_factory=set)

    def place_leaf(self, scene: Scene, depth: int) -> float:
        x = self.cursor * self.settings.horizontal_spacing
        self.positions[scene.id] = Position(x, depth * self.settings.level_spacing)
        self.cursor += 1
        return x

    def enter(
        self, scene: Scene, depth: int, stack: list[_Frame]
    ) -> float | None:
        """Return the x of ``scene`` or push a frame when its children come first."""

        placed = self.positions.get(scene.id)
        if placed is not None:
            return placed.x

        if scene.id in self.in_progress:
            # Back edge: the ancestor frame still owns this scene's final slot.
            x = self.cursor * self.settings.horizontal_spacing
            self.cursor += 1
            return x

        children = self.children.get(scene.id, ())
        if not children or depth >= self.settings.max_depth:
            return self.place_leaf(scene, depth)

        self.in_progress.add(scene.id)
        stack.append(_Frame(scene, depth, children))
        return None

    def visit(self, scene: Scene, depth: int) -> None:
        """Lay out ``scene`` and everything below it without recursing."""

        stack: list[_Frame] = []
        self.enter(scene, depth, stack)

        while stack:
            frame = stack[-1]
            if frame.next_child < len(frame.children):
                child = frame.children[frame.next_child]
                frame.next_child += 1
                child_x = self.enter(child, frame.depth + 1, stack)
                if child_x is not None:
                    frame.child_xs.append(child_x)
                continue

            stack.pop()
            self.in_progress.discard(frame.scene.id)
            x = (min(frame.child_xs) + max(frame.child_xs)) / 2
            self.positions[frame.scene.id] = Position(
                x, frame.depth * self.settings.level_spacing
            )
            if stack:
                stack[-1].child_xs.append(x)


def _index_scenes(scenes: Iterable[Scene]) -> dict[str, Scene]:
    return {scene.id: scene for scene in scenes}


def _resolve_children(
    scenes: Sequence[Scene], index: Mapping[str, Scene]
) -> dict[str, tuple[Scene, ...]]:
    return {
        scene.id: tuple(
            index[target] for target in scene.iter_target_ids() if target in index
        )
        for scene in scenes
    }


def resolve_layout_root(
    scenes: Sequence[Scene], settings: LayoutSettings | None = None
) -> Scene | None:
    """Return the scene that seeds the layout, or ``None`` for no layout.

    The first scene flagged as the start scene wins. When no scene carries the
    flag the layout is empty unless ``settings.fallback_to_first_scene`` is
    enabled, in which case the scene with the smallest identifier is used.
    """

    resolved = settings or LayoutSettings()
    for scene in scenes:
        if scene.is_start_scene:
            return scene

    if resolved.fallback_to_first_scene and scenes:
        return min(scenes, key=lambda scene: scene.id)

    return None


def compute_scene_positions(
    scenes: Sequence[Scene], settings: LayoutSettings | None = None
) -> dict[str, Position]:
    """Assign a :class:`Position` to every scene reachable through the layout.

    Args:
        scenes: Snapshot of the scenario scenes. The sequence is not modified.
        settings: Optional spacing and guard configuration.

    Returns:
        Mapping of scene id to position. Empty when no layout root exists;
        otherwise it contains an entry for every scene id in ``scenes``.
    """

    resolved = settings or LayoutSettings()
    scene_list = list(scenes)

    root = resolve_layout_root(scene_list, resolved)
    if root is None:
        logger.debug("No start scene among %d scenes; layout is empty", len(scene_list))
        return {}

    index = _index_scenes(scene_list)
    state = _LayoutState(
        children=_resolve_children(scene_list, index), settings=resolved
    )
    state.visit(index[root.id], 0)

    orphan_y = (
        state.positions[root.id].y + resolved.orphan_row_offset * resolved.level_spacing
    )
    orphans = [scene for scene in index.values() if scene.id not in state.positions]
    for offset, scene in enumerate(orphans):
        state.positions[scene.id] = Position(
            (state.cursor + offset) * resolved.horizontal_spacing, orphan_y
        )

    logger.debug(
        "Laid out %d scenes from root '%s' (%d orphaned)",
        len(state.positions),
        root.id,
        len(orphans),
    )
    return state.positions


def apply_positions(
    scenes: Sequence[Scene], positions: Mapping[str, Position]
) -> tuple[Scene, ...]:
    """Return copies of ``scenes`` carrying their computed positions.

    Scenes without an entry in ``positions`` keep whatever position they had.
    """

    return tuple(
        scene.with_position(positions[scene.id]) if scene.id in positions else scene
        for scene in scenes
    )


__all__ = [
    "DEFAULT_HORIZONTAL_SPACING",
    "DEFAULT_LEVEL_SPACING",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_ORPHAN_ROW_OFFSET",
    "LayoutSettings",
    "apply_positions",
    "compute_scene_positions",
    "resolve_layout_root",
]
