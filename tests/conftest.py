"""Test configuration for the scene graph project."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from scenegraph.model import Choice, Scenario, Scene


def build_scenes(
    edges: Mapping[str, Sequence[str]],
    *,
    start: str | None = None,
) -> tuple[Scene, ...]:
    """Create scenes from an adjacency mapping, preserving key order.

    Each target listed for a scene becomes one choice; targets do not need to
    be keys of ``edges`` so dangling references can be expressed directly.
    """

    return tuple(
        Scene(
            id=scene_id,
            title=scene_id.title(),
            choices=tuple(
                Choice(id=f"{scene_id}-{index}", target_scene_id=target)
                for index, target in enumerate(targets)
            ),
            is_start_scene=scene_id == start,
        )
        for scene_id, targets in edges.items()
    )


@pytest.fixture()
def make_scenes() -> Any:
    """Factory fixture exposing :func:`build_scenes` to tests."""

    return build_scenes


@pytest.fixture()
def sample_scenario() -> Scenario:
    """Return a small acyclic scenario with one orphaned scene."""

    return Scenario(
        id="haunted-manor",
        title="The Haunted Manor",
        description="A short branching ghost story.",
        scenes=build_scenes(
            {
                "gate": ["hall", "garden"],
                "hall": ["attic"],
                "garden": ["attic"],
                "attic": [],
                "cellar": [],
            },
            start="gate",
        ),
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-01T00:00:00+00:00",
    )


__all__ = ["build_scenes", "make_scenes", "sample_scenario"]
