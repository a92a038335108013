"""Structural reports for scenario scene graphs."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from .cycles import find_cycle
from .layout import (
    DEFAULT_HORIZONTAL_SPACING,
    DEFAULT_LEVEL_SPACING,
    DEFAULT_MAX_DEPTH,
    LayoutSettings,
    compute_scene_positions,
    resolve_layout_root,
)
from .model import Position, Scene


@dataclass(frozen=True)
class SceneGraphReachabilityReport:
    """Summary of which scenes can be visited from the start scene."""

    start_scene: str | None
    reachable_scenes: tuple[str, ...]
    unreachable_scenes: tuple[str, ...]

    @property
    def reachable_count(self) -> int:
        """Return the number of reachable scenes including the start."""

        return len(self.reachable_scenes)

    @property
    def unreachable_count(self) -> int:
        return len(self.unreachable_scenes)

    @property
    def total_scene_count(self) -> int:
        return self.reachable_count + self.unreachable_count

    @property
    def fully_reachable(self) -> bool:
        """Return ``True`` if every scene can be visited."""

        return self.unreachable_count == 0


@dataclass(frozen=True)
class DanglingChoice:
    """A choice whose target does not match any scene."""

    scene_id: str
    choice_id: str
    target_scene_id: str


@dataclass(frozen=True)
class SceneGraphReport:
    """Aggregated structural findings for a scenario."""

    scene_count: int
    choice_count: int
    start_scenes: tuple[str, ...]
    layout_root: str | None
    reachability: SceneGraphReachabilityReport
    dangling_choices: tuple[DanglingChoice, ...]
    cycle: tuple[str, ...] | None
    positions: Mapping[str, Position]

    @property
    def has_cycle(self) -> bool:
        return self.cycle is not None

    @property
    def has_multiple_start_scenes(self) -> bool:
        return len(self.start_scenes) > 1

    @property
    def has_issues(self) -> bool:
        """Return ``True`` when any structural defect was detected."""

        return (
            self.has_cycle
            or self.has_multiple_start_scenes
            or not self.start_scenes
            or bool(self.dangling_choices)
            or not self.reachability.fully_reachable
        )


def compute_scene_reachability(
    scenes: Sequence[Scene],
    *,
    settings: LayoutSettings | None = None,
) -> SceneGraphReachabilityReport:
    """Determine which scenes are reachable from the layout root.

    The root is chosen with the same rules as the layout. Without a root no
    scene is considered reachable.
    """

    index = {scene.id: scene for scene in scenes}
    root = resolve_layout_root(scenes, settings)
    visited: set[str] = set()

    if root is not None:
        frontier = [root.id]
        while frontier:
            current = frontier.pop()
            if current in visited:
                continue

            visited.add(current)
            for target in index[current].iter_target_ids():
                if target in index and target not in visited:
                    frontier.append(target)

    reachable = tuple(sorted(visited))
    unreachable = tuple(
        sorted(scene_id for scene_id in index if scene_id not in visited)
    )

    return SceneGraphReachabilityReport(
        start_scene=root.id if root is not None else None,
        reachable_scenes=reachable,
        unreachable_scenes=unreachable,
    )


def find_dangling_choices(scenes: Sequence[Scene]) -> tuple[DanglingChoice, ...]:
    """Return every choice whose target is empty or names an unknown scene."""

    known = {scene.id for scene in scenes}
    return tuple(
        DanglingChoice(scene.id, choice.id, choice.target_scene_id)
        for scene in scenes
        for choice in scene.choices
        if choice.target_scene_id not in known
    )


def analyse_scene_graph(
    scenes: Sequence[Scene],
    *,
    settings: LayoutSettings | None = None,
) -> SceneGraphReport:
    """Run layout, reachability and cycle analysis over ``scenes``."""

    resolved = settings or LayoutSettings()
    root = resolve_layout_root(scenes, resolved)

    return SceneGraphReport(
        scene_count=len({scene.id for scene in scenes}),
        choice_count=sum(len(scene.choices) for scene in scenes),
        start_scenes=tuple(scene.id for scene in scenes if scene.is_start_scene),
        layout_root=root.id if root is not None else None,
        reachability=compute_scene_reachability(scenes, settings=resolved),
        dangling_choices=find_dangling_choices(scenes),
        cycle=find_cycle(scenes),
        positions=compute_scene_positions(scenes, resolved),
    )


def _format_number(value: float) -> str:
    return f"{value:g}"


def format_reachability_report(report: SceneGraphReachabilityReport) -> str:
    """Return a human-friendly report describing scene reachability."""

    lines = [
        "Scene Reachability",
        "==================",
        f"Start scene: {report.start_scene or '(none)'}",
        f"Reachable scenes: {report.reachable_count} / {report.total_scene_count}",
    ]

    if report.reachable_scenes:
        lines.append("Reachable scene list: " + ", ".join(report.reachable_scenes))

    if report.unreachable_scenes:
        lines.append("Unreachable scenes detected:")
        lines.extend(f"- {scene}" for scene in report.unreachable_scenes)
    else:
        lines.append("All scenes are reachable from the start scene.")

    return "\n".join(lines)


def format_scene_graph_report(report: SceneGraphReport) -> str:
    """Return a human-friendly report of the structural analysis."""

    lines = [
        "Scene Graph",
        "===========",
        f"Scenes: {report.scene_count}",
        f"Choices: {report.choice_count}",
        "Start scenes: " + (", ".join(report.start_scenes) or "(none)"),
        f"Layout root: {report.layout_root or '(none)'}",
    ]

    if report.has_multiple_start_scenes:
        lines.append(
            "Multiple start scenes are flagged; only the first seeds the layout."
        )

    if report.cycle is not None:
        lines.append("Loop detected: " + " -> ".join(report.cycle))
    else:
        lines.append("No loops detected.")

    if report.dangling_choices:
        lines.append("Choices targeting unknown scenes:")
        lines.extend(
            f"- {entry.scene_id} :: {entry.choice_id} -> "
            f"{entry.target_scene_id or '(empty)'}"
            for entry in report.dangling_choices
        )

    lines.append("")
    lines.append(format_reachability_report(report.reachability))

    lines.append("")
    lines.append("Positions")
    lines.append("=========")
    if report.positions:
        lines.extend(
            f"- {scene_id}: "
            f"({_format_number(position.x)}, {_format_number(position.y)})"
            for scene_id, position in report.positions.items()
        )
    else:
        lines.append("No layout: no start scene is flagged.")

    return "\n".join(lines)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Analyse the scene graph of a scenario definition file."
    )
    parser.add_argument(
        "scenario_file",
        nargs="?",
        type=Path,
        help=(
            "Path to a JSON scenario (or a JSON list of scenes). "
            "Reads standard input when omitted."
        ),
    )
    parser.add_argument(
        "--fallback-root",
        action="store_true",
        help=(
            "Lay out from the scene with the smallest identifier when no start "
            "scene is flagged."
        ),
    )
    parser.add_argument(
        "--horizontal-spacing",
        type=float,
        default=DEFAULT_HORIZONTAL_SPACING,
        help="Horizontal distance between neighbouring leaves.",
    )
    parser.add_argument(
        "--level-spacing",
        type=float,
        default=DEFAULT_LEVEL_SPACING,
        help="Vertical distance between depth levels.",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help="Depth beyond which scenes are laid out as leaves.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print positions and the detected loop as JSON.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by ``python -m scenegraph.analytics``.

    Returns ``1`` when the scenario contains a loop and ``0`` otherwise.
    """

    from .mapping import load_scenario_from_file, load_scenario_from_json

    args = _parse_args(argv)
    settings = LayoutSettings(
        horizontal_spacing=args.horizontal_spacing,
        level_spacing=args.level_spacing,
        max_depth=args.max_depth,
        fallback_to_first_scene=args.fallback_root,
    )
    if args.scenario_file is None:
        scenario = load_scenario_from_json(json.load(sys.stdin), default_id="stdin")
    else:
        scenario = load_scenario_from_file(args.scenario_file)
    report = analyse_scene_graph(scenario.scenes, settings=settings)

    if args.json:
        payload = {
            "scenario_id": scenario.id,
            "start_scene": report.layout_root,
            "has_cycle": report.has_cycle,
            "cycle": list(report.cycle) if report.cycle is not None else None,
            "positions": {
                scene_id: position.as_dict()
                for scene_id, position in report.positions.items()
            },
        }
        print(json.dumps(payload, indent=2))
    else:
        print(format_scene_graph_report(report))

    return 1 if report.has_cycle else 0


if __name__ == "__main__":  # pragma: no cover - convenience CLI
    raise SystemExit(main())
