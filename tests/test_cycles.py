"""Tests for loop detection in scene graphs."""

from __future__ import annotations

from dataclasses import replace

from scenegraph.cycles import find_cycle, has_cycle, resolve_cycle_roots


def test_empty_graph_has_no_cycle() -> None:
    assert has_cycle([]) is False
    assert find_cycle([]) is None


def test_self_loop_is_a_cycle(make_scenes) -> None:
    scenes = make_scenes({"a": ["a"]}, start="a")

    assert has_cycle(scenes) is True
    assert find_cycle(scenes) == ("a", "a")


def test_two_scene_loop_is_a_cycle(make_scenes) -> None:
    scenes = make_scenes({"a": ["b"], "b": ["a"]}, start="a")

    assert has_cycle(scenes) is True
    assert find_cycle(scenes) == ("a", "b", "a")


def test_cycle_path_starts_at_loop_entry(make_scenes) -> None:
    scenes = make_scenes({"a": ["b"], "b": ["c"], "c": ["b"]}, start="a")

    assert find_cycle(scenes) == ("b", "c", "b")


def test_diamond_is_not_a_cycle(make_scenes) -> None:
    scenes = make_scenes(
        {"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []}, start="a"
    )

    assert has_cycle(scenes) is False


def test_dangling_choice_is_skipped(make_scenes) -> None:
    scenes = make_scenes({"a": ["nonexistent-id"]}, start="a")

    assert has_cycle(scenes) is False


def test_unreachable_loop_is_ignored_when_start_is_flagged(make_scenes) -> None:
    scenes = make_scenes({"a": [], "x": ["y"], "y": ["x"]}, start="a")

    assert has_cycle(scenes) is False


def test_every_scene_is_scanned_without_start_scene(make_scenes) -> None:
    scenes = make_scenes({"a": [], "x": ["y"], "y": ["x"]})

    assert [scene.id for scene in resolve_cycle_roots(scenes)] == ["a", "x", "y"]
    assert has_cycle(scenes) is True


def test_every_flagged_start_scene_is_a_root(make_scenes) -> None:
    scenes = list(make_scenes({"a": [], "x": ["y"], "y": ["x"]}, start="a"))
    scenes[1] = replace(scenes[1], is_start_scene=True)

    assert [scene.id for scene in resolve_cycle_roots(scenes)] == ["a", "x"]
    assert find_cycle(scenes) == ("x", "y", "x")


def test_long_acyclic_chain_is_checked_iteratively(make_scenes) -> None:
    chain = {f"s{index}": [f"s{index + 1}"] for index in range(4999)}
    chain["s4999"] = []

    assert has_cycle(make_scenes(chain, start="s0")) is False


def test_long_chain_closing_on_itself_is_a_cycle(make_scenes) -> None:
    chain = {f"s{index}": [f"s{index + 1}"] for index in range(4999)}
    chain["s4999"] = ["s0"]

    cycle = find_cycle(make_scenes(chain, start="s0"))

    assert cycle is not None
    assert cycle[0] == cycle[-1] == "s0"
    assert len(cycle) == 5001


def test_detection_does_not_depend_on_previous_calls(make_scenes) -> None:
    scenes = make_scenes({"a": ["b"], "b": ["a"]}, start="a")

    assert has_cycle(scenes) is True
    assert has_cycle(scenes) is True
