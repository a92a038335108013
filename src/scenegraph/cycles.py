"""Cycle detection over the choice graph of a scenario."""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from .model import Scene

logger = logging.getLogger(__name__)


def resolve_cycle_roots(scenes: Sequence[Scene]) -> tuple[Scene, ...]:
    """Return the scenes the cycle search starts from.

    Every scene flagged as a start scene is a root. When none is flagged all
    scenes are scanned so isolated cyclic clusters are still caught.
    """

    starts = tuple(scene for scene in scenes if scene.is_start_scene)
    return starts or tuple(scenes)


def find_cycle(scenes: Sequence[Scene]) -> tuple[str, ...] | None:
    """Return the scene ids of the first cycle reachable from the roots.

    The returned path starts and ends with the same scene id, for example
    ``("a", "b", "a")`` or ``("a", "a")`` for a self-loop. ``None`` means the
    graph is acyclic. Choices whose target does not exist are ignored.
    """

    index = {scene.id: scene for scene in scenes}
    visited: set[str] = set()

    for root in resolve_cycle_roots(scenes):
        if root.id in visited:
            continue

        path: list[str] = [root.id]
        on_stack: set[str] = {root.id}
        visited.add(root.id)
        stack: list[Iterator[str]] = [iter(index[root.id].iter_target_ids())]

        while stack:
            target = next(stack[-1], None)
            if target is None:
                stack.pop()
                on_stack.discard(path.pop())
                continue

            if target not in index:
                continue
            if target in on_stack:
                cycle = (*path[path.index(target):], target)
                logger.debug("Cycle detected: %s", " -> ".join(cycle))
                return cycle
            if target in visited:
                continue

            visited.add(target)
            on_stack.add(target)
            path.append(target)
            stack.append(iter(index[target].iter_target_ids()))

    return None


def has_cycle(scenes: Sequence[Scene]) -> bool:
    """Return ``True`` when the choice graph contains a reachable cycle."""

    return find_cycle(scenes) is not None


__all__ = ["find_cycle", "has_cycle", "resolve_cycle_roots"]
