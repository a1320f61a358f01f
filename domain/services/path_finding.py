from __future__ import annotations

from collections.abc import Iterator

from domain.equipment import Equipment
from domain.registry import EquipmentRegistry


def find_path(start: Equipment, goal: Equipment) -> list[Equipment] | None:
    """Return the first path found by a depth-first walk over ``connections``.

    Links are followed in both directions and neighbours are tried in
    ``connections`` order. Each equipment is expanded at most once, so cyclic
    graphs terminate; the walk keeps its own stack instead of recursing.
    """
    if start is goal:
        return [start]
    visited = {start.id}
    path = [start]
    pending: list[Iterator[Equipment]] = [iter(start.connections)]
    while pending:
        neighbor = next(pending[-1], None)
        if neighbor is None:
            pending.pop()
            path.pop()
            continue
        if neighbor is goal:
            return [*path, neighbor]
        if neighbor.id in visited:
            continue
        visited.add(neighbor.id)
        path.append(neighbor)
        pending.append(iter(neighbor.connections))
    return None


def find_path_by_id(
    registry: EquipmentRegistry, start_id: str, goal_id: str
) -> list[Equipment] | None:
    start = registry.get_by_id(start_id)
    goal = registry.get_by_id(goal_id)
    if start is None or goal is None:
        return None
    return find_path(start, goal)
