from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Dict, List

from adapters.layout.config import LayoutConfig
from domain.models import DisplayConnection, DisplayNode, Point

NodeMap = Dict[str, DisplayNode]


def build_dependency_graph(
    nodes: Iterable[DisplayNode], connections: Iterable[DisplayConnection]
) -> Dict[str, List[str]]:
    graph: Dict[str, List[str]] = {node.id: [] for node in nodes}
    for conn in connections:
        targets = graph.get(conn.source_id)
        if targets is None or conn.target_id not in graph:
            continue
        if conn.target_id not in targets:
            targets.append(conn.target_id)
    return graph


def assign_layers(graph: Dict[str, List[str]]) -> List[List[str]]:
    """Kahn's algorithm, one layer per batch of zero in-degree nodes.

    When no node is free but some remain, the graph has a cycle and every
    remaining node goes into one final layer.
    """
    in_degree: Dict[str, int] = {node_id: 0 for node_id in graph}
    for targets in graph.values():
        for target in targets:
            in_degree[target] += 1

    layers: List[List[str]] = []
    while in_degree:
        free = [node_id for node_id, degree in in_degree.items() if degree == 0]
        if not free:
            layers.append(list(in_degree))
            break
        for node_id in free:
            del in_degree[node_id]
            for target in graph.get(node_id, []):
                if target in in_degree:
                    in_degree[target] -= 1
        layers.append(free)
    return layers


class LayeringEngine:
    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def layer(
        self, nodes: Sequence[DisplayNode], connections: Sequence[DisplayConnection]
    ) -> List[List[str]]:
        return assign_layers(build_dependency_graph(nodes, connections))

    def position(self, node_map: NodeMap, layers: Sequence[Sequence[str]]) -> None:
        """Center every layer horizontally; overwrites positions in ``node_map``."""
        for layer_index, layer in enumerate(layers):
            y = self.config.margin + layer_index * self.config.layer_spacing
            members = [node_map[node_id] for node_id in layer if node_id in node_map]
            total_width = sum(node.size.width for node in members) + max(
                len(members) - 1, 0
            ) * self.config.node_spacing
            x = self.config.margin + max(0.0, (self.config.canvas_width - total_width) / 2)
            for node in members:
                node_map[node.id] = replace(node, position=Point(x, y))
                x += node.size.width + self.config.node_spacing
