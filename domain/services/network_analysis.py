from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from domain.equipment import Equipment


@dataclass(frozen=True)
class NetworkGraph:
    vertices: list[str]
    adjacency: dict[str, list[str]]


@dataclass(frozen=True)
class NetworkAnalysis:
    total_equipment: int
    edges: int
    sources: list[str]
    sinks: list[str]
    branch_nodes: list[str]
    merge_nodes: list[str]
    cycles: list[list[str]]
    max_depth: int
    weakly_connected: bool

    @property
    def is_acyclic(self) -> bool:
        return not self.cycles

    def to_dict(self) -> dict:
        return {
            "totalEquipment": self.total_equipment,
            "edges": self.edges,
            "sources": list(self.sources),
            "sinks": list(self.sinks),
            "branchNodes": list(self.branch_nodes),
            "mergeNodes": list(self.merge_nodes),
            "cycles": [list(cycle) for cycle in self.cycles],
            "maxDepth": self.max_depth,
            "weaklyConnected": self.weakly_connected,
        }


def build_network_graph(equipment: Iterable[Equipment]) -> NetworkGraph:
    items = list(equipment)
    vertices = [item.id for item in items]
    known = set(vertices)
    adjacency: dict[str, list[str]] = {
        item.id: [load_id for load_id in item.load_ids if load_id in known] for item in items
    }
    return NetworkGraph(vertices=vertices, adjacency=adjacency)


def analyze_network(equipment: Iterable[Equipment]) -> NetworkAnalysis:
    graph = build_network_graph(equipment)
    in_degree = {node: 0 for node in graph.vertices}
    for targets in graph.adjacency.values():
        for target in targets:
            in_degree[target] += 1
    out_degree = {node: len(graph.adjacency[node]) for node in graph.vertices}

    return NetworkAnalysis(
        total_equipment=len(graph.vertices),
        edges=sum(out_degree.values()),
        sources=[node for node in graph.vertices if in_degree[node] == 0],
        sinks=[node for node in graph.vertices if out_degree[node] == 0],
        branch_nodes=[node for node in graph.vertices if out_degree[node] > 1],
        merge_nodes=[node for node in graph.vertices if in_degree[node] > 1],
        cycles=_find_cycles(graph.vertices, graph.adjacency),
        max_depth=_max_depth(graph.vertices, graph.adjacency, in_degree),
        weakly_connected=_is_weakly_connected(graph.vertices, graph.adjacency),
    )


def _find_cycles(vertices: list[str], adjacency: Mapping[str, list[str]]) -> list[list[str]]:
    """Strongly connected components with a cycle, in vertex order.

    Tarjan's algorithm driven by an explicit work stack of child iterators.
    """
    counter = 0
    indices: dict[str, int] = {}
    lowlinks: dict[str, int] = {}
    component_stack: list[str] = []
    on_component_stack: set[str] = set()
    components: list[list[str]] = []

    def open_node(node: str) -> tuple[str, Iterator[str]]:
        nonlocal counter
        indices[node] = lowlinks[node] = counter
        counter += 1
        component_stack.append(node)
        on_component_stack.add(node)
        return node, iter(adjacency.get(node, []))

    for root in vertices:
        if root in indices:
            continue
        work = [open_node(root)]
        while work:
            node, children = work[-1]
            descended = False
            for child in children:
                if child not in indices:
                    work.append(open_node(child))
                    descended = True
                    break
                if child in on_component_stack:
                    lowlinks[node] = min(lowlinks[node], indices[child])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlinks[parent] = min(lowlinks[parent], lowlinks[node])
            if lowlinks[node] != indices[node]:
                continue
            component: list[str] = []
            while True:
                member = component_stack.pop()
                on_component_stack.discard(member)
                component.append(member)
                if member == node:
                    break
            components.append(component)

    order = {node: position for position, node in enumerate(vertices)}
    cycles = [
        sorted(component, key=order.__getitem__)
        for component in components
        if len(component) > 1 or component[0] in adjacency.get(component[0], [])
    ]
    cycles.sort(key=lambda cycle: order[cycle[0]])
    return cycles


def _max_depth(
    vertices: list[str], adjacency: Mapping[str, list[str]], in_degree: Mapping[str, int]
) -> int:
    # Longest path over the acyclic part; members of a cycle are never dequeued.
    remaining = dict(in_degree)
    levels: dict[str, int] = {}
    depth = 0
    queue = [node for node in vertices if remaining[node] == 0]
    while queue:
        node = queue.pop(0)
        level = levels.setdefault(node, 0)
        depth = max(depth, level)
        for target in adjacency.get(node, []):
            levels[target] = max(levels.get(target, 0), level + 1)
            remaining[target] -= 1
            if remaining[target] == 0:
                queue.append(target)
    return depth


def _is_weakly_connected(vertices: list[str], adjacency: Mapping[str, list[str]]) -> bool:
    # Union-find over the undirected edges.
    parent = {node: node for node in vertices}

    def root_of(node: str) -> str:
        while parent[node] != node:
            parent[node] = parent[parent[node]]
            node = parent[node]
        return node

    for source, targets in adjacency.items():
        for target in targets:
            parent[root_of(source)] = root_of(target)
    return len({root_of(node) for node in vertices}) <= 1
