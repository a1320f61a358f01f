from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Dict, List, Literal, Protocol, Tuple

from adapters.layout.config import LayoutConfig
from domain.models import DisplayConnection, DisplayNode, Point, Size

NodeMap = Dict[str, DisplayNode]
RoutingStyle = Literal["straight", "right_angle", "manhattan"]
Indexed = Tuple[int, DisplayConnection]


@dataclass(frozen=True)
class PathingOptions:
    routing_style: RoutingStyle = "right_angle"
    minimum_horizontal_extension: float | None = None
    vertical_offset: float | None = None


class PathCalculator(Protocol):
    def calculate_path(
        self, source: DisplayNode, target: DisplayNode, options: PathingOptions | None = None
    ) -> List[float]:
        ...


class StraightLinePathCalculator:
    def calculate_path(
        self, source: DisplayNode, target: DisplayNode, options: PathingOptions | None = None
    ) -> List[float]:
        return [source.center_x, source.bottom, target.center_x, target.position.y]


class RightAnglePathCalculator:
    default_vertical_offset = 10.0

    def calculate_path(
        self, source: DisplayNode, target: DisplayNode, options: PathingOptions | None = None
    ) -> List[float]:
        offset = self.default_vertical_offset
        if options is not None and options.vertical_offset is not None:
            offset = options.vertical_offset
        source_x, source_y = source.center_x, source.bottom
        target_x, target_y = target.center_x, target.position.y
        mid_y = source_y + abs(target_y - source_y) / 2 + offset
        return [
            source_x, source_y,
            source_x, mid_y,
            target_x, mid_y,
            target_x, target_y,
        ]  # fmt: skip


class MultiSourcePathCalculator:
    """Routes several sources into one target over a shared horizontal segment."""

    default_horizontal_extension = 30.0
    default_vertical_offset = 15.0

    def calculate_multi_source_paths(
        self,
        sources: Sequence[DisplayNode],
        target: DisplayNode,
        options: PathingOptions | None = None,
    ) -> List[List[float]]:
        if not sources:
            return []
        extension = self.default_horizontal_extension
        offset = self.default_vertical_offset
        if options is not None:
            if options.minimum_horizontal_extension is not None:
                extension = options.minimum_horizontal_extension
            if options.vertical_offset is not None:
                offset = options.vertical_offset

        all_nodes = [*sources, target]
        min_x = min(node.position.x for node in all_nodes)
        max_x = max(node.right for node in all_nodes)
        max_source_y = max(node.bottom for node in sources)
        bus_y = max_source_y + abs(target.position.y - max_source_y) / 2 + offset
        bus_start_x = min_x - extension
        bus_end_x = max_x + extension
        target_x = target.center_x

        return [
            [
                source.center_x, source.bottom,
                source.center_x, bus_y,
                bus_start_x, bus_y,
                bus_end_x, bus_y,
                target_x, bus_y,
                target_x, target.position.y,
            ]  # fmt: skip
            for source in sources
        ]


def create_path_calculator(routing_style: RoutingStyle) -> PathCalculator:
    if routing_style in {"right_angle", "manhattan"}:
        return RightAnglePathCalculator()
    return StraightLinePathCalculator()


def calculate_connection_paths(
    connections: Sequence[DisplayConnection],
    node_map: NodeMap,
    options: PathingOptions | None = None,
) -> List[DisplayConnection]:
    calculator = create_path_calculator(options.routing_style if options else "right_angle")
    routed: List[DisplayConnection] = []
    for conn in connections:
        source = node_map.get(conn.source_id)
        target = node_map.get(conn.target_id)
        if source is None or target is None:
            routed.append(replace(conn, points=[]))
            continue
        routed.append(replace(conn, points=calculator.calculate_path(source, target, options)))
    return routed


class ConnectorRouter:
    """Computes connector polylines against a shared node map.

    Bus routing resizes bus nodes in ``node_map``; the resized entries replace
    the positioned ones so later passes see the stretched bar.
    """

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def route(
        self, connections: Sequence[DisplayConnection], node_map: NodeMap
    ) -> List[DisplayConnection]:
        bus_connections: List[Indexed] = []
        regular_connections: List[Indexed] = []
        for index, conn in enumerate(connections):
            if self._bus_id(conn, node_map) is not None:
                bus_connections.append((index, conn))
            else:
                regular_connections.append((index, conn))

        # Bus legs first: they resize bus nodes in the shared map.
        routed: Dict[int, DisplayConnection] = dict(
            self._route_bus_connections(bus_connections, node_map)
        )
        routed.update(self._route_regular_connections(regular_connections, node_map))
        return [routed[index] for index in range(len(connections))]

    def _bus_id(self, conn: DisplayConnection, node_map: NodeMap) -> str | None:
        source = node_map.get(conn.source_id)
        target = node_map.get(conn.target_id)
        if source is not None and source.is_bus:
            return source.id
        if target is not None and target.is_bus:
            return target.id
        return None

    def _route_bus_connections(
        self, connections: Sequence[Indexed], node_map: NodeMap
    ) -> List[Indexed]:
        by_bus: Dict[str, List[Indexed]] = {}
        for index, conn in connections:
            bus_id = self._bus_id(conn, node_map)
            if bus_id is not None:
                by_bus.setdefault(bus_id, []).append((index, conn))

        results: List[Indexed] = []
        for bus_id, bus_connections in by_bus.items():
            centers: List[float] = []
            for _, conn in bus_connections:
                other_id = conn.target_id if conn.source_id == bus_id else conn.source_id
                other = node_map.get(other_id)
                if other is not None:
                    centers.append(other.center_x)

            bus = node_map[bus_id]
            if centers:
                min_x, max_x = min(centers), max(centers)
                padding = self.config.bus_padding
                width = max(self.config.min_bus_width, max_x - min_x + padding * 2)
                bus = replace(
                    bus,
                    position=Point(min_x - padding, bus.position.y),
                    size=Size(width, bus.size.height),
                )
                node_map[bus_id] = bus

            for index, conn in bus_connections:
                source = node_map.get(conn.source_id)
                target = node_map.get(conn.target_id)
                if source is None or target is None:
                    results.append((index, replace(conn, points=[])))
                    continue
                if conn.source_id == bus_id:
                    x = target.center_x
                    points = [x, bus.bottom, x, target.position.y]
                else:
                    x = source.center_x
                    points = [x, source.bottom, x, bus.position.y]
                results.append((index, replace(conn, points=points)))
        return results

    def _route_regular_connections(
        self, connections: Sequence[Indexed], node_map: NodeMap
    ) -> List[Indexed]:
        by_target: Dict[str, List[Indexed]] = {}
        for index, conn in connections:
            by_target.setdefault(conn.target_id, []).append((index, conn))

        results: List[Indexed] = []
        for target_id, target_connections in by_target.items():
            target = node_map.get(target_id)
            if len(target_connections) == 1 or target is None:
                options = PathingOptions(
                    routing_style="right_angle",
                    vertical_offset=self.config.vertical_offset,
                    minimum_horizontal_extension=self.config.single_source_extension,
                )
                routed = calculate_connection_paths(
                    [conn for _, conn in target_connections], node_map, options
                )
                results.extend(
                    (index, conn) for (index, _), conn in zip(target_connections, routed)
                )
                continue

            known = [
                (index, conn) for index, conn in target_connections if conn.source_id in node_map
            ]
            options = PathingOptions(
                routing_style="right_angle",
                vertical_offset=self.config.vertical_offset,
                minimum_horizontal_extension=self.config.multi_source_extension,
            )
            paths = MultiSourcePathCalculator().calculate_multi_source_paths(
                [node_map[conn.source_id] for _, conn in known], target, options
            )
            path_by_index = {index: path for (index, _), path in zip(known, paths)}
            for index, conn in target_connections:
                results.append((index, replace(conn, points=path_by_index.get(index, []))))
        return results


def adjust_bus_nodes(
    connections: Sequence[DisplayConnection], node_map: NodeMap, config: LayoutConfig
) -> None:
    """Resize each connected bus from the spans of its routed connections.

    A connection spans the horizontal distance between its endpoints plus the
    wider endpoint. The bus takes the widest span, clamped to the minimum bus
    width and scaled by ``bus_width_ratio``; its x stays where routing put it.
    """
    for bus in [node for node in node_map.values() if node.is_bus]:
        spans: List[float] = []
        for conn in connections:
            if bus.id not in (conn.source_id, conn.target_id):
                continue
            source = node_map.get(conn.source_id)
            target = node_map.get(conn.target_id)
            if source is None or target is None:
                spans.append(0.0)
                continue
            spans.append(
                abs(source.position.x - target.position.x)
                + max(source.size.width, target.size.width)
            )
        if not spans:
            continue
        width = max(config.min_bus_width, *spans) * config.bus_width_ratio
        node_map[bus.id] = replace(bus, size=Size(width, bus.size.height))
