from __future__ import annotations

import logging
from collections.abc import Sequence

from adapters.layout.config import LayoutConfig
from adapters.layout.layering import LayeringEngine, NodeMap
from adapters.layout.routing import ConnectorRouter, adjust_bus_nodes
from domain.models import DisplayConnection, DisplayNode, LayoutResult

logger = logging.getLogger(__name__)


class VerticalHierarchyLayout:
    """Top-down layered layout with orthogonal connectors.

    Every call builds its own node map; layering, routing and the final bus
    pass overwrite entries in it, and the last written entry wins.
    """

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()
        self.layering = LayeringEngine(self.config)
        self.router = ConnectorRouter(self.config)

    def calculate_layout(
        self, nodes: Sequence[DisplayNode], connections: Sequence[DisplayConnection]
    ) -> LayoutResult:
        node_map: NodeMap = {node.id: node for node in nodes}
        layers = self.layering.layer(list(node_map.values()), connections)
        self.layering.position(node_map, layers)
        routed = self.router.route(connections, node_map)
        adjust_bus_nodes(routed, node_map, self.config)
        logger.debug(
            "Laid out %d nodes in %d layers with %d connections",
            len(node_map),
            len(layers),
            len(routed),
        )
        return LayoutResult(nodes=list(node_map.values()), connections=routed)
