from __future__ import annotations

from collections.abc import Iterable

from domain.equipment import Equipment
from domain.models import LayoutResult
from domain.ports.layout import LayoutEngine
from domain.registry import EquipmentRegistry
from domain.services.display_adapter import to_display_connections, to_display_nodes


class EquipmentToDiagramConverter:
    def __init__(self, layout_engine: LayoutEngine) -> None:
        self.layout_engine = layout_engine

    def convert(self, equipment: Iterable[Equipment]) -> LayoutResult:
        snapshot = list(equipment)
        nodes = to_display_nodes(snapshot)
        connections = to_display_connections(snapshot)
        return self.layout_engine.calculate_layout(nodes, connections)

    def convert_registry(self, registry: EquipmentRegistry) -> LayoutResult:
        return self.convert(registry.get_all())
