from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Dict, List

from domain.models import ORIGIN, EquipmentType, Point, build_attributes


class DuplicateIdError(ValueError):
    def __init__(self, equipment_id: str) -> None:
        super().__init__(f'Equipment with ID "{equipment_id}" already exists')
        self.equipment_id = equipment_id


def coerce_point(value: Point | Mapping[str, Any] | None) -> Point:
    if value is None:
        return ORIGIN
    if isinstance(value, Point):
        return value
    return Point(float(value.get("x", 0.0) or 0.0), float(value.get("y", 0.0) or 0.0))


class Equipment:
    """A node of the single-line diagram graph.

    Sources feed this equipment and loads are fed by it. Every link is stored on
    both ends, so ``a.add_load(b)`` and ``b.add_source(a)`` are the same
    operation. Adjacency keeps insertion order and never holds an id twice.
    """

    def __init__(
        self,
        equipment_id: str,
        name: str,
        equipment_type: EquipmentType,
        attributes: Any = None,
        metadata: Mapping[str, Any] | None = None,
        position: Point | Mapping[str, Any] | None = None,
    ) -> None:
        self.id = equipment_id
        self.name = name
        self.type = equipment_type
        self.attributes = attributes if attributes is not None else build_attributes(equipment_type)
        self.metadata: Dict[str, Any] = dict(metadata or {})
        self._position = coerce_point(position)
        self._sources: Dict[str, Equipment] = {}
        self._loads: Dict[str, Equipment] = {}

    @property
    def position(self) -> Point:
        return self._position

    @position.setter
    def position(self, value: Point | Mapping[str, Any] | None) -> None:
        self._position = coerce_point(value)

    @property
    def sources(self) -> tuple[Equipment, ...]:
        return tuple(self._sources.values())

    @property
    def loads(self) -> tuple[Equipment, ...]:
        return tuple(self._loads.values())

    @property
    def source_ids(self) -> List[str]:
        return list(self._sources)

    @property
    def load_ids(self) -> List[str]:
        return list(self._loads)

    @property
    def connections(self) -> tuple[Equipment, ...]:
        linked: Dict[str, Equipment] = dict(self._sources)
        for load_id, load in self._loads.items():
            linked.setdefault(load_id, load)
        return tuple(linked.values())

    def add_load(self, load: Equipment) -> None:
        self._loads.setdefault(load.id, load)
        load._sources.setdefault(self.id, self)

    def add_source(self, source: Equipment) -> None:
        source.add_load(self)

    def remove_load(self, load: Equipment) -> None:
        if self._loads.get(load.id) is load:
            del self._loads[load.id]
        if load._sources.get(self.id) is self:
            del load._sources[self.id]

    def remove_source(self, source: Equipment) -> None:
        source.remove_load(self)

    def is_connected_to(self, other: Equipment) -> bool:
        return self._sources.get(other.id) is other or self._loads.get(other.id) is other

    def disconnect_all(self) -> None:
        for source in self.sources:
            source.remove_load(self)
        for load in self.loads:
            self.remove_load(load)

    def reorder_links(self, source_ids: Iterable[str], load_ids: Iterable[str]) -> None:
        self._sources = _reordered(self._sources, source_ids)
        self._loads = _reordered(self._loads, load_ids)

    def sources_by_type(self, equipment_type: EquipmentType) -> List[Equipment]:
        return [source for source in self._sources.values() if source.type == equipment_type]

    def loads_by_type(self, equipment_type: EquipmentType) -> List[Equipment]:
        return [load for load in self._loads.values() if load.type == equipment_type]

    def connections_by_type(self, equipment_type: EquipmentType) -> List[Equipment]:
        return [item for item in self.connections if item.type == equipment_type]

    def to_json(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "sourceIds": self.source_ids,
            "loadIds": self.load_ids,
            "position": self.position.to_dict(),
        }
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        payload.update(self.attributes.model_dump(mode="json", by_alias=True, exclude={"kind"}))
        return payload

    def __repr__(self) -> str:
        return f"Equipment({self.id}: {self.name} [{self.type.value}])"


def _reordered(links: Dict[str, Equipment], preferred: Iterable[str]) -> Dict[str, Equipment]:
    ordered: Dict[str, Equipment] = {}
    for link_id in preferred:
        if link_id in links:
            ordered[link_id] = links[link_id]
    for link_id, equipment in links.items():
        ordered.setdefault(link_id, equipment)
    return ordered
