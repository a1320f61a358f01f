from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List

from domain.equipment import DuplicateIdError, Equipment
from domain.models import (
    EquipmentRecord,
    EquipmentType,
    Point,
    build_attributes,
    normalize_equipment_type,
)

logger = logging.getLogger(__name__)

RecordLike = EquipmentRecord | Mapping[str, Any]


def to_record(data: RecordLike) -> EquipmentRecord:
    if isinstance(data, EquipmentRecord):
        return data
    return EquipmentRecord.model_validate(dict(data))


def validate_records(records: Iterable[RecordLike]) -> List[EquipmentRecord]:
    """Parse a batch and check ids and subtype attributes without touching a registry."""
    parsed = [to_record(data) for data in records]
    seen: set[str] = set()
    for record in parsed:
        if record.id in seen:
            raise DuplicateIdError(record.id)
        seen.add(record.id)
        build_attributes(record.type, record.attribute_values())
    return parsed


class EquipmentRegistry:
    """Owns equipment identity for one diagram.

    Mutations and snapshot reads take the registry lock; equipment returned
    from the registry is live and may be linked or repositioned by the caller.
    """

    def __init__(self) -> None:
        self._items: Dict[str, Equipment] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, equipment_id: object) -> bool:
        return equipment_id in self._items

    def create(
        self,
        equipment_id: str,
        name: str,
        equipment_type: EquipmentType | str,
        attrs: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
        position: Point | Mapping[str, Any] | None = None,
    ) -> Equipment:
        kind = normalize_equipment_type(equipment_type)
        attributes = build_attributes(kind, dict(attrs or {}))
        with self._lock:
            if equipment_id in self._items:
                raise DuplicateIdError(equipment_id)
            equipment = Equipment(
                equipment_id,
                name,
                kind,
                attributes=attributes,
                metadata=metadata,
                position=position,
            )
            self._items[equipment_id] = equipment
        logger.debug("Created %r", equipment)
        return equipment

    def get_by_id(
        self, equipment_id: str, equipment_type: EquipmentType | str | None = None
    ) -> Equipment | None:
        equipment = self._items.get(equipment_id)
        if equipment is None:
            return None
        if equipment_type is not None and equipment.type != normalize_equipment_type(
            equipment_type
        ):
            return None
        return equipment

    def get_all(self) -> List[Equipment]:
        with self._lock:
            return list(self._items.values())

    def get_all_by_type(self, equipment_type: EquipmentType | str) -> List[Equipment]:
        kind = normalize_equipment_type(equipment_type)
        with self._lock:
            return [item for item in self._items.values() if item.type == kind]

    def connect_by_id(self, source_id: str, load_id: str) -> bool:
        with self._lock:
            source = self._items.get(source_id)
            load = self._items.get(load_id)
            if source is None or load is None:
                return False
            source.add_load(load)
            return True

    def disconnect_by_id(self, source_id: str, load_id: str) -> bool:
        with self._lock:
            source = self._items.get(source_id)
            load = self._items.get(load_id)
            if source is None or load is None:
                return False
            source.remove_load(load)
            return True

    def remove(self, equipment_id: str) -> bool:
        with self._lock:
            equipment = self._items.pop(equipment_id, None)
            if equipment is None:
                return False
            equipment.disconnect_all()
        logger.debug("Removed %r", equipment)
        return True

    def clear(self) -> None:
        with self._lock:
            for equipment in self._items.values():
                equipment.disconnect_all()
            self._items.clear()
        logger.debug("Registry cleared")

    def from_json(self, data: RecordLike) -> Equipment:
        record = to_record(data)
        position = record.position.model_dump() if record.position is not None else None
        return self.create(
            record.id,
            record.name,
            record.type,
            attrs=record.attribute_values(),
            metadata=record.metadata,
            position=position,
        )

    def rebuild_connections(self, records: Iterable[RecordLike]) -> None:
        parsed = [to_record(data) for data in records]
        with self._lock:
            for record in parsed:
                equipment = self._items.get(record.id)
                if equipment is None:
                    logger.warning("Skipping links of unknown equipment %s", record.id)
                    continue
                for load_id in record.load_ids:
                    load = self._items.get(load_id)
                    if load is None:
                        logger.warning("Equipment %s references missing load %s", record.id, load_id)
                        continue
                    equipment.add_load(load)
                for source_id in record.source_ids:
                    source = self._items.get(source_id)
                    if source is None:
                        logger.warning(
                            "Equipment %s references missing source %s", record.id, source_id
                        )
                        continue
                    equipment.add_source(source)
            # Adjacency order follows the records, whatever order they were linked in.
            for record in parsed:
                equipment = self._items.get(record.id)
                if equipment is not None:
                    equipment.reorder_links(record.source_ids, record.load_ids)

    def load_records(self, records: Iterable[RecordLike]) -> List[Equipment]:
        # The current contents survive a batch that fails validation.
        parsed = validate_records(records)
        with self._lock:
            self.clear()
            created = [self.from_json(record) for record in parsed]
            self.rebuild_connections(parsed)
        logger.debug("Loaded %d equipment records", len(created))
        return created

    def dump(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [equipment.to_json() for equipment in self._items.values()]
