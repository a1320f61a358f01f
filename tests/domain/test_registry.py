from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from domain.equipment import DuplicateIdError
from domain.models import BusAttributes, EquipmentType, Point
from domain.registry import EquipmentRegistry, validate_records


def test_create_and_lookup(registry: EquipmentRegistry) -> None:
    bus = registry.create("bus-1", "Main Bus", "bus", attrs={"voltage": 4.16})

    assert registry.get_by_id("bus-1") is bus
    assert bus.type is EquipmentType.BUS
    assert isinstance(bus.attributes, BusAttributes)
    assert bus.attributes.voltage == 4.16
    assert "bus-1" in registry
    assert len(registry) == 1


def test_create_rejects_duplicate_id(registry: EquipmentRegistry) -> None:
    registry.create("gen-1", "Generator", EquipmentType.GENERATOR)

    with pytest.raises(DuplicateIdError, match='Equipment with ID "gen-1" already exists'):
        registry.create("gen-1", "Other", EquipmentType.LOAD)

    assert registry.get_by_id("gen-1").type is EquipmentType.GENERATOR


def test_create_rejects_unknown_type(registry: EquipmentRegistry) -> None:
    with pytest.raises(ValueError, match="Unknown equipment type"):
        registry.create("x", "X", "Flux Capacitor")


def test_get_by_id_with_type_filter(registry: EquipmentRegistry) -> None:
    registry.create("gen-1", "Generator", EquipmentType.GENERATOR)

    assert registry.get_by_id("gen-1", EquipmentType.GENERATOR) is not None
    assert registry.get_by_id("gen-1", "Bus") is None
    assert registry.get_by_id("missing") is None


def test_get_all_by_type_keeps_insertion_order(registry: EquipmentRegistry) -> None:
    registry.create("l2", "Load 2", "Load")
    registry.create("g1", "Gen", "Generator")
    registry.create("l1", "Load 1", "Load")

    assert [item.id for item in registry.get_all()] == ["l2", "g1", "l1"]
    assert [item.id for item in registry.get_all_by_type("load")] == ["l2", "l1"]


def test_connect_by_id_with_missing_id_leaves_registry_unmodified(
    registry: EquipmentRegistry,
) -> None:
    real = registry.create("real", "Real", "Load")
    before = registry.dump()

    assert registry.connect_by_id("missing", "real") is False
    assert registry.connect_by_id("real", "missing") is False
    assert registry.dump() == before
    assert real.source_ids == [] and real.load_ids == []


def test_connect_and_disconnect_by_id(registry: EquipmentRegistry) -> None:
    gen = registry.create("gen", "Gen", "Generator")
    load = registry.create("load", "Load", "Load")

    assert registry.connect_by_id("gen", "load") is True
    assert gen.load_ids == ["load"] and load.source_ids == ["gen"]

    assert registry.disconnect_by_id("gen", "load") is True
    assert gen.load_ids == [] and load.source_ids == []


def test_remove_leaves_no_dangling_ids(registry: EquipmentRegistry) -> None:
    gen = registry.create("gen", "Gen", "Generator")
    bus = registry.create("bus", "Bus", "Bus")
    load = registry.create("load", "Load", "Load")
    registry.connect_by_id("gen", "bus")
    registry.connect_by_id("bus", "load")

    assert registry.remove("bus") is True
    assert registry.remove("bus") is False

    assert "bus" not in registry
    assert gen.load_ids == []
    assert load.source_ids == []
    assert bus.source_ids == [] and bus.load_ids == []


def test_clear_empties_registry(registry: EquipmentRegistry) -> None:
    registry.create("a", "A", "Load")
    registry.create("b", "B", "Load")
    registry.connect_by_id("a", "b")

    registry.clear()

    assert len(registry) == 0
    assert registry.get_all() == []


def test_from_json_reads_position_and_attributes(registry: EquipmentRegistry) -> None:
    gen = registry.from_json(
        {
            "id": "gen-1",
            "name": "Main",
            "type": "Generator",
            "position": {"x": 10, "y": 20},
            "capacity": 50,
            "fuelType": "diesel",
            "isOnline": True,
            "unrelated": "ignored",
        }
    )

    assert gen.position == Point(10.0, 20.0)
    assert gen.attributes.capacity == 50
    assert gen.attributes.fuel_type == "diesel"
    assert gen.attributes.is_online is True


def test_from_json_rejects_duplicate_id(registry: EquipmentRegistry) -> None:
    registry.from_json({"id": "a", "name": "A", "type": "Load"})

    with pytest.raises(DuplicateIdError):
        registry.from_json({"id": "a", "name": "A again", "type": "Load"})


def test_from_json_rejects_invalid_record(registry: EquipmentRegistry) -> None:
    with pytest.raises(ValidationError):
        registry.from_json({"id": "", "name": "Nameless", "type": "Load"})


def test_rebuild_connections_skips_missing_references(
    registry: EquipmentRegistry, caplog: pytest.LogCaptureFixture
) -> None:
    records = [
        {"id": "gen", "name": "Gen", "type": "Generator", "loadIds": ["load", "ghost"]},
        {"id": "load", "name": "Load", "type": "Load", "sourceIds": ["gen"]},
    ]
    for record in records:
        registry.from_json(record)

    with caplog.at_level(logging.WARNING, logger="domain.registry"):
        registry.rebuild_connections(records)

    assert registry.get_by_id("gen").load_ids == ["load"]
    assert registry.get_by_id("load").source_ids == ["gen"]
    assert "ghost" in caplog.text


def test_load_records_replaces_contents(registry: EquipmentRegistry) -> None:
    registry.create("old", "Old", "Load")

    created = registry.load_records(
        [
            {"id": "a", "name": "A", "type": "Source", "loadIds": ["b"]},
            {"id": "b", "name": "B", "type": "Load", "sourceIds": ["a"]},
        ]
    )

    assert [item.id for item in created] == ["a", "b"]
    assert "old" not in registry
    assert registry.get_by_id("b").source_ids == ["a"]


def test_load_records_keeps_contents_when_attributes_are_invalid(
    registry: EquipmentRegistry,
) -> None:
    registry.load_records([{"id": "keep", "name": "Keep", "type": "Load"}])

    with pytest.raises(ValidationError):
        registry.load_records(
            [
                {"id": "a", "name": "A", "type": "Load"},
                {"id": "gen", "name": "Gen", "type": "Generator", "efficiency": 150},
            ]
        )

    assert [item.id for item in registry.get_all()] == ["keep"]


def test_load_records_keeps_contents_on_duplicate_ids(registry: EquipmentRegistry) -> None:
    registry.load_records([{"id": "keep", "name": "Keep", "type": "Load"}])

    with pytest.raises(DuplicateIdError):
        registry.load_records(
            [
                {"id": "a", "name": "A", "type": "Load"},
                {"id": "a", "name": "A again", "type": "Load"},
            ]
        )

    assert [item.id for item in registry.get_all()] == ["keep"]


def test_validate_records_checks_subtype_attributes() -> None:
    records = validate_records([{"id": "m", "name": "M", "type": "Meter", "accuracyClass": "1.0"}])

    assert [record.id for record in records] == ["m"]
    with pytest.raises(ValidationError):
        validate_records([{"id": "g", "name": "G", "type": "Generator", "fuelType": "plasma"}])
