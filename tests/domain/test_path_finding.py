from __future__ import annotations

from domain.registry import EquipmentRegistry
from domain.services.path_finding import find_path, find_path_by_id


def _chain(registry: EquipmentRegistry) -> None:
    registry.create("gen", "Gen", "Generator")
    registry.create("xfmr", "Transformer", "Transformer")
    registry.create("bus", "Bus", "Bus")
    registry.create("load", "Load", "Load")
    registry.create("island", "Island", "Load")
    registry.connect_by_id("gen", "xfmr")
    registry.connect_by_id("xfmr", "bus")
    registry.connect_by_id("bus", "load")


def test_path_to_self_is_single_element(registry: EquipmentRegistry) -> None:
    _chain(registry)
    gen = registry.get_by_id("gen")

    assert find_path(gen, gen) == [gen]


def test_no_path_to_isolated_equipment(registry: EquipmentRegistry) -> None:
    _chain(registry)

    assert find_path(registry.get_by_id("gen"), registry.get_by_id("island")) is None


def test_path_follows_chain(registry: EquipmentRegistry) -> None:
    _chain(registry)

    found = find_path_by_id(registry, "gen", "load")

    assert [item.id for item in found] == ["gen", "xfmr", "bus", "load"]


def test_path_walks_links_in_both_directions(registry: EquipmentRegistry) -> None:
    _chain(registry)

    found = find_path_by_id(registry, "load", "gen")

    assert [item.id for item in found] == ["load", "bus", "xfmr", "gen"]


def test_path_terminates_on_cycles(registry: EquipmentRegistry) -> None:
    for node_id in ("a", "b", "c", "d"):
        registry.create(node_id, node_id.upper(), "Panel")
    registry.connect_by_id("a", "b")
    registry.connect_by_id("b", "c")
    registry.connect_by_id("c", "a")

    assert find_path_by_id(registry, "a", "d") is None
    # Sources come first in `connections`, so "c" is reached directly as a source of "a".
    assert [item.id for item in find_path_by_id(registry, "a", "c")] == ["a", "c"]


def test_unknown_ids_give_no_path(registry: EquipmentRegistry) -> None:
    _chain(registry)

    assert find_path_by_id(registry, "gen", "missing") is None


def test_long_chain_does_not_exhaust_the_stack(registry: EquipmentRegistry) -> None:
    ids = [f"n{index}" for index in range(3000)]
    for node_id in ids:
        registry.create(node_id, node_id, "Panel")
    for source_id, load_id in zip(ids, ids[1:]):
        registry.connect_by_id(source_id, load_id)

    found = find_path_by_id(registry, ids[0], ids[-1])

    assert [item.id for item in found] == ids
