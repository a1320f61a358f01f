from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from domain.equipment import Equipment
from domain.models import (
    BreakerAttributes,
    BusAttributes,
    DisplayConnection,
    DisplayNode,
    EquipmentType,
    GeneratorAttributes,
    MeterAttributes,
    Point,
    Size,
    SwitchgearAttributes,
    TextElement,
    TransformerAttributes,
    normalize_equipment_type,
)

DEFAULT_NODE_SIZE = Size(40, 40)
NODE_SIZES: dict[EquipmentType, Size] = {
    EquipmentType.GENERATOR: Size(40, 40),
    EquipmentType.TRANSFORMER: Size(50, 40),
    # Initial bar; the router stretches it over its connections.
    EquipmentType.BUS: Size(60, 8),
    EquipmentType.LOAD: Size(30, 30),
    EquipmentType.METER: Size(30, 30),
    EquipmentType.SWITCHGEAR: Size(40, 40),
    EquipmentType.BREAKER: Size(30, 30),
}
NAME_FONT_SIZE = 12
STATUS_OFFSET = Point(5, 0)

Decorator = Callable[[str, Any], list[TextElement]]


def default_size(equipment_type: EquipmentType | str) -> Size:
    try:
        kind = normalize_equipment_type(equipment_type)
    except ValueError:
        return DEFAULT_NODE_SIZE
    return NODE_SIZES.get(kind, DEFAULT_NODE_SIZE)


def format_quantity(value: float, unit: str) -> str:
    return f"{value:g}{unit}"


def _generator_text(equipment_id: str, attrs: GeneratorAttributes) -> list[TextElement]:
    return [
        TextElement(
            id=f"{equipment_id}-capacity",
            text=format_quantity(attrs.capacity, "MW"),
            anchor="left-top",
            align="right",
            color="blue",
        ),
        TextElement(
            id=f"{equipment_id}-voltage",
            text=format_quantity(attrs.voltage, "kV"),
            anchor="left-bottom",
            align="right",
            color="green",
        ),
        TextElement(
            id=f"{equipment_id}-status",
            text="ON" if attrs.is_online else "OFF",
            anchor="right",
            align="left",
            color="green" if attrs.is_online else "red",
            offset=STATUS_OFFSET,
        ),
    ]


def _transformer_text(equipment_id: str, attrs: TransformerAttributes) -> list[TextElement]:
    return [
        TextElement(
            id=f"{equipment_id}-primary-voltage",
            text=format_quantity(attrs.primary_voltage, "kV"),
            anchor="left-top",
            align="right",
            color="blue",
        ),
        TextElement(
            id=f"{equipment_id}-secondary-voltage",
            text=format_quantity(attrs.secondary_voltage, "kV"),
            anchor="left-bottom",
            align="right",
            color="green",
        ),
        TextElement(
            id=f"{equipment_id}-power-rating",
            text=format_quantity(attrs.power_rating, "MVA"),
            anchor="right-top",
            align="left",
            color="purple",
        ),
        TextElement(
            id=f"{equipment_id}-phase-count",
            text=f"{attrs.phase_count} Phases",
            anchor="right-bottom",
            align="left",
            offset=STATUS_OFFSET,
        ),
        TextElement(
            id=f"{equipment_id}-connection-type",
            text=attrs.connection_type,
            anchor="bottom",
            align="center",
            color="orange",
        ),
    ]


def _bus_text(equipment_id: str, attrs: BusAttributes) -> list[TextElement]:
    return [
        TextElement(
            id=f"{equipment_id}-voltage",
            text=format_quantity(attrs.voltage, "kV"),
            anchor="left-top",
            align="center",
            color="blue",
        )
    ]


def _rating_text(
    equipment_id: str, attrs: MeterAttributes | SwitchgearAttributes | BreakerAttributes
) -> list[TextElement]:
    return [
        TextElement(
            id=f"{equipment_id}-current-rating",
            text=format_quantity(attrs.current_rating, "A"),
            anchor="right-top",
            align="left",
        ),
        TextElement(
            id=f"{equipment_id}-voltage-rating",
            text=format_quantity(attrs.voltage_rating, "kV"),
            anchor="right-bottom",
            align="left",
        ),
    ]


TEXT_DECORATORS: dict[EquipmentType, Decorator] = {
    EquipmentType.GENERATOR: _generator_text,
    EquipmentType.TRANSFORMER: _transformer_text,
    EquipmentType.BUS: _bus_text,
    EquipmentType.METER: _rating_text,
    EquipmentType.SWITCHGEAR: _rating_text,
    EquipmentType.BREAKER: _rating_text,
}


def text_elements(equipment: Equipment) -> list[TextElement]:
    elements = [
        TextElement(
            id=f"{equipment.id}-name",
            text=equipment.name,
            anchor="bottom",
            align="center",
            font_size=NAME_FONT_SIZE,
        )
    ]
    decorator = TEXT_DECORATORS.get(normalize_equipment_type(equipment.attributes.kind))
    if decorator is not None:
        elements.extend(decorator(equipment.id, equipment.attributes))
    return elements


def to_display_nodes(equipment: Iterable[Equipment]) -> list[DisplayNode]:
    return [
        DisplayNode(
            id=item.id,
            type=item.type,
            position=Point(0.0, 0.0),
            size=default_size(item.type),
            label=item.name,
            icon_path=f"/icons/{item.type.value.lower()}.svg",
            text_elements=text_elements(item),
            metadata=dict(item.metadata),
            equipment=item,
        )
        for item in equipment
    ]


def to_display_connections(equipment: Iterable[Equipment]) -> list[DisplayConnection]:
    return [
        DisplayConnection(id=f"{item.id}-{load_id}", source_id=item.id, target_id=load_id)
        for item in equipment
        for load_id in item.load_ids
    ]
