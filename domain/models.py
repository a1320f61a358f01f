from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

if TYPE_CHECKING:
    from domain.equipment import Equipment

DIAGRAM_SCHEMA_VERSION = "1.0"


class EquipmentType(str, Enum):
    GENERATOR = "Generator"
    TRANSFORMER = "Transformer"
    SWITCHGEAR = "Switchgear"
    MOTOR = "Motor"
    PANEL = "Panel"
    BUS = "Bus"
    BREAKER = "Breaker"
    RELAY = "Relay"
    LOAD = "Load"
    SOURCE = "Source"
    METER = "Meter"
    OTHER = "Other"


EQUIPMENT_TYPE_ALIASES: Dict[str, EquipmentType] = {
    "circuitbreaker": EquipmentType.BREAKER,
    "circuit_breaker": EquipmentType.BREAKER,
}


def normalize_equipment_type(value: object) -> EquipmentType:
    if isinstance(value, EquipmentType):
        return value
    raw = str(value or "").strip()
    for member in EquipmentType:
        if member.value.lower() == raw.lower():
            return member
    alias = EQUIPMENT_TYPE_ALIASES.get(raw.lower())
    if alias is not None:
        return alias
    msg = f"Unknown equipment type: {value!r}"
    raise ValueError(msg)


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


ORIGIN = Point(0.0, 0.0)


class _Attributes(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)


class GeneratorAttributes(_Attributes):
    kind: Literal["Generator"] = "Generator"
    capacity: float = Field(default=0.0, ge=0)  # MW
    voltage: float = Field(default=0.0, ge=0)  # kV
    fuel_type: Literal["natural_gas", "diesel", "solar", "wind", "hydro", "nuclear", "coal"] = (
        Field(default="natural_gas", alias="fuelType")
    )
    efficiency: float = Field(default=100.0, ge=0, le=100)
    is_online: bool = Field(default=False, alias="isOnline")

    @property
    def current_output(self) -> float:
        return self.capacity * (self.efficiency / 100) if self.is_online else 0.0


class TransformerAttributes(_Attributes):
    kind: Literal["Transformer"] = "Transformer"
    primary_voltage: float = Field(default=13.8, ge=0, alias="primaryVoltage")
    secondary_voltage: float = Field(default=4.16, ge=0, alias="secondaryVoltage")
    power_rating: float = Field(default=25.0, ge=0, alias="powerRating")  # MVA
    phase_count: Literal[1, 3] = Field(default=3, alias="phaseCount")
    connection_type: Literal["Delta", "Wye"] = Field(default="Wye", alias="connectionType")
    impedance: float = Field(default=5.75, ge=0)  # percent
    is_operational: bool = Field(default=False, alias="isOperational")


class BusAttributes(_Attributes):
    kind: Literal["Bus"] = "Bus"
    voltage: float = Field(default=12.0, ge=0)
    allowed_sources: int = Field(default=1, ge=0, alias="allowedSources")
    allowed_loads: int = Field(default=16, ge=0, alias="allowedLoads")


class MeterAttributes(_Attributes):
    kind: Literal["Meter"] = "Meter"
    voltage_rating: float = Field(default=12.0, ge=0, alias="voltageRating")
    current_rating: float = Field(default=100.0, ge=0, alias="currentRating")
    accuracy_class: Literal["0.2", "0.5", "1.0", "2.0"] = Field(
        default="0.5", alias="accuracyClass"
    )
    is_operational: bool = Field(default=False, alias="isOperational")


class SwitchgearAttributes(_Attributes):
    kind: Literal["Switchgear"] = "Switchgear"
    voltage_rating: float = Field(default=0.0, ge=0, alias="voltageRating")
    current_rating: float = Field(default=0.0, ge=0, alias="currentRating")
    insulation_type: Literal["air", "gas", "oil"] = Field(default="air", alias="insulationType")
    is_operational: bool = Field(default=False, alias="isOperational")


class BreakerAttributes(_Attributes):
    kind: Literal["Breaker"] = "Breaker"
    voltage_rating: float = Field(default=0.0, ge=0, alias="voltageRating")
    current_rating: float = Field(default=0.0, ge=0, alias="currentRating")
    breaking_capacity: float = Field(default=0.0, ge=0, alias="breakingCapacity")  # kA
    is_operational: bool = Field(default=False, alias="isOperational")


class BasicAttributes(_Attributes):
    kind: Literal["Motor", "Panel", "Relay", "Load", "Source", "Other"] = "Other"


EquipmentAttributes = Annotated[
    Union[
        GeneratorAttributes,
        TransformerAttributes,
        BusAttributes,
        MeterAttributes,
        SwitchgearAttributes,
        BreakerAttributes,
        BasicAttributes,
    ],
    Field(discriminator="kind"),
]

_ATTRIBUTES_ADAPTER: TypeAdapter[Any] = TypeAdapter(EquipmentAttributes)


def build_attributes(equipment_type: EquipmentType, values: Dict[str, Any] | None = None) -> Any:
    payload = {key: value for key, value in (values or {}).items() if key != "kind"}
    payload["kind"] = equipment_type.value
    return _ATTRIBUTES_ADAPTER.validate_python(payload)


def attribute_field_names(equipment_type: EquipmentType) -> set[str]:
    model = type(build_attributes(equipment_type))
    names: set[str] = set()
    for name, info in model.model_fields.items():
        if name == "kind":
            continue
        names.add(name)
        if info.alias:
            names.add(info.alias)
    return names


class PositionModel(BaseModel):
    x: float = 0.0
    y: float = 0.0


class EquipmentRecord(BaseModel):
    """Serialized equipment: base fields plus flat subtype attributes as extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    type: EquipmentType
    source_ids: List[str] = Field(default_factory=list, alias="sourceIds")
    load_ids: List[str] = Field(default_factory=list, alias="loadIds")
    position: Optional[PositionModel] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: object) -> EquipmentType:
        return normalize_equipment_type(value)

    @field_validator("source_ids", "load_ids", mode="before")
    @classmethod
    def ensure_unique_ids(cls, value: object) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list | tuple):
            msg = "adjacency ids must be a list"
            raise ValueError(msg)
        seen: set[str] = set()
        unique: List[str] = []
        for item in value:
            item_id = str(item)
            if item_id in seen:
                continue
            seen.add(item_id)
            unique.append(item_id)
        return unique

    @field_validator("metadata", mode="before")
    @classmethod
    def default_metadata(cls, value: object) -> Dict[str, Any]:
        return {} if value is None else value  # type: ignore[return-value]

    def attribute_values(self) -> Dict[str, Any]:
        extras = self.model_extra or {}
        allowed = attribute_field_names(self.type)
        return {key: value for key, value in extras.items() if key in allowed}


class DiagramDocument(BaseModel):
    version: str = DIAGRAM_SCHEMA_VERSION
    equipment: List[EquipmentRecord] = Field(default_factory=list)

    @field_validator("equipment", mode="after")
    @classmethod
    def ensure_unique_equipment_ids(cls, records: List[EquipmentRecord]) -> List[EquipmentRecord]:
        seen: set[str] = set()
        for record in records:
            if record.id in seen:
                msg = f"Duplicate equipment id found: {record.id}"
                raise ValueError(msg)
            seen.add(record.id)
        return records

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "equipment": [
                record.model_dump(mode="json", by_alias=True, exclude_none=True) for record in self.equipment
            ],
        }


TextAnchor = Literal[
    "top",
    "bottom",
    "left",
    "right",
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
    "left-top",
    "left-bottom",
    "right-top",
    "right-bottom",
]
TextAlign = Literal["left", "center", "right"]


@dataclass(frozen=True)
class TextElement:
    id: str
    text: str
    anchor: TextAnchor
    align: TextAlign
    font_size: int = 10
    color: str | None = None
    offset: Point | None = None

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "position": self.anchor,
            "align": self.align,
            "fontSize": self.font_size,
        }
        if self.color is not None:
            payload["color"] = self.color
        if self.offset is not None:
            payload["offset"] = self.offset.to_dict()
        return payload


@dataclass(frozen=True)
class DisplayNode:
    id: str
    type: EquipmentType
    position: Point
    size: Size
    label: str
    icon_path: str
    text_elements: List[TextElement] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    equipment: Optional[Equipment] = field(default=None, compare=False, repr=False)

    @property
    def center_x(self) -> float:
        return self.position.x + self.size.width / 2

    @property
    def bottom(self) -> float:
        return self.position.y + self.size.height

    @property
    def right(self) -> float:
        return self.position.x + self.size.width

    @property
    def is_bus(self) -> bool:
        return self.type == EquipmentType.BUS

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "position": self.position.to_dict(),
            "size": self.size.to_dict(),
            "label": self.label,
            "iconPath": self.icon_path,
            "textElements": [element.to_dict() for element in self.text_elements],
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class DisplayConnection:
    id: str
    source_id: str
    target_id: str
    points: List[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "points": list(self.points),
        }


@dataclass(frozen=True)
class LayoutResult:
    nodes: List[DisplayNode]
    connections: List[DisplayConnection]

    def node(self, node_id: str) -> DisplayNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)

    def connection(self, connection_id: str) -> DisplayConnection | None:
        return next((conn for conn in self.connections if conn.id == connection_id), None)

    def to_dict(self) -> dict:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "connections": [conn.to_dict() for conn in self.connections],
        }
