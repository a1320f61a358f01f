from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutConfig:
    layer_spacing: float = 100.0
    node_spacing: float = 80.0
    margin: float = 50.0
    canvas_width: float = 800.0
    bus_padding: float = 20.0
    min_bus_width: float = 60.0
    vertical_offset: float = 15.0
    single_source_extension: float = 20.0
    multi_source_extension: float = 30.0
    bus_width_ratio: float = 0.6
