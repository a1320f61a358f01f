from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from domain.models import DisplayConnection, DisplayNode, LayoutResult


class LayoutEngine(Protocol):
    def calculate_layout(
        self, nodes: Sequence[DisplayNode], connections: Sequence[DisplayConnection]
    ) -> LayoutResult:
        ...
