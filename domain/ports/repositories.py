from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import EquipmentRecord
from domain.registry import EquipmentRegistry


class DiagramRepository(Protocol):
    def load_records(self, path: Path) -> Sequence[EquipmentRecord]: ...

    def load_all_with_paths(
        self, directory: Path
    ) -> Sequence[tuple[Path, Sequence[EquipmentRecord]]]: ...

    def load_into(self, registry: EquipmentRegistry, path: Path) -> None: ...

    def save(self, registry: EquipmentRegistry, path: Path) -> None: ...
