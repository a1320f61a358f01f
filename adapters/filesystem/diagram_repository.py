from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List

from filelock import FileLock

from adapters.filesystem.json_utils import read_diagram_payload, write_json_atomic
from domain.models import DIAGRAM_SCHEMA_VERSION, DiagramDocument, EquipmentRecord
from domain.ports.repositories import DiagramRepository
from domain.registry import EquipmentRegistry

logger = logging.getLogger(__name__)


def parse_document(content: Any) -> DiagramDocument:
    """Accept either a bare record list or a versioned document."""
    if isinstance(content, list):
        return DiagramDocument.model_validate({"equipment": content})
    return DiagramDocument.model_validate(content)


class FileSystemDiagramRepository(DiagramRepository):
    def load_document(self, path: Path) -> DiagramDocument:
        return parse_document(read_diagram_payload(path))

    def load_records(self, path: Path) -> List[EquipmentRecord]:
        return list(self.load_document(path).equipment)

    def load_all_with_paths(self, directory: Path) -> List[tuple[Path, List[EquipmentRecord]]]:
        return [(path, self.load_records(path)) for path in sorted(directory.glob("*.json"))]

    def load_into(self, registry: EquipmentRegistry, path: Path) -> None:
        records = self.load_records(path)
        registry.load_records(records)
        logger.debug("Loaded %d records from %s", len(records), path)

    def save(self, registry: EquipmentRegistry, path: Path) -> None:
        payload = {"version": DIAGRAM_SCHEMA_VERSION, "equipment": registry.dump()}
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(path, payload)
