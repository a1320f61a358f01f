from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, LayoutSettings
from domain.models import DisplayNode, EquipmentType, Point, Size
from domain.registry import EquipmentRegistry


def _clear_sld_env() -> None:
    for key in list(os.environ):
        if key.startswith("SLD_"):
            os.environ.pop(key, None)


_clear_sld_env()


@pytest.fixture(autouse=True)
def clear_sld_env() -> Generator[None, None, None]:
    _clear_sld_env()
    yield
    _clear_sld_env()


@pytest.fixture
def repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "examples" / "diagrams").exists():
            return parent
    raise RuntimeError("Repository root not found")


@pytest.fixture
def diagrams_dir(repo_root: Path) -> Path:
    return repo_root / "examples" / "diagrams"


@pytest.fixture
def registry() -> EquipmentRegistry:
    return EquipmentRegistry()


@pytest.fixture
def layout_settings() -> LayoutSettings:
    return LayoutSettings()


@pytest.fixture
def app_settings(layout_settings: LayoutSettings) -> AppSettings:
    return AppSettings(layout=layout_settings)


@pytest.fixture
def make_node() -> Callable[..., DisplayNode]:
    def _factory(
        node_id: str,
        equipment_type: EquipmentType = EquipmentType.LOAD,
        x: float = 0.0,
        y: float = 0.0,
        width: float = 30.0,
        height: float = 30.0,
    ) -> DisplayNode:
        return DisplayNode(
            id=node_id,
            type=equipment_type,
            position=Point(x, y),
            size=Size(width, height),
            label=node_id,
            icon_path=f"/icons/{equipment_type.value.lower()}.svg",
        )

    return _factory
