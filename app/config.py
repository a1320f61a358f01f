from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.layout.config import LayoutConfig

DEFAULT_CONFIG_PATH = Path("config/layout.yaml")


class LayoutSettings(BaseModel):
    layer_spacing: float = Field(default=100.0, gt=0)
    node_spacing: float = Field(default=80.0, ge=0)
    margin: float = Field(default=50.0, ge=0)
    canvas_width: float = Field(default=800.0, gt=0)
    bus_padding: float = Field(default=20.0, ge=0)
    min_bus_width: float = Field(default=60.0, ge=0)
    vertical_offset: float = 15.0
    single_source_extension: float = Field(default=20.0, ge=0)
    multi_source_extension: float = Field(default=30.0, ge=0)
    bus_width_ratio: float = Field(default=0.6, gt=0)

    def to_layout_config(self) -> LayoutConfig:
        return LayoutConfig(**self.model_dump())


class OutputSettings(BaseModel):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        return str(value).upper() if value else "WARNING"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SLD_", env_nested_delimiter="__")

    layout: LayoutSettings = LayoutSettings()
    output: OutputSettings = OutputSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("SLD_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
