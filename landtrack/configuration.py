"""Mini README: Centralised configuration for LandTrack.

Structure:
    * LandtrackSettings - pydantic-settings model describing runtime options.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Values are read from ``LANDTRACK_*`` environment variables or a local
    ``.env`` file. ``data_directory`` is where the JSON record slots live and
    ``storage_prefix`` namespaces the slot keys inside it.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LandtrackSettings(BaseSettings):
    """Runtime configuration for the LandTrack record keeper."""

    model_config = SettingsConfigDict(
        env_prefix="LANDTRACK_",
        env_file=".env",
        case_sensitive=False,
    )

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the persisted land, farmer, expense and income slots.",
    )
    storage_prefix: str = Field(
        "landtrack_",
        description="Prefix applied to every persisted slot key.",
    )
    interface_host: str = Field(
        "127.0.0.1",
        description="Network interface for the local API to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the local API exposes.",
        ge=1,
        le=65535,
    )
    log_level: str = Field("INFO", description="Root logging level name.")

    @field_validator("data_directory", mode="before")
    @classmethod
    def _expand_path(cls, value: Union[str, Path]) -> Path:
        """Expand user directories and make sure the folder exists."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path


@lru_cache()
def get_settings() -> LandtrackSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return LandtrackSettings()
