"""File locations for the Primary and Metadata sources."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import optional_env_var


@dataclass(frozen=True, slots=True)
class SourceFilesConfig:
    primary_path: Path | None = None
    metadata_path: Path | None = None
    catalog_path: Path | None = None


def get_source_files_config() -> SourceFilesConfig:
    """Read optional source file paths; unset variables leave that source unloaded."""

    def _path(name: str) -> Path | None:
        value = optional_env_var(name)
        return Path(value).expanduser() if value is not None else None

    return SourceFilesConfig(
        primary_path=_path("TAGRECON_PRIMARY_PATH"),
        metadata_path=_path("TAGRECON_METADATA_PATH"),
        catalog_path=_path("TAGRECON_CATALOG_PATH"),
    )
