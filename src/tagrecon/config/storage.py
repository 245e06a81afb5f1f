"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "tagrecon"
DEFAULT_SNAPSHOT_FILENAME: Final[str] = "master_snapshot.json"
DEFAULT_CATALOG_FILENAME: Final[str] = "catalog_tags.json"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    snapshot_filename: str = DEFAULT_SNAPSHOT_FILENAME
    catalog_filename: str = DEFAULT_CATALOG_FILENAME
    http_cache_filename: str = HTTP_CACHE_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def _file(self, filename: str, *, ensure: bool) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / filename

    def snapshot_path(self, *, ensure: bool = True) -> Path:
        return self._file(self.snapshot_filename, ensure=ensure)

    def catalog_path(self, *, ensure: bool = True) -> Path:
        """Default destination for raw items written by ``fetch-catalog``."""
        return self._file(self.catalog_filename, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self._file(self.http_cache_filename, ensure=ensure)


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("TAGRECON_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)
