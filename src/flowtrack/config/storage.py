"""Where flowtrack keeps its local files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATABASE_FILENAME = "flowtrack.db"
HTTP_CACHE_FILENAME = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Data directory holding the default SQLite database and the HTTP cache."""

    data_dir: Path

    def database_path(self) -> Path:
        return self._file(DATABASE_FILENAME)

    def http_cache_path(self) -> Path:
        return self._file(HTTP_CACHE_FILENAME)

    def _file(self, filename: str) -> Path:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir / filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    """Resolve ``FLOWTRACK_DATA_DIR``, else ``$XDG_DATA_HOME/flowtrack``."""

    configured = os.getenv("FLOWTRACK_DATA_DIR")
    if configured:
        return StorageConfig(data_dir=Path(configured).expanduser().resolve())
    xdg_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_home) if xdg_home else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=(base / "flowtrack").expanduser().resolve())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    configured = os.getenv("DATABASE_URI")
    if configured:
        return DatabaseConfig(uri=configured)
    database_path = (storage or get_storage_config()).database_path()
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{database_path}")
