"""Document store settings and configuration schema."""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from docstore.persist.ids import DEFAULT_ID_LENGTH
from docstore.persist.sqlite_store import SQLiteStorage
from docstore.persist.storage import FileStorage, MemoryStorage, StorageAdapter

logger = logging.getLogger(__name__)

StorageBackend = Literal["none", "memory", "file", "sqlite"]


class StoreCfg(BaseModel):
    """Configuration for collection behaviour."""
    id_length: int = Field(DEFAULT_ID_LENGTH, ge=1)
    key_prefix: str = "collection_"
    copy_results: bool = False


class StorageCfg(BaseModel):
    """Persistence backend configuration."""
    backend: StorageBackend = "sqlite"
    sqlite_path: str = "data/cache/collections.db"
    file_dir: str = "data/collections"


class Settings(BaseModel):
    """Main document store settings."""
    store: StoreCfg = StoreCfg()
    storage: StorageCfg = StorageCfg()

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from DOCSTORE_* environment variables.

        Invalid values are logged and replaced by their defaults.
        """
        env_map = {
            "store": {
                "id_length": "DOCSTORE_ID_LENGTH",
                "key_prefix": "DOCSTORE_KEY_PREFIX",
                "copy_results": "DOCSTORE_COPY_RESULTS",
            },
            "storage": {
                "backend": "DOCSTORE_BACKEND",
                "sqlite_path": "DOCSTORE_SQLITE_PATH",
                "file_dir": "DOCSTORE_FILE_DIR",
            },
        }
        section_types = {"store": StoreCfg, "storage": StorageCfg}

        sections = {}
        for section, fields in env_map.items():
            model = section_types[section]
            values = {}
            for field_name, env_name in fields.items():
                raw = os.environ.get(env_name)
                if raw is None:
                    continue
                try:
                    model(**{field_name: raw})
                except ValidationError:
                    logger.warning(f"Ignoring invalid {env_name}={raw!r}, using default")
                    continue
                values[field_name] = raw
            sections[section] = model(**values)

        return cls(**sections)


def create_storage(settings: Optional[Settings] = None) -> Optional[StorageAdapter]:
    """
    Create the storage adapter selected by settings.

    Returns:
        StorageAdapter, or None when the backend is "none"
    """
    settings = settings or Settings()
    backend = settings.storage.backend

    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return FileStorage(Path(settings.storage.file_dir))
    if backend == "sqlite":
        return SQLiteStorage(Path(settings.storage.sqlite_path))
    return None
