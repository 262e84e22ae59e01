"""
Persistence adapters for collections.

An adapter stores one serialized collection (a JSON array of records)
per string key. Adapters raise StorageUnavailable when their backing
store is absent, closed or failing; deciding whether that is fatal is
left to the caller.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from docstore.errors import StorageUnavailable


def dump_records(records: list) -> str:
    """
    Serialize records as a JSON array.

    Raises:
        StorageUnavailable: If a record holds a value JSON cannot encode
    """
    try:
        return json.dumps(records, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise StorageUnavailable(f"Cannot serialize records: {e}") from e


def parse_records(text: str, key: Optional[str] = None) -> list[dict]:
    """
    Deserialize a JSON array of records.

    Raises:
        StorageUnavailable: If the stored payload is corrupt
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StorageUnavailable(f"Stored collection is not valid JSON: {e}", key=key) from e

    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise StorageUnavailable("Stored collection is not an array of records", key=key)
    return data


class StorageAdapter(ABC):
    """Key/value storage for serialized collections."""

    @abstractmethod
    def save(self, key: str, serialized: str) -> None:
        """Store the serialized collection under key."""

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """Return the serialized collection, or None if nothing is stored."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a stored collection. Returns True if something was removed."""

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys, sorted, optionally filtered by prefix."""

    def close(self) -> None:
        """Release any resources held by the adapter."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class MemoryStorage(StorageAdapter):
    """Process-local storage. Contents vanish with the process."""

    def __init__(self):
        self._data: Optional[dict[str, str]] = {}

    def _require(self, key: Optional[str] = None) -> dict[str, str]:
        if self._data is None:
            raise StorageUnavailable("Memory storage is closed", key=key)
        return self._data

    def save(self, key: str, serialized: str) -> None:
        self._require(key)[key] = serialized

    def load(self, key: str) -> Optional[str]:
        return self._require(key).get(key)

    def delete(self, key: str) -> bool:
        return self._require(key).pop(key, None) is not None

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._require() if k.startswith(prefix))

    def close(self) -> None:
        self._data = None


class FileStorage(StorageAdapter):
    """
    One JSON file per key inside a directory.

    The directory is created on first use.
    """

    SUFFIX = ".json"

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageUnavailable("Key cannot be used as a file name", key=key)
        return self.directory / f"{key}{self.SUFFIX}"

    def save(self, key: str, serialized: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Write-then-rename so readers never see a partial file
            tmp = path.with_suffix(path.suffix + ".tmp")
            tmp.write_text(serialized, encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise StorageUnavailable(f"Cannot write {path}: {e}", key=key) from e

    def load(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageUnavailable(f"Cannot read {path}: {e}", key=key) from e

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageUnavailable(f"Cannot delete {path}: {e}", key=key) from e

    def keys(self, prefix: str = "") -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(
            p.stem for p in self.directory.glob(f"*{self.SUFFIX}")
            if p.stem.startswith(prefix)
        )
