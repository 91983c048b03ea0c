"""
Durable key-value stores used to persist the route segment cache.

Every store exposes read(key) -> Optional[str], write(key, value) and
delete(key). Failures are raised as StorageError.
"""
from pathlib import Path
from typing import Dict, Optional
import re


class StorageError(Exception):
    """Raised when the backing store cannot be read or written."""


class CorruptRecordError(StorageError):
    """Raised when a stored record exists but cannot be decoded."""


class MemoryStore:
    """In-process store. Contents are lost when the process exits."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """One ``<key>.json`` file per key under a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe_key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            if not path.exists():
                return None
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CorruptRecordError(f"Failed to decode {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e


class UnavailableStore:
    """Stand-in for a context with no durable storage at all."""

    def read(self, key: str) -> Optional[str]:
        raise StorageError("Durable storage is not available")

    def write(self, key: str, value: str) -> None:
        raise StorageError("Durable storage is not available")

    def delete(self, key: str) -> None:
        raise StorageError("Durable storage is not available")
