"""Key-value stores for pending square selections.

The reconciler only needs ``get``/``set``/``remove`` by key, so anything that
provides those three methods can back it: browser local storage behind an API,
a file on disk, or the in-memory store used by tests.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore", "StorageError"]

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised by a store when the backing medium cannot be read or written."""


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Thread-safe dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class JsonFileStore:
    """Store every key in a single JSON object on disk.

    The file is re-read on each access so several processes see each other's
    writes; writes go through a temporary file and an atomic rename.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"cannot read {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self._path} does not hold a JSON object")
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write(self, data: dict[str, str]) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, sort_keys=True)
            tmp.replace(self._path)
        except OSError as exc:
            raise StorageError(f"cannot write {self._path}: {exc}") from exc

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)
                logger.debug("Removed key from file store", extra={"key": key, "path": str(self._path)})
