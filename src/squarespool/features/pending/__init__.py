"""Pending selections: keep a player's picks across a login redirect."""

from .schemas import PendingSelection, ReconcileResult
from .service import (
    DEFAULT_MAX_AGE,
    STORAGE_PREFIX,
    PendingSelectionService,
    find_conflicts,
    storage_key,
)
from .storage import JsonFileStore, KeyValueStore, MemoryStore, StorageError

__all__ = [
    "DEFAULT_MAX_AGE",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PendingSelection",
    "PendingSelectionService",
    "ReconcileResult",
    "STORAGE_PREFIX",
    "StorageError",
    "find_conflicts",
    "storage_key",
]
