from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from datetime import timedelta
from typing import Any

from pydantic import ValidationError

from ...core.axis import square_key
from .schemas import PendingSelection, ReconcileResult
from .storage import KeyValueStore, StorageError

__all__ = [
    "DEFAULT_MAX_AGE",
    "STORAGE_PREFIX",
    "PendingSelectionService",
    "find_conflicts",
    "storage_key",
]

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "pending_claims_"
DEFAULT_MAX_AGE = timedelta(minutes=30)


def storage_key(game_id: str) -> str:
    return f"{STORAGE_PREFIX}{game_id}"


def _is_occupied(owners: Any) -> bool:
    if isinstance(owners, (list, tuple, set, frozenset)):
        return len(owners) > 0
    return bool(owners)


def find_conflicts(squares: Iterable[int], occupancy: Mapping[str, Any]) -> ReconcileResult:
    """Partition ``squares`` into available and conflicting indices.

    A square conflicts when its ``"row-col"`` entry exists and is non-empty.
    Input order is kept and every index lands in exactly one list.

    This is a snapshot check.  A square reported available can still be taken
    before the claim is written; the persistence layer's atomic claim decides
    who actually gets it.
    """

    available: list[int] = []
    conflicts: list[int] = []
    for index in squares:
        if _is_occupied(occupancy.get(square_key(index))):
            conflicts.append(index)
        else:
            available.append(index)
    return ReconcileResult(available=available, conflicts=conflicts)


def _epoch_ms() -> float:
    return time.time() * 1000.0


class PendingSelectionService:
    """Save, load and consume pending selections kept across a login redirect.

    Every read failure (missing, malformed, mismatched game, expired, storage
    unavailable) is reported as "nothing pending" rather than raised.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Callable[[], float] | None = None,
        max_age: timedelta = DEFAULT_MAX_AGE,
    ) -> None:
        self._store = store
        self._clock = clock or _epoch_ms
        self._max_age_ms = max_age.total_seconds() * 1000.0

    def save(self, game_id: str, squares: Iterable[int]) -> PendingSelection | None:
        record = PendingSelection(game_id=game_id, squares=list(squares), timestamp=self._clock())
        try:
            self._store.set(storage_key(game_id), json.dumps(record.to_dict()))
        except (StorageError, OSError):
            logger.exception("Failed to save pending selection", extra={"game_id": game_id})
            return None
        logger.info("Saved pending selection", extra={"game_id": game_id, "count": len(record.squares)})
        return record

    def load(self, game_id: str) -> list[int] | None:
        key = storage_key(game_id)
        try:
            raw = self._store.get(key)
        except (StorageError, OSError):
            logger.warning("Pending selection storage unavailable", extra={"game_id": game_id}, exc_info=True)
            return None
        if not raw:
            return None

        try:
            record = PendingSelection.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Ignoring malformed pending selection",
                extra={"game_id": game_id, "errors": exc.error_count()},
            )
            return None
        if record.game_id != game_id:
            logger.warning("Pending selection belongs to another game", extra={"game_id": game_id})
            return None

        age = self._clock() - record.timestamp
        if age > self._max_age_ms:
            logger.info("Pending selection expired", extra={"game_id": game_id, "age_ms": age})
            self.clear(game_id)
            return None

        logger.debug("Loaded pending selection", extra={"game_id": game_id, "squares": record.squares})
        return list(record.squares)

    def clear(self, game_id: str) -> None:
        try:
            self._store.remove(storage_key(game_id))
        except (StorageError, OSError):
            logger.warning("Failed to clear pending selection", extra={"game_id": game_id}, exc_info=True)

    def restore(self, game_id: str, occupancy: Mapping[str, Any]) -> ReconcileResult | None:
        """Reconcile and consume the pending selection for ``game_id``.

        Returns ``None`` when nothing valid is pending.  A record is removed
        once it has been reconciled, so a second call returns ``None``.
        """

        squares = self.load(game_id)
        if squares is None:
            return None
        result = find_conflicts(squares, occupancy)
        self.clear(game_id)
        logger.info(
            "Restored pending selection",
            extra={"game_id": game_id, "available": len(result.available), "conflicts": len(result.conflicts)},
        )
        return result
