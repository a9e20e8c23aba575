from __future__ import annotations

import json
import logging

import pytest

from squarespool.features.pending import (
    STORAGE_PREFIX,
    MemoryStore,
    PendingSelectionService,
    ReconcileResult,
    StorageError,
    find_conflicts,
    storage_key,
)

_MINUTE_MS = 60_000.0


class _Clock:
    def __init__(self, now_ms: float = 1_700_000_000_000.0) -> None:
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, minutes: float) -> None:
        self.now_ms += minutes * _MINUTE_MS


class _BrokenStore:
    """Store that behaves like disabled browser storage."""

    def get(self, key: str) -> str | None:
        raise StorageError("storage disabled")

    def set(self, key: str, value: str) -> None:
        raise StorageError("storage disabled")

    def remove(self, key: str) -> None:
        raise StorageError("storage disabled")


def _service(store: MemoryStore | None = None, clock: _Clock | None = None) -> tuple[PendingSelectionService, MemoryStore, _Clock]:
    store = store if store is not None else MemoryStore()
    clock = clock or _Clock()
    return PendingSelectionService(store, clock=clock), store, clock


# --------------------------------------------------------------------------- find_conflicts


def test_find_conflicts_partitions_squares() -> None:
    result = find_conflicts([0, 5, 23], {"0-0": ["Alice"], "2-3": []})
    assert isinstance(result, ReconcileResult)
    assert result.available == [5, 23]
    assert result.conflicts == [0]
    assert result.has_conflicts


def test_find_conflicts_covers_every_index_once() -> None:
    squares = [99, 10, 11, 45, 0]
    occupancy = {"1-0": [{"uid": "a"}], "4-5": ["Bob", "Cara"], "9-9": []}
    result = find_conflicts(squares, occupancy)
    assert sorted(result.available + result.conflicts) == sorted(squares)
    assert not set(result.available) & set(result.conflicts)
    assert result.available == [99, 11, 0]
    assert result.conflicts == [10, 45]


def test_find_conflicts_treats_non_list_owner_as_occupied() -> None:
    result = find_conflicts([1, 2], {"0-1": {"uid": "x"}, "0-2": None})
    assert result.conflicts == [1]
    assert result.available == [2]


def test_find_conflicts_empty_input() -> None:
    assert find_conflicts([], {"0-0": ["A"]}).to_dict() == {"available": [], "conflicts": []}


def test_find_conflicts_rejects_out_of_grid_index() -> None:
    with pytest.raises(ValueError):
        find_conflicts([100], {})


# --------------------------------------------------------------------------- service


def test_save_then_load_round_trip() -> None:
    service, store, _ = _service()
    record = service.save("GAME1", [3, 14, 15])
    assert record is not None
    assert storage_key("GAME1") == f"{STORAGE_PREFIX}GAME1"
    stored = json.loads(store.get("pending_claims_GAME1") or "")
    assert stored["gameId"] == "GAME1"
    assert stored["squares"] == [3, 14, 15]
    assert service.load("GAME1") == [3, 14, 15]


def test_load_missing_returns_none() -> None:
    service, _, _ = _service()
    assert service.load("NOPE") is None


def test_record_just_inside_window_is_loaded() -> None:
    service, _, clock = _service()
    service.save("G", [7])
    clock.advance(30)
    assert service.load("G") == [7]


def test_expired_record_is_absent_and_removed() -> None:
    service, store, clock = _service()
    service.save("G", [7, 8])
    clock.advance(31)
    assert service.load("G") is None
    assert storage_key("G") not in store


def test_expired_record_is_not_reconciled() -> None:
    service, store, clock = _service()
    service.save("G", [0])
    clock.advance(31)
    assert service.restore("G", {}) is None
    assert len(store) == 0


def test_record_for_other_game_is_ignored() -> None:
    service, store, clock = _service()
    payload = {"gameId": "OTHER", "squares": [1, 2], "timestamp": clock()}
    store.set(storage_key("MINE"), json.dumps(payload))
    assert service.load("MINE") is None


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps(["G", [1, 2]]),
        json.dumps({"gameId": "G", "squares": "1,2", "timestamp": 0}),
        json.dumps({"gameId": "G", "squares": [1, "2"], "timestamp": 0}),
        json.dumps({"gameId": "G", "squares": [1, 250], "timestamp": 0}),
        json.dumps({"gameId": "G", "squares": [1, 2]}),
    ],
)
def test_malformed_records_read_as_absent(raw: str, caplog: pytest.LogCaptureFixture) -> None:
    service, store, _ = _service(clock=_Clock(now_ms=0.0))
    store.set(storage_key("G"), raw)
    with caplog.at_level(logging.WARNING, logger="squarespool.features.pending.service"):
        assert service.load("G") is None
    assert caplog.records


def test_storage_failures_degrade_to_nothing_pending() -> None:
    service = PendingSelectionService(_BrokenStore(), clock=_Clock())
    assert service.save("G", [1]) is None
    assert service.load("G") is None
    assert service.restore("G", {}) is None
    service.clear("G")


def test_restore_reconciles_and_consumes_exactly_once() -> None:
    service, store, clock = _service()
    service.save("G", [0, 5, 23])
    clock.advance(2)

    result = service.restore("G", {"0-0": ["Alice"], "2-3": []})
    assert result is not None
    assert result.available == [5, 23]
    assert result.conflicts == [0]
    assert storage_key("G") not in store
    assert service.restore("G", {}) is None


def test_restore_leaves_other_games_alone() -> None:
    service, store, _ = _service()
    service.save("A", [1])
    service.save("B", [2])
    service.restore("A", {})
    assert service.load("B") == [2]
    assert len(store) == 1


def test_save_rejects_squares_outside_grid() -> None:
    service, _, _ = _service()
    with pytest.raises(ValueError):
        service.save("G", [100])
