"""Digit assignment for the 10x10 grid.

Every checkpoint gets its own row and column permutation of the digits 0-9.
Permutations never put ``0`` in the first slot so the grid origin is not a
free (0, 0) square.

By default the shuffler patches the constraint after an unbiased shuffle: when
``0`` lands first it is swapped with a uniformly chosen later slot.  Enabling
``axis.direct_construction`` instead shuffles 1-9 and inserts ``0`` at a
uniformly chosen slot after the first.  Both give every valid ordering the
same probability, 1 / (9 * 9!).
"""

from __future__ import annotations

import logging
import random
import secrets
from collections.abc import Iterable
from datetime import datetime, timezone

from . import feature_flags
from .models import DIGITS, GRID_SIZE, AxisPair, AxisSet, DigitPermutation
from .sports import SportSchedule

__all__ = [
    "DEFAULT_CHECKPOINTS",
    "generate_axis_set",
    "shuffle_axis",
    "square_index",
    "square_key",
    "winning_cell",
]

logger = logging.getLogger(__name__)

DEFAULT_CHECKPOINTS: tuple[str, ...] = ("q1", "q2", "q3", "final")

_SYSTEM_RANDOM = secrets.SystemRandom()


def _swap_patch(rng: random.Random) -> DigitPermutation:
    digits = list(DIGITS)
    rng.shuffle(digits)
    if digits[0] == 0:
        swap = rng.randint(1, len(digits) - 1)
        digits[0], digits[swap] = digits[swap], digits[0]
    return tuple(digits)


def _direct(rng: random.Random) -> DigitPermutation:
    rest = list(DIGITS[1:])
    rng.shuffle(rest)
    rest.insert(rng.randint(1, len(rest)), 0)
    return tuple(rest)


def shuffle_axis(rng: random.Random | None = None) -> DigitPermutation:
    """Return a fresh permutation of 0-9 whose first digit is not 0."""

    source = rng if rng is not None else _SYSTEM_RANDOM
    if feature_flags.is_enabled(feature_flags.AXIS_DIRECT_CONSTRUCTION):
        return _direct(source)
    return _swap_patch(source)


def _checkpoint_keys(checkpoints: SportSchedule | Iterable[str] | None) -> tuple[str, ...]:
    if checkpoints is None:
        return DEFAULT_CHECKPOINTS
    if isinstance(checkpoints, SportSchedule):
        return checkpoints.periods
    if isinstance(checkpoints, str):
        raise ValueError("checkpoints must be a sequence of keys, not a single string")
    keys = tuple(checkpoints)
    if not keys:
        raise ValueError("at least one checkpoint is required")
    if len(set(keys)) != len(keys):
        raise ValueError(f"duplicate checkpoint keys: {keys}")
    return keys


def generate_axis_set(
    checkpoints: SportSchedule | Iterable[str] | None = None,
    *,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> AxisSet:
    """Build a new :class:`AxisSet` with independent rows/cols per checkpoint.

    Persisting the result is up to the caller.  Re-rolling a game means calling
    this again; the previous set is never touched.
    """

    keys = _checkpoint_keys(checkpoints)
    pairs = {key: AxisPair(rows=shuffle_axis(rng), cols=shuffle_axis(rng)) for key in keys}
    generated_at = now if now is not None else datetime.now(timezone.utc)
    logger.debug("Generated axis set", extra={"checkpoints": keys, "generated_at": generated_at.isoformat()})
    return AxisSet(checkpoints=pairs, generated_at=generated_at)


def winning_cell(pair: AxisPair, score_a: int, score_b: int) -> tuple[int, int]:
    """Grid (row, col) whose digits match the last digit of each team's score."""

    if score_a < 0 or score_b < 0:
        raise ValueError("scores cannot be negative")
    return pair.rows.index(score_a % 10), pair.cols.index(score_b % 10)


def square_key(index: int) -> str:
    """Occupancy key (``"row-col"``) for a row-major square index."""

    if not 0 <= index < GRID_SIZE * GRID_SIZE:
        raise ValueError(f"square index out of range: {index}")
    row, col = divmod(index, GRID_SIZE)
    return f"{row}-{col}"


def square_index(row: int, col: int) -> int:
    if not (0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE):
        raise ValueError(f"cell out of range: ({row}, {col})")
    return row * GRID_SIZE + col
