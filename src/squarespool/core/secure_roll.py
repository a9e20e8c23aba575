"""Bau Cua dice backed by the operating system's entropy source.

Rolls come from ``os.urandom`` rather than :mod:`random`, so nobody, the host
included, can predict a round or replay an earlier one.  When the platform has
no entropy source the roll fails with :class:`EntropyUnavailableError`; there
is no pseudo-random fallback.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

__all__ = [
    "ANIMAL_IDS",
    "DICE_PER_ROLL",
    "FACES",
    "BetSettlement",
    "EntropyUnavailableError",
    "indices_to_animal_ids",
    "secure_roll",
    "settle_bets",
]

logger = logging.getLogger(__name__)

ANIMAL_IDS: tuple[str, ...] = ("deer", "gourd", "chicken", "fish", "crab", "shrimp")
FACES = len(ANIMAL_IDS)
DICE_PER_ROLL = 3

RollOutcome = tuple[int, int, int]


class EntropyUnavailableError(RuntimeError):
    """Raised when no cryptographically secure random source exists."""


def _entropy(size: int) -> bytes:
    try:
        return os.urandom(size)
    except NotImplementedError as exc:
        raise EntropyUnavailableError("no secure entropy source available for dice rolls") from exc


def secure_roll() -> RollOutcome:
    """Roll three dice; each value is a face index in ``0..5``."""

    raw = _entropy(4 * DICE_PER_ROLL)
    words = [int.from_bytes(raw[i : i + 4], "big") for i in range(0, len(raw), 4)]
    first, second, third = (word % FACES for word in words)
    return first, second, third


def indices_to_animal_ids(indices: Sequence[int]) -> tuple[str, ...]:
    out: list[str] = []
    for index in indices:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < FACES:
            raise ValueError(f"face index out of range: {index!r}")
        out.append(ANIMAL_IDS[index])
    return tuple(out)


@dataclass(frozen=True)
class BetSettlement:
    stake_returned: int
    winnings: int
    stake_lost: int

    @property
    def payout(self) -> int:
        """Amount credited back to the player: returned stakes plus winnings."""

        return self.stake_returned + self.winnings


def settle_bets(bets: Mapping[str, int], result: Sequence[str]) -> BetSettlement:
    """Settle a bet slip against a three-animal result.

    A stake on an animal that shows ``m`` times is returned and pays ``m``
    times the stake; stakes on animals that do not show are lost.
    """

    if len(result) != DICE_PER_ROLL:
        raise ValueError(f"a result needs exactly {DICE_PER_ROLL} animals, got {len(result)}")
    unknown = [animal for animal in (*bets, *result) if animal not in ANIMAL_IDS]
    if unknown:
        raise ValueError(f"unknown animals: {sorted(set(unknown))}")

    returned = winnings = lost = 0
    for animal, stake in bets.items():
        if stake < 0:
            raise ValueError(f"stake on {animal} cannot be negative")
        matches = sum(1 for face in result if face == animal)
        if matches:
            returned += stake
            winnings += stake * matches
        else:
            lost += stake
    settlement = BetSettlement(stake_returned=returned, winnings=winnings, stake_lost=lost)
    logger.debug("Settled bets", extra={"result": list(result), "payout": settlement.payout})
    return settlement
