"""Pot splitting: per-sport checkpoint payouts and the rollover ladder."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import ROUND_FLOOR, Decimal
from typing import Any

from .sports import SportCategory, get_sport_schedule

__all__ = [
    "ROLLOVER_BASE_FRACTIONS",
    "CheckpointResult",
    "ResolvedPayout",
    "calculate_payouts",
    "resolve_rollover_payouts",
]

logger = logging.getLogger(__name__)


def _validate_pot(pot: float) -> None:
    if isinstance(pot, bool) or not isinstance(pot, (int, float, Decimal)):
        raise ValueError(f"pot must be a number, got {type(pot).__name__}")
    if not math.isfinite(pot) or pot < 0:
        raise ValueError(f"pot must be a finite, non-negative amount, got {pot!r}")


def calculate_payouts(pot: float, category: SportCategory | str | None) -> dict[str, int]:
    """Return ``floor(pot * fraction)`` for every checkpoint of the category.

    The remainder left by flooring stays with the house; it is never spread
    back over the checkpoints.
    """

    _validate_pot(pot)
    schedule = get_sport_schedule(category)
    amount = Decimal(str(pot))
    payouts: dict[str, int] = {}
    for period in schedule.periods:
        share = amount * Decimal(str(schedule.fraction(period)))
        payouts[period] = int(share.to_integral_value(rounding=ROUND_FLOOR))
    logger.debug(
        "Computed payouts",
        extra={"pot": pot, "sport": schedule.category.value, "total": sum(payouts.values())},
    )
    return payouts


# --------------------------------------------------------------------------- rollover

ROLLOVER_BASE_FRACTIONS: Mapping[str, float] = {
    "Q1": 0.10,
    "HALF": 0.20,
    "Q3": 0.20,
    "FINAL": 0.50,
}

# Where an unwon checkpoint sends its pot, as (target, share) pairs.
_ROLLOVER_ROUTES: Mapping[str, tuple[tuple[str, float], ...]] = {
    "Q1": (("HALF", 0.5), ("FINAL", 0.5)),
    "HALF": (("Q3", 0.5), ("FINAL", 0.5)),
    "Q3": (("FINAL", 1.0),),
    "FINAL": (),
}


@dataclass(frozen=True)
class CheckpointResult:
    id: str
    finished: bool = False
    winner_id: str | None = None

    @property
    def unclaimed(self) -> bool:
        return self.finished and not self.winner_id

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CheckpointResult:
        return cls(
            id=str(data.get("id", "")).upper(),
            finished=bool(data.get("isFinished", data.get("finished", False))),
            winner_id=data.get("winnerId", data.get("winner_id")) or None,
        )


@dataclass
class ResolvedPayout:
    id: str
    base_amount: float
    display_amount: float
    is_rollover: bool = False
    received: dict[str, float] = field(default_factory=dict)
    rolled_to: dict[str, float] = field(default_factory=dict)
    winner_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "baseAmount": self.base_amount,
            "displayAmount": self.display_amount,
            "isRollover": self.is_rollover,
            "received": dict(self.received),
            "rolledTo": dict(self.rolled_to),
            "winnerId": self.winner_id,
        }


def resolve_rollover_payouts(
    pot: float,
    results: Iterable[CheckpointResult | Mapping[str, Any]] = (),
) -> list[ResolvedPayout]:
    """Apply the rollover ladder to a pot given the checkpoint outcomes so far.

    A finished checkpoint without a winner hands its current amount on: Q1 and
    HALF split it evenly between the next checkpoint and FINAL, Q3 passes all
    of it to FINAL.  Amounts are left unrounded for display.
    """

    _validate_pot(pot)
    pot = float(pot)
    by_id: dict[str, CheckpointResult] = {}
    for raw in results:
        result = raw if isinstance(raw, CheckpointResult) else CheckpointResult.from_mapping(raw)
        by_id.setdefault(result.id, result)

    resolved = {
        key: ResolvedPayout(id=key, base_amount=pot * fraction, display_amount=pot * fraction)
        for key, fraction in ROLLOVER_BASE_FRACTIONS.items()
    }
    for key, routes in _ROLLOVER_ROUTES.items():
        result = by_id.get(key, CheckpointResult(id=key))
        entry = resolved[key]
        entry.winner_id = result.winner_id
        if not routes or not result.unclaimed:
            continue
        amount = entry.display_amount
        for target, share in routes:
            moved = amount * share
            resolved[target].display_amount += moved
            resolved[target].received[key] = moved
            entry.rolled_to[target] = moved
        entry.display_amount = 0.0
        entry.is_rollover = True
        logger.debug("Checkpoint rolled over", extra={"checkpoint": key, "amount": amount})
    return [resolved[key] for key in ROLLOVER_BASE_FRACTIONS]
