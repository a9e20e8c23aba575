"""Sport categories and their checkpoint payout schedules.

Each category maps to exactly one :class:`SportSchedule`.  Schedules are
validated when the module is imported, so a schedule whose fractions do not
add up to the whole pot never reaches a caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Final

from . import feature_flags

__all__ = [
    "SCHEDULES",
    "SportCategory",
    "SportSchedule",
    "detect_sport_type",
    "display_periods",
    "get_sport_schedule",
    "migrate_legacy_checkpoint",
    "period_label",
]

logger = logging.getLogger(__name__)


class SportCategory(str, Enum):
    FOOTBALL = "football"
    BASKETBALL = "basketball"
    SOCCER = "soccer"
    DEFAULT = "default"


@dataclass(frozen=True)
class SportSchedule:
    """Checkpoint layout and payout fractions for one sport category."""

    category: SportCategory
    periods: tuple[str, ...]
    labels: Mapping[str, str]
    scoring_periods: int
    fractions: Mapping[str, float]
    display: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if len(set(self.periods)) != len(self.periods):
            raise ValueError(f"{self.category.value}: duplicate checkpoint keys")
        missing = [key for key in self.periods if key not in self.fractions]
        if missing:
            raise ValueError(f"{self.category.value}: no payout fraction for {missing}")
        if not 0 < self.scoring_periods <= len(self.periods):
            raise ValueError(f"{self.category.value}: scoring_periods out of range")
        total = sum(Decimal(str(self.fractions[key])) for key in self.periods)
        if total != Decimal(1):
            raise ValueError(f"{self.category.value}: payout fractions sum to {total}, expected 1")
        if any(key not in self.periods for key in self.display):
            raise ValueError(f"{self.category.value}: display keys must be checkpoint keys")
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))
        object.__setattr__(self, "fractions", MappingProxyType(dict(self.fractions)))

    def fraction(self, period: str) -> float:
        return self.fractions[period]

    def label(self, period: str) -> str:
        return self.labels.get(period, period.upper())


_QUARTER_FRACTIONS: Final = {"p1": 0.10, "p2": 0.20, "p3": 0.20, "p4": 0.0, "final": 0.50}
_QUARTER_PERIODS: Final = ("p1", "p2", "p3", "p4", "final")
_QUARTER_DISPLAY: Final = ("p1", "p2", "p3", "final")


def _build_schedules() -> Mapping[SportCategory, SportSchedule]:
    schedules = {
        SportCategory.FOOTBALL: SportSchedule(
            category=SportCategory.FOOTBALL,
            periods=_QUARTER_PERIODS,
            # p4 carries overtime; it is tracked but never paid.
            labels={"p1": "Q1", "p2": "Q2", "p3": "Q3", "p4": "OT", "final": "Final"},
            scoring_periods=4,
            fractions=_QUARTER_FRACTIONS,
            display=_QUARTER_DISPLAY,
        ),
        SportCategory.BASKETBALL: SportSchedule(
            category=SportCategory.BASKETBALL,
            periods=_QUARTER_PERIODS,
            labels={"p1": "Q1", "p2": "Q2", "p3": "Q3", "p4": "Q4", "final": "Final"},
            scoring_periods=4,
            fractions=_QUARTER_FRACTIONS,
            display=_QUARTER_DISPLAY,
        ),
        SportCategory.SOCCER: SportSchedule(
            category=SportCategory.SOCCER,
            periods=("p1", "p2", "p3", "final"),
            labels={"p1": "1st Half", "p2": "2nd Half", "p3": "ET/Shootout", "final": "Final"},
            scoring_periods=2,
            fractions={"p1": 0.25, "p2": 0.25, "p3": 0.0, "final": 0.50},
            display=("p1", "p2", "final"),
        ),
        SportCategory.DEFAULT: SportSchedule(
            category=SportCategory.DEFAULT,
            periods=_QUARTER_PERIODS,
            labels={"p1": "Q1", "p2": "Q2", "p3": "Q3", "p4": "Q4", "final": "Final"},
            scoring_periods=4,
            fractions=_QUARTER_FRACTIONS,
            display=_QUARTER_DISPLAY,
        ),
    }
    absent = set(SportCategory) - set(schedules)
    if absent:
        raise RuntimeError(f"no schedule defined for {sorted(c.value for c in absent)}")
    return MappingProxyType(schedules)


SCHEDULES: Final = _build_schedules()

# Checked in order; the first category with a matching token wins.
_LEAGUE_TOKENS: Final[tuple[tuple[SportCategory, tuple[str, ...]], ...]] = (
    (SportCategory.FOOTBALL, ("nfl", "football")),
    (SportCategory.BASKETBALL, ("nba", "ncaam", "basketball")),
    (SportCategory.SOCCER, ("uefa", "soccer", "mls", "premier")),
)

_LEGACY_CHECKPOINTS: Final = MappingProxyType(
    {"q1": "p1", "q2": "p2", "q3": "p3", "q4": "p4", "final": "final"}
)


def detect_sport_type(league: object = None) -> SportCategory:
    """Classify a free-text league code; anything unrecognised is DEFAULT."""

    if not isinstance(league, str) or not league:
        return SportCategory.DEFAULT
    lowered = league.lower()
    for category, tokens in _LEAGUE_TOKENS:
        if any(token in lowered for token in tokens):
            return category
    return SportCategory.DEFAULT


def _coerce_category(category: SportCategory | str | None) -> SportCategory:
    if isinstance(category, SportCategory):
        return category
    try:
        return SportCategory(str(category).strip().lower())
    except ValueError:
        return SportCategory.DEFAULT


def get_sport_schedule(category: SportCategory | str | None) -> SportSchedule:
    return SCHEDULES[_coerce_category(category)]


def display_periods(category: SportCategory | str | None) -> tuple[str, ...]:
    """Checkpoints shown to players; unpaid overtime/extra-time slots are hidden."""

    return get_sport_schedule(category).display


def period_label(period: str, category: SportCategory | str | None) -> str:
    return get_sport_schedule(category).label(period)


def migrate_legacy_checkpoint(old_key: str) -> str:
    """Translate ``q1``-style checkpoint keys to the ``p1`` scheme.

    Unknown keys map to ``final`` unless ``payouts.strict_legacy_keys`` is
    enabled, in which case they raise :class:`KeyError`.
    """

    new_key = _LEGACY_CHECKPOINTS.get(old_key)
    if new_key is not None:
        return new_key
    if feature_flags.is_enabled(feature_flags.STRICT_LEGACY_KEYS):
        raise KeyError(f"unknown legacy checkpoint '{old_key}'")
    logger.warning("Unknown legacy checkpoint routed to final", extra={"checkpoint": old_key})
    return "final"
