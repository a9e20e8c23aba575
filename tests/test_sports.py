from __future__ import annotations

import logging
import math

import pytest

from squarespool.core import feature_flags
from squarespool.core.sports import (
    SCHEDULES,
    SportCategory,
    SportSchedule,
    detect_sport_type,
    display_periods,
    get_sport_schedule,
    migrate_legacy_checkpoint,
    period_label,
)


@pytest.mark.parametrize(
    ("league", "expected"),
    [
        ("NFL", SportCategory.FOOTBALL),
        ("college-football", SportCategory.FOOTBALL),
        ("nba", SportCategory.BASKETBALL),
        ("NCAAM", SportCategory.BASKETBALL),
        ("Mens-College-Basketball", SportCategory.BASKETBALL),
        ("UEFA.Champions", SportCategory.SOCCER),
        ("usa.mls", SportCategory.SOCCER),
        ("eng.Premier", SportCategory.SOCCER),
        ("soccer", SportCategory.SOCCER),
        ("NHL", SportCategory.DEFAULT),
        ("", SportCategory.DEFAULT),
        (None, SportCategory.DEFAULT),
        (42, SportCategory.DEFAULT),
    ],
)
def test_detect_sport_type(league, expected) -> None:
    assert detect_sport_type(league) is expected


def test_detect_sport_type_is_pure() -> None:
    assert detect_sport_type("NFL") is detect_sport_type("NFL")
    assert get_sport_schedule("soccer") is get_sport_schedule("soccer")


def test_football_tokens_win_over_later_categories() -> None:
    # "football" also appears in some soccer league names; the first match wins.
    assert detect_sport_type("premier-football") is SportCategory.FOOTBALL


def test_every_category_has_a_schedule_summing_to_one() -> None:
    assert set(SCHEDULES) == set(SportCategory)
    for category, schedule in SCHEDULES.items():
        assert schedule.category is category
        assert math.isclose(sum(schedule.fractions[key] for key in schedule.periods), 1.0)
        assert schedule.periods[-1] == "final"


def test_unknown_category_falls_back_to_default() -> None:
    assert get_sport_schedule("curling") is SCHEDULES[SportCategory.DEFAULT]
    assert get_sport_schedule(None) is SCHEDULES[SportCategory.DEFAULT]
    assert get_sport_schedule("  Football ") is SCHEDULES[SportCategory.FOOTBALL]


def test_schedule_definition_rejects_bad_fractions() -> None:
    with pytest.raises(ValueError, match="sum to"):
        SportSchedule(
            category=SportCategory.DEFAULT,
            periods=("p1", "final"),
            labels={},
            scoring_periods=1,
            fractions={"p1": 0.3, "final": 0.6},
        )
    with pytest.raises(ValueError, match="no payout fraction"):
        SportSchedule(
            category=SportCategory.DEFAULT,
            periods=("p1", "final"),
            labels={},
            scoring_periods=1,
            fractions={"final": 1.0},
        )


def test_schedule_tables_are_read_only() -> None:
    schedule = get_sport_schedule(SportCategory.FOOTBALL)
    with pytest.raises(TypeError):
        schedule.fractions["final"] = 1.0  # type: ignore[index]


def test_soccer_schedule_shape() -> None:
    schedule = get_sport_schedule(SportCategory.SOCCER)
    assert schedule.periods == ("p1", "p2", "p3", "final")
    assert schedule.scoring_periods == 2
    assert schedule.label("p1") == "1st Half"


def test_display_periods_hide_unpaid_slots() -> None:
    assert display_periods("soccer") == ("p1", "p2", "final")
    assert display_periods(SportCategory.BASKETBALL) == ("p1", "p2", "p3", "final")
    assert display_periods("unknown") == ("p1", "p2", "p3", "final")


def test_period_label() -> None:
    assert period_label("p4", "football") == "OT"
    assert period_label("p4", "basketball") == "Q4"
    assert period_label("p9", "football") == "P9"


@pytest.mark.parametrize(
    ("old", "new"),
    [("q1", "p1"), ("q2", "p2"), ("q3", "p3"), ("q4", "p4"), ("final", "final"), ("bogus", "final")],
)
def test_migrate_legacy_checkpoint(old: str, new: str) -> None:
    assert migrate_legacy_checkpoint(old) == new


def test_migrate_unknown_key_logs_fallback(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="squarespool.core.sports"):
        assert migrate_legacy_checkpoint("HALF") == "final"
    assert any(getattr(record, "checkpoint", None) == "HALF" for record in caplog.records)


def test_strict_legacy_keys_flag_rejects_unknown_keys() -> None:
    with feature_flags.override(enable={feature_flags.STRICT_LEGACY_KEYS}):
        assert migrate_legacy_checkpoint("q2") == "p2"
        with pytest.raises(KeyError):
            migrate_legacy_checkpoint("bogus")
