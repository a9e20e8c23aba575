from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any

DIGITS: tuple[int, ...] = tuple(range(10))
GRID_SIZE = 10

# Ten digits, each exactly once, never starting with 0.
DigitPermutation = tuple[int, ...]


def is_valid_permutation(values: object) -> bool:
    if not isinstance(values, tuple) or len(values) != len(DIGITS):
        return False
    if not all(isinstance(value, int) and not isinstance(value, bool) for value in values):
        return False
    return sorted(values) == list(DIGITS) and values[0] != 0


@dataclass(frozen=True)
class AxisPair:
    """Row and column digits for a single checkpoint."""

    rows: DigitPermutation
    cols: DigitPermutation

    def __post_init__(self) -> None:
        for name in ("rows", "cols"):
            if not is_valid_permutation(getattr(self, name)):
                raise ValueError(f"{name} is not a valid digit permutation: {getattr(self, name)!r}")

    def to_dict(self) -> dict[str, list[int]]:
        return {"rows": list(self.rows), "cols": list(self.cols)}


@dataclass(frozen=True)
class AxisSet:
    """Every checkpoint's digit assignment for one game, fixed at generation."""

    checkpoints: Mapping[str, AxisPair]
    generated_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "checkpoints", MappingProxyType(dict(self.checkpoints)))

    def __getitem__(self, checkpoint: str) -> AxisPair:
        return self.checkpoints[checkpoint]

    def keys(self) -> tuple[str, ...]:
        return tuple(self.checkpoints)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {key: pair.to_dict() for key, pair in self.checkpoints.items()}
        payload["generatedAt"] = self.generated_at.isoformat()
        return payload
