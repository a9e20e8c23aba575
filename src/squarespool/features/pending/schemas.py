from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from ...core.models import GRID_SIZE

__all__ = ["PendingSelection", "ReconcileResult"]

_SQUARES = GRID_SIZE * GRID_SIZE


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class PendingSelection(_APIModel):
    """Squares a player tried to claim before being sent to log in."""

    game_id: str = Field(..., alias="gameId", min_length=1)
    squares: list[StrictInt]
    timestamp: float = Field(..., description="Creation time in epoch milliseconds")

    @field_validator("squares")
    @classmethod
    def _in_grid(cls, squares: list[int]) -> list[int]:
        bad = [square for square in squares if not 0 <= square < _SQUARES]
        if bad:
            raise ValueError(f"square indices out of range: {bad}")
        return squares


class ReconcileResult(_APIModel):
    """Split of pending squares into still-open and already-taken."""

    available: list[int] = Field(default_factory=list)
    conflicts: list[int] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)
