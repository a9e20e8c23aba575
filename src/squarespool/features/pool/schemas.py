from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator

__all__ = [
    "AxisRequest",
    "CheckpointPayload",
    "PayoutsPayload",
    "ReconcileRequest",
    "RolloverRequest",
    "RollPayload",
    "SettleRequest",
    "SettlementPayload",
]


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AxisRequest(BaseModel):
    sport: str | None = None
    league: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: object) -> object:
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, object] = dict(data)
        for field in ("sport", "league"):
            value = cleaned.get(field)
            if isinstance(value, str) and not value.strip():
                cleaned[field] = None
        return cleaned


class PayoutsPayload(_APIModel):
    sport: str
    pot: float
    payouts: dict[str, int]
    labels: dict[str, str]
    display: list[str]
    remainder: float


class CheckpointPayload(_APIModel):
    id: str
    finished: bool = Field(False, alias="isFinished")
    winner_id: str | None = Field(None, alias="winnerId")


class RolloverRequest(BaseModel):
    pot: float = Field(..., ge=0, allow_inf_nan=False)
    checkpoints: list[CheckpointPayload] = Field(default_factory=list)


class ReconcileRequest(BaseModel):
    squares: list[StrictInt] = Field(default_factory=list)
    occupancy: dict[str, Any] = Field(default_factory=dict)


class RollPayload(_APIModel):
    indices: list[int]
    animals: list[str]


class SettleRequest(BaseModel):
    bets: dict[str, StrictInt] = Field(default_factory=dict)
    result: list[str]


class SettlementPayload(_APIModel):
    stake_returned: int = Field(..., alias="stakeReturned")
    winnings: int
    stake_lost: int = Field(..., alias="stakeLost")
    payout: int
