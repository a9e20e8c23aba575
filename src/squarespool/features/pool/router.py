from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from ...core.axis import generate_axis_set
from ...core.payouts import CheckpointResult, calculate_payouts, resolve_rollover_payouts
from ...core.secure_roll import EntropyUnavailableError, indices_to_animal_ids, secure_roll, settle_bets
from ...core.sports import SportCategory, detect_sport_type, display_periods, get_sport_schedule
from ..pending import find_conflicts
from .schemas import (
    AxisRequest,
    PayoutsPayload,
    ReconcileRequest,
    RolloverRequest,
    RollPayload,
    SettlementPayload,
    SettleRequest,
)

__all__ = ["create_pool_routers"]

logger = logging.getLogger(__name__)


def _category(sport: str | None, league: str | None) -> SportCategory | None:
    if sport:
        return get_sport_schedule(sport).category
    if league:
        return detect_sport_type(league)
    return None


class _PoolController:
    # ------------------------------------------------------------------ squares
    def axis(self, body: AxisRequest) -> JSONResponse:
        category = _category(body.sport, body.league)
        schedule = get_sport_schedule(category) if category is not None else None
        axis_set = generate_axis_set(schedule)
        return JSONResponse(axis_set.to_dict())

    def payouts(self, pot: float, league: str | None, sport: str | None) -> JSONResponse:
        category = _category(sport, league) or SportCategory.DEFAULT
        try:
            payouts = calculate_payouts(pot, category)
        except ValueError as exc:
            raise HTTPException(400, str(exc)) from exc
        schedule = get_sport_schedule(category)
        payload = PayoutsPayload(
            sport=category.value,
            pot=pot,
            payouts=payouts,
            labels={period: schedule.label(period) for period in schedule.periods},
            display=list(display_periods(category)),
            remainder=pot - sum(payouts.values()),
        )
        return JSONResponse(payload.to_dict())

    def rollover(self, body: RolloverRequest) -> JSONResponse:
        results = [
            CheckpointResult(id=cp.id.upper(), finished=cp.finished, winner_id=cp.winner_id)
            for cp in body.checkpoints
        ]
        try:
            resolved = resolve_rollover_payouts(body.pot, results)
        except ValueError as exc:
            raise HTTPException(400, str(exc)) from exc
        return JSONResponse([entry.to_dict() for entry in resolved])

    def reconcile(self, body: ReconcileRequest) -> JSONResponse:
        try:
            result = find_conflicts(body.squares, body.occupancy)
        except ValueError as exc:
            raise HTTPException(400, str(exc)) from exc
        return JSONResponse(result.to_dict())

    # ------------------------------------------------------------------ bau cua
    def roll(self) -> JSONResponse:
        try:
            indices = secure_roll()
        except EntropyUnavailableError as exc:
            logger.error("Refusing to roll without secure entropy")
            raise HTTPException(503, str(exc)) from exc
        payload = RollPayload(indices=list(indices), animals=list(indices_to_animal_ids(indices)))
        return JSONResponse(payload.to_dict())

    def settle(self, body: SettleRequest) -> JSONResponse:
        try:
            settlement = settle_bets(body.bets, body.result)
        except ValueError as exc:
            raise HTTPException(400, str(exc)) from exc
        payload = SettlementPayload(
            stake_returned=settlement.stake_returned,
            winnings=settlement.winnings,
            stake_lost=settlement.stake_lost,
            payout=settlement.payout,
        )
        return JSONResponse(payload.to_dict())


def create_pool_routers() -> tuple[APIRouter, APIRouter]:
    """Return the squares-pool router and the Bau Cua router."""

    controller = _PoolController()

    pool = APIRouter(prefix="/api/v1/pool", tags=["pool"])
    dice = APIRouter(prefix="/api/v1/bau-cua", tags=["bau-cua"])

    @pool.post("/axis")
    async def create_axis(body: AxisRequest | None = None) -> JSONResponse:
        return controller.axis(body or AxisRequest())

    @pool.get("/payouts")
    async def get_payouts(
        pot: float = Query(...),
        league: str | None = None,
        sport: str | None = None,
    ) -> JSONResponse:
        return controller.payouts(pot, league, sport)

    @pool.post("/rollover")
    async def post_rollover(body: RolloverRequest) -> JSONResponse:
        return controller.rollover(body)

    @pool.post("/reconcile")
    async def post_reconcile(body: ReconcileRequest) -> JSONResponse:
        return controller.reconcile(body)

    @dice.post("/roll")
    async def post_roll() -> JSONResponse:
        return controller.roll()

    @dice.post("/settle")
    async def post_settle(body: SettleRequest) -> JSONResponse:
        return controller.settle(body)

    return pool, dice
