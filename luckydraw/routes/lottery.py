"""Lottery API routes (controllers). No business logic here."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from flask import Blueprint, current_app, request

from luckydraw.db import get_session
from luckydraw.errors import NotFoundError, ValidationError
from luckydraw.schemas.lottery import (
    DrawResponseSchema,
    PrizeTierSchema,
    ProbabilitiesResponseSchema,
    ProbabilityInputsSchema,
    ResetRequestSchema,
    StateResponseSchema,
)
from luckydraw.services import draw_engine
from luckydraw.services.draw_engine import PrizeTier, WinnerRecord
from luckydraw.services.lottery_service import LotteryService, LotteryState
from luckydraw.utils.responses import ok

lottery_bp = Blueprint("lottery", __name__)

_inputs_schema = ProbabilityInputsSchema()
_reset_schema = ResetRequestSchema()
_prize_schema = PrizeTierSchema()
_prizes_schema = PrizeTierSchema(many=True)
_probabilities_schema = ProbabilitiesResponseSchema()
_state_schema = StateResponseSchema()
_draw_schema = DrawResponseSchema()


def _service() -> LotteryService:
    return current_app.extensions["lottery_service"]


def _tier_payload(tier: PrizeTier, winners: list[WinnerRecord]) -> dict[str, Any]:
    return {**asdict(tier), "remaining": draw_engine.remaining(tier.level, winners, _service().tiers)}


def _state_payload(state: LotteryState) -> dict[str, Any]:
    tiers = _service().tiers
    return {
        "prizes": [_tier_payload(t, state.winners) for t in tiers],
        "winners": [asdict(w) for w in state.winners],
        "probabilities": {str(k): v for k, v in state.probabilities.items()},
        "inputs": {str(k): v for k, v in _service().format_for_edit(state.probabilities).items()},
        "total_prizes": sum(t.total_count for t in tiers),
        "total_remaining": draw_engine.total_remaining(state.winners, tiers),
        "total_probability": draw_engine.total_probability(state.probabilities, tiers),
        "has_remaining": draw_engine.has_any_remaining(state.winners, tiers),
    }


@lottery_bp.get("/prizes")
def list_prizes():
    state = _service().load_state(get_session())
    return ok(_prizes_schema.dump([_tier_payload(t, state.winners) for t in _service().tiers]))


@lottery_bp.get("/prizes/<int:level>")
def get_prize(level: int):
    tier = draw_engine.find_tier(level, _service().tiers)
    if tier is None:
        raise NotFoundError(message=f"Prize level {level} not found")
    state = _service().load_state(get_session())
    return ok(_prize_schema.dump(_tier_payload(tier, state.winners)))


@lottery_bp.get("/state")
def get_state():
    state = _service().load_state(get_session())
    return ok(_state_schema.dump(_state_payload(state)))


@lottery_bp.put("/probabilities")
def save_probabilities():
    payload = request.get_json(silent=True) or {}
    data = _inputs_schema.load(payload)

    service = _service()
    probabilities = service.parse_edited(data["inputs"])
    saved = service.save_probabilities(get_session(), probabilities)
    return ok(
        _probabilities_schema.dump(
            {
                "probabilities": {str(k): v for k, v in saved.probabilities.items()},
                "inputs": {str(k): v for k, v in service.format_for_edit(saved.probabilities).items()},
                "total_probability": draw_engine.total_probability(saved.probabilities, service.tiers),
                "warnings": saved.warnings,
            }
        )
    )


@lottery_bp.post("/draw")
def draw():
    service = _service()
    report = service.draw(get_session())
    result = report.result
    tiers = service.tiers

    return ok(
        _draw_schema.dump(
            {
                "outcome": result.outcome.value,
                "reason": result.reason.value if result.reason else None,
                "message": result.message,
                "prize": _tier_payload(result.tier, report.winners) if result.tier else None,
                "record": asdict(report.record) if report.record else None,
                "celebrate": report.celebrate,
                "total_remaining": draw_engine.total_remaining(report.winners, tiers),
                "has_remaining": draw_engine.has_any_remaining(report.winners, tiers),
            }
        )
    )


@lottery_bp.post("/reset")
def reset():
    payload = request.get_json(silent=True) or {}
    data = _reset_schema.load(payload)
    if not data["confirm"]:
        raise ValidationError(
            message="Reset not confirmed",
            details={"confirm": ["Must be true to clear the winner list"]},
        )

    state = _service().reset(get_session())
    return ok(_state_schema.dump(_state_payload(state)))
