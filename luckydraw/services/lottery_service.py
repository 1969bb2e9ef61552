"""Caller-facing lottery operations: state loading, probability edits, draws."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from luckydraw.repositories.state_repository import StateRepository
from luckydraw.services import draw_engine
from luckydraw.services.draw_engine import (
    DEFAULT_PROBABILITIES,
    PRIZE_TIERS,
    DrawResult,
    PrizeTier,
    WinnerRecord,
)
from luckydraw.services.probability_codec import (
    check_probabilities,
    format_probability,
    parse_probability,
)

logger = logging.getLogger(__name__)

WINNERS_KEY = "lotteryWinners"
PROBABILITIES_KEY = "lotteryProbabilities"


@dataclass(frozen=True)
class LotteryState:
    winners: list[WinnerRecord]
    probabilities: dict[int, float]


@dataclass(frozen=True)
class DrawReport:
    """A draw result plus the winner list after the draw."""

    result: DrawResult
    winners: list[WinnerRecord]
    record: WinnerRecord | None = None

    @property
    def celebrate(self) -> bool:
        return self.result.is_win


@dataclass(frozen=True)
class SavedProbabilities:
    probabilities: dict[int, float]
    warnings: list[str] = field(default_factory=list)


def _decode_winners(raw: Any) -> list[WinnerRecord]:
    if not isinstance(raw, list):
        return []
    out: list[WinnerRecord] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            out.append(WinnerRecord(level=int(item["level"]), time=str(item.get("time", ""))))
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed winner entry: %r", item)
    return out


def _decode_probabilities(raw: Any) -> dict[int, float]:
    if not isinstance(raw, dict):
        return dict(DEFAULT_PROBABILITIES)
    out: dict[int, float] = {}
    for key, value in raw.items():
        try:
            level, p = int(key), float(value)
        except (TypeError, ValueError):
            logger.warning("Skipping malformed probability entry: %r=%r", key, value)
            continue
        if not math.isfinite(p):
            logger.warning("Skipping non-finite probability entry: %r=%r", key, value)
            continue
        out[level] = p
    return out


class LotteryService:
    """Lottery use-cases over the persisted key-value state."""

    def __init__(
        self,
        repository: StateRepository | None = None,
        tiers: Sequence[PrizeTier] = PRIZE_TIERS,
        rng: Callable[[], float] = random.random,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._repo = repository or StateRepository()
        self._tiers = tuple(tiers)
        self._rng = rng
        self._clock = clock

    @property
    def tiers(self) -> tuple[PrizeTier, ...]:
        return self._tiers

    def load_state(self, session: Session) -> LotteryState:
        winners = _decode_winners(self._repo.get(session, WINNERS_KEY))
        raw_probabilities = self._repo.get(session, PROBABILITIES_KEY)
        if raw_probabilities is None:
            probabilities = dict(DEFAULT_PROBABILITIES)
        else:
            probabilities = _decode_probabilities(raw_probabilities)
        return LotteryState(winners=winners, probabilities=probabilities)

    def format_for_edit(self, probabilities: Mapping[int, float]) -> dict[int, str]:
        return {
            t.level: format_probability(probabilities.get(t.level, 0.0))
            for t in self._tiers
        }

    def parse_edited(self, strings_by_level: Mapping[int, str]) -> dict[int, float]:
        """Parse one input string per tier; a missing input uses the fallback."""

        return {
            t.level: parse_probability(strings_by_level.get(t.level))
            for t in self._tiers
        }

    def save_probabilities(self, session: Session, probabilities: Mapping[int, float]) -> SavedProbabilities:
        """Replace the stored probability map wholesale."""

        requested = {int(level): float(p) for level, p in probabilities.items()}
        warnings = check_probabilities(requested, (t.level for t in self._tiers))
        # Non-finite values have no JSON form; they are reported and dropped.
        new_map = {level: p for level, p in requested.items() if math.isfinite(p)}
        self._repo.put(session, PROBABILITIES_KEY, {str(k): v for k, v in new_map.items()})
        logger.info("Saved probabilities %s", new_map)
        return SavedProbabilities(probabilities=new_map, warnings=warnings)

    def draw(self, session: Session) -> DrawReport:
        """Draw once against the stored state and persist a win."""

        state = self.load_state(session)
        result = draw_engine.draw(state.probabilities, state.winners, self._tiers, self._rng)

        if not result.is_win or result.tier is None:
            logger.info("Draw missed (%s)", result.reason.value if result.reason else "unknown")
            return DrawReport(result=result, winners=state.winners)

        record = draw_engine.make_winner_record(result.tier, self._clock())
        winners = [*state.winners, record]
        self._save_winners(session, winners)
        logger.info("Draw won level %s (%s)", record.level, result.tier.display_name)
        return DrawReport(result=result, winners=winners, record=record)

    def reset(self, session: Session) -> LotteryState:
        """Clear the winner list; probabilities are kept."""

        self._save_winners(session, [])
        logger.info("Lottery reset")
        return self.load_state(session)

    def remaining_by_level(self, winners: Sequence[WinnerRecord]) -> dict[int, int]:
        return {t.level: draw_engine.remaining(t.level, winners, self._tiers) for t in self._tiers}

    def _save_winners(self, session: Session, winners: Sequence[WinnerRecord]) -> None:
        self._repo.put(session, WINNERS_KEY, [{"level": w.level, "time": w.time} for w in winners])
