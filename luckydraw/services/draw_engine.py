"""Prize table, remaining inventory and the weighted draw.

Everything here is a pure function of its inputs: the tier table, the
probability map, the winner history and one random sample. Persisting the
winner list is the caller's job.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class PrizeTier:
    level: int
    display_name: str
    icon: str
    total_count: int
    unit: str = "个"


@dataclass(frozen=True)
class WinnerRecord:
    level: int
    time: str


class DrawOutcome(str, Enum):
    WIN = "WIN"
    LOSE = "LOSE"


class LoseReason(str, Enum):
    NO_PRIZES_LEFT = "NO_PRIZES_LEFT"
    RANDOM_MISS = "RANDOM_MISS"


LOSE_MESSAGES: dict[LoseReason, str] = {
    LoseReason.NO_PRIZES_LEFT: "奖品已全部抽完！",
    LoseReason.RANDOM_MISS: "😢 再接再厉，没有中奖！",
}


@dataclass(frozen=True)
class DrawResult:
    outcome: DrawOutcome
    tier: PrizeTier | None = None
    reason: LoseReason | None = None

    @classmethod
    def win(cls, tier: PrizeTier) -> DrawResult:
        return cls(outcome=DrawOutcome.WIN, tier=tier)

    @classmethod
    def lose(cls, reason: LoseReason) -> DrawResult:
        return cls(outcome=DrawOutcome.LOSE, reason=reason)

    @property
    def is_win(self) -> bool:
        return self.outcome is DrawOutcome.WIN

    @property
    def message(self) -> str:
        if self.tier is not None:
            return self.tier.display_name
        return LOSE_MESSAGES[self.reason] if self.reason is not None else ""


PRIZE_TIERS: tuple[PrizeTier, ...] = (
    PrizeTier(level=1, display_name="苹果手机", icon="📱", total_count=2, unit="台"),
    PrizeTier(level=2, display_name="自行车", icon="🚲", total_count=5, unit="辆"),
    PrizeTier(level=3, display_name="抱枕", icon="🧸", total_count=10, unit="个"),
)

DEFAULT_PROBABILITIES: dict[int, float] = {
    1: 0.01,  # 1%
    2: 0.02,  # 1/50
    3: 0.10,  # 1/10
}


def find_tier(level: int, tiers: Iterable[PrizeTier] = PRIZE_TIERS) -> PrizeTier | None:
    for tier in tiers:
        if tier.level == level:
            return tier
    return None


def remaining(level: int, winners: Iterable[WinnerRecord], tiers: Iterable[PrizeTier] = PRIZE_TIERS) -> int:
    """Units of ``level`` still available; never negative."""

    tier = find_tier(level, tiers)
    if tier is None:
        return 0
    won = sum(1 for w in winners if w.level == level)
    return max(0, tier.total_count - won)


def available_tiers(winners: Sequence[WinnerRecord], tiers: Sequence[PrizeTier] = PRIZE_TIERS) -> list[PrizeTier]:
    """Tiers with stock left, highest prestige first."""

    ordered = sorted(tiers, key=lambda t: t.level)
    return [t for t in ordered if remaining(t.level, winners, tiers) > 0]


def has_any_remaining(winners: Sequence[WinnerRecord], tiers: Sequence[PrizeTier] = PRIZE_TIERS) -> bool:
    return any(remaining(t.level, winners, tiers) > 0 for t in tiers)


def total_remaining(winners: Sequence[WinnerRecord], tiers: Sequence[PrizeTier] = PRIZE_TIERS) -> int:
    return sum(remaining(t.level, winners, tiers) for t in tiers)


def total_probability(probabilities: Mapping[int, float], tiers: Iterable[PrizeTier] = PRIZE_TIERS) -> float:
    """Sum of the configured probabilities over every tier, sold out or not."""

    return sum(float(probabilities.get(t.level, 0.0)) for t in tiers)


def draw(
    probabilities: Mapping[int, float],
    winners: Sequence[WinnerRecord],
    tiers: Sequence[PrizeTier] = PRIZE_TIERS,
    rng: Callable[[], float] = random.random,
) -> DrawResult:
    """Run one draw.

    A single sample ``r`` in [0, 1) is walked through the cumulative
    probabilities of the tiers that still have stock, in level order. The
    first tier whose cumulative bound exceeds ``r`` wins.

    ``r`` is also compared against the probability total over *all* tiers,
    including sold-out ones: a sold-out tier can never be won but its share
    still counts toward a miss. Changing this would change the effective odds.

    Returns
    -------
    DrawResult
        ``WIN`` with the tier, or ``LOSE`` with ``NO_PRIZES_LEFT`` (checked
        before sampling) or ``RANDOM_MISS``.
    """

    if not has_any_remaining(winners, tiers):
        return DrawResult.lose(LoseReason.NO_PRIZES_LEFT)

    candidates = available_tiers(winners, tiers)
    r = rng()

    selected: PrizeTier | None = None
    cumulative = 0.0
    for tier in candidates:
        cumulative += float(probabilities.get(tier.level, 0.0))
        if r < cumulative:
            selected = tier
            break

    if selected is None or r >= total_probability(probabilities, tiers):
        return DrawResult.lose(LoseReason.RANDOM_MISS)

    return DrawResult.win(selected)


def format_timestamp(moment: datetime) -> str:
    """Localized timestamp in the zh-CN style, e.g. ``2024/3/7 09:05:01``."""

    return f"{moment.year}/{moment.month}/{moment.day} {moment:%H:%M:%S}"


def make_winner_record(tier: PrizeTier, now: datetime | None = None) -> WinnerRecord:
    return WinnerRecord(level=tier.level, time=format_timestamp(now or datetime.now()))
