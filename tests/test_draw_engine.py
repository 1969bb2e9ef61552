from __future__ import annotations

import unittest
from datetime import datetime

from luckydraw.services.draw_engine import (
    DEFAULT_PROBABILITIES,
    PRIZE_TIERS,
    DrawOutcome,
    LoseReason,
    WinnerRecord,
    available_tiers,
    draw,
    has_any_remaining,
    make_winner_record,
    remaining,
    total_probability,
    total_remaining,
)


def _winners(*levels: int) -> list[WinnerRecord]:
    return [WinnerRecord(level=level, time="2024/1/1 00:00:00") for level in levels]


def _fixed(sample: float):
    return lambda: sample


def _never_called() -> float:
    raise AssertionError("random sample should not be drawn")


SOLD_OUT = _winners(*([1] * 2 + [2] * 5 + [3] * 10))


class InventoryTests(unittest.TestCase):
    def test_fresh_pool_has_full_stock(self) -> None:
        self.assertEqual([remaining(t.level, []) for t in PRIZE_TIERS], [2, 5, 10])
        self.assertEqual(total_remaining([]), 17)

    def test_remaining_subtracts_matching_winners(self) -> None:
        winners = _winners(1, 3, 3, 2, 3)
        self.assertEqual(remaining(1, winners), 1)
        self.assertEqual(remaining(2, winners), 4)
        self.assertEqual(remaining(3, winners), 7)

    def test_remaining_never_negative(self) -> None:
        self.assertEqual(remaining(1, _winners(1, 1, 1)), 0)

    def test_unknown_level_has_no_stock(self) -> None:
        self.assertEqual(remaining(9, []), 0)
        self.assertEqual(remaining(2, _winners(9, 9)), 5)

    def test_has_any_remaining(self) -> None:
        self.assertTrue(has_any_remaining([]))
        self.assertTrue(has_any_remaining(SOLD_OUT[1:]))
        self.assertFalse(has_any_remaining(SOLD_OUT))

    def test_available_tiers_are_ordered_by_level(self) -> None:
        reversed_tiers = tuple(reversed(PRIZE_TIERS))
        levels = [t.level for t in available_tiers(_winners(2, 2, 2, 2, 2), reversed_tiers)]
        self.assertEqual(levels, [1, 3])

    def test_total_probability_counts_every_tier(self) -> None:
        self.assertAlmostEqual(total_probability(DEFAULT_PROBABILITIES), 0.13)
        self.assertAlmostEqual(total_probability({1: 0.2}), 0.2)


class DrawTests(unittest.TestCase):
    def test_sold_out_pool_returns_no_prizes_left(self) -> None:
        result = draw({1: 1.0, 2: 1.0, 3: 1.0}, SOLD_OUT, rng=_never_called)
        self.assertEqual(result.outcome, DrawOutcome.LOSE)
        self.assertEqual(result.reason, LoseReason.NO_PRIZES_LEFT)
        self.assertEqual(result.message, "奖品已全部抽完！")

    def test_certain_first_prize_always_wins(self) -> None:
        for sample in (0.0, 0.5, 0.999999):
            with self.subTest(sample=sample):
                result = draw({1: 1.0, 2: 0, 3: 0}, [], rng=_fixed(sample))
                self.assertTrue(result.is_win)
                self.assertEqual(result.tier.level, 1)

    def test_zero_probabilities_always_miss(self) -> None:
        for sample in (0.0, 0.3, 0.999999):
            with self.subTest(sample=sample):
                result = draw({1: 0, 2: 0, 3: 0}, [], rng=_fixed(sample))
                self.assertEqual(result.reason, LoseReason.RANDOM_MISS)
                self.assertEqual(result.message, "😢 再接再厉，没有中奖！")

    def test_cumulative_bands(self) -> None:
        cases = [(0.0, 1), (0.0099, 1), (0.01, 2), (0.029, 2), (0.031, 3), (0.1299, 3)]
        for sample, level in cases:
            with self.subTest(sample=sample):
                result = draw(DEFAULT_PROBABILITIES, [], rng=_fixed(sample))
                self.assertEqual(result.tier.level, level)

        result = draw(DEFAULT_PROBABILITIES, [], rng=_fixed(0.1301))
        self.assertEqual(result.reason, LoseReason.RANDOM_MISS)

    def test_sold_out_tier_is_skipped_in_the_walk(self) -> None:
        winners = _winners(1, 1)
        self.assertEqual(remaining(1, winners), 0)

        # Inside tier 1's band, but tier 1 is gone: tier 2 is tested first.
        result = draw(DEFAULT_PROBABILITIES, winners, rng=_fixed(0.005))
        self.assertEqual(result.tier.level, 2)

        result = draw(DEFAULT_PROBABILITIES, winners, rng=_fixed(0.115))
        self.assertEqual(result.tier.level, 3)

        # The walk now ends at 0.12, so the top 0.01 misses.
        result = draw(DEFAULT_PROBABILITIES, winners, rng=_fixed(0.125))
        self.assertEqual(result.reason, LoseReason.RANDOM_MISS)

    def test_sold_out_tier_never_wins(self) -> None:
        winners = _winners(1, 1)
        for step in range(100):
            result = draw({1: 1.0, 2: 0, 3: 0}, winners, rng=_fixed(step / 100))
            self.assertNotEqual(result.outcome, DrawOutcome.WIN)

    def test_full_table_sum_still_applies_to_sold_out_tiers(self) -> None:
        # Tier 1 is sold out; its (negative) share still lowers the miss bound.
        probabilities = {1: -0.5, 2: 0.5, 3: 0.0}
        result = draw(probabilities, _winners(1, 1), rng=_fixed(0.2))
        self.assertEqual(result.reason, LoseReason.RANDOM_MISS)

        result = draw(probabilities, [], rng=_fixed(0.2))
        self.assertEqual(result.reason, LoseReason.RANDOM_MISS)

    def test_missing_probability_counts_as_zero(self) -> None:
        result = draw({3: 1.0}, [], rng=_fixed(0.4))
        self.assertEqual(result.tier.level, 3)


class WinnerRecordTests(unittest.TestCase):
    def test_record_uses_localized_timestamp(self) -> None:
        record = make_winner_record(PRIZE_TIERS[1], datetime(2024, 3, 7, 9, 5, 1))
        self.assertEqual(record.level, 2)
        self.assertEqual(record.time, "2024/3/7 09:05:01")


if __name__ == "__main__":
    unittest.main()
