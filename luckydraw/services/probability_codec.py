"""Parse and format user-entered prize probabilities.

Accepted inputs:
  - percentages: "1%", "2.5 %"
  - fractions:   "1/50", "1 / 10"
  - plain:       "0.05" (fraction) or "10" (values above 1 are percentages)

Parsing never fails; unreadable input falls back to ``FALLBACK_PROBABILITY``.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

logger = logging.getLogger(__name__)

FALLBACK_PROBABILITY = 0.01

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _finite(value: float) -> float | None:
    """Overflowing exponents such as ``1e999`` do not count as numbers."""

    return value if math.isfinite(value) else None


def _float_prefix(text: str) -> float | None:
    """Read the leading number of ``text`` (leading whitespace ignored)."""

    m = _NUMBER_RE.match(text.lstrip())
    if not m:
        return None
    return _finite(float(m.group(0)))


def _float_strict(text: str) -> float | None:
    m = _NUMBER_RE.fullmatch(text)
    if not m:
        return None
    return _finite(float(m.group(0)))


def parse_probability(raw: str | None) -> float:
    """Parse a probability string into a fraction.

    Rules are tried in order: percentage, fraction, plain number. The first
    rule that yields a number wins.
    """

    text = (raw or "").strip()

    if "%" in text:
        value = _float_prefix(text.replace("%", "", 1))
        if value is not None:
            return value / 100

    if "/" in text:
        parts = text.split("/")
        if len(parts) == 2:
            num = _float_prefix(parts[0])
            denom = _float_prefix(parts[1])
            if num is not None and denom is not None and denom != 0:
                value = _finite(num / denom)
                if value is not None:
                    return value

    value = _float_strict(text)
    if value is not None:
        # "10" means 10%; "1" and "1.0" stay as-is.
        if value > 1:
            return value / 100
        return value

    return FALLBACK_PROBABILITY


def format_probability(fraction: float) -> str:
    """Render a fraction for the edit form.

    Values below 0.5 become whole percentages ("2%"); larger values are shown
    as plain decimals ("0.75").
    """

    value = float(fraction)
    if not math.isfinite(value):
        return ""
    if value < 0.5:
        percent = (Decimal(value) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return f"{int(percent)}%"

    text = repr(value)
    if text.endswith(".0"):
        text = text[:-2]
    return text


def check_probabilities(probabilities: Mapping[int, float], levels: Iterable[int]) -> list[str]:
    """Return operator warnings for a probability map.

    Values are never rejected; a total above 1 silently lowers the miss rate,
    so it is reported instead.
    """

    warnings: list[str] = []
    total = 0.0
    for level in levels:
        if level not in probabilities:
            warnings.append(f"level {level}: no probability configured, treated as 0")
            continue
        p = float(probabilities[level])
        if not math.isfinite(p):
            warnings.append(f"level {level}: probability {p!r} is not a finite number")
            continue
        if p < 0 or p > 1:
            warnings.append(f"level {level}: probability {p!r} is outside [0, 1]")
        total += p

    if total > 1:
        warnings.append(f"total probability {total:.4f} exceeds 1")

    for w in warnings:
        logger.warning("Probability configuration: %s", w)
    return warnings
