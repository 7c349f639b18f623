"""Visibility scoring and dashboard rounding helpers.

Visibility score (0–100) for a (keyword, platform) pair, refreshed after each
analysis:
  - brand mentioned:     round(60 + r × 40)
  - brand not mentioned: round(r × 30)
where r ∈ [0, 1) comes from an injectable random source. The draw is not
derivable from any stored field, so aggregations read the stored score only.
"""

from __future__ import annotations

import logging
import random
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

logger = logging.getLogger(__name__)

MENTIONED_FLOOR = 60.0
MENTIONED_SPAN = 40.0
UNMENTIONED_SPAN = 30.0
MAX_VISIBILITY = 100


class RandomSource(Protocol):
    def random(self) -> float: ...


_default_rng = random.Random()


def round_half_up(value: float, places: int = 0) -> float:
    """Round half away from zero (``round()`` uses banker's rounding)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int, places: int = 1) -> float:
    """``part / whole × 100`` rounded; 0 when *whole* is 0."""
    if whole <= 0:
        return 0.0
    return round_half_up(part / whole * 100.0, places)


def draw_visibility_score(mentioned: bool, rng: RandomSource | None = None) -> int:
    """Draw a visibility score for a fresh analysis."""
    r = (rng or _default_rng).random()
    if mentioned:
        raw = min(float(MAX_VISIBILITY), MENTIONED_FLOOR + r * MENTIONED_SPAN)
    else:
        raw = r * UNMENTIONED_SPAN
    score = int(round_half_up(raw))

    logger.debug("Visibility draw: mentioned=%s, r=%.4f → %d", mentioned, r, score)
    return score
