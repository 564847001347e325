"""
Interval fuzz.

Spreads cards scheduled together across neighbouring days. The random
factor is derived from the card id and review count, so the same review
always gets the same fuzz.
"""

from __future__ import annotations

import hashlib

from srs.fsrs.config import SchedulerParameters
from srs.fsrs.constants import FUZZ_MIN_INTERVAL, FUZZ_RANGES


def fuzz_seed(card_id: str, reps: int) -> float:
    """Deterministic pseudo-random float in [0, 1) for (card_id, reps)."""
    digest = hashlib.sha256(f"{card_id}:{reps}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") / float(1 << 64)


def fuzz_range(interval: float, elapsed_days: int, params: SchedulerParameters) -> tuple[int, int]:
    """
    Inclusive [low, high] day range the fuzzed interval may land in.

    delta = 1 + sum over FUZZ_RANGES of scale * factor * overlap(interval, range)

    The range is clamped to the configured interval bounds, and when the
    interval is longer than the elapsed time the low end is kept above
    elapsed_days so a review never lands earlier than the last gap.
    """
    delta = 1.0
    for start, end, factor in FUZZ_RANGES:
        delta += params.fuzz_scale * factor * max(min(interval, end) - start, 0.0)

    low = max(2, int(round(interval - delta)))
    high = int(round(interval + delta))
    if interval > elapsed_days:
        low = max(low, elapsed_days + 1)

    low = max(params.minimum_interval, min(low, params.maximum_interval))
    high = max(low, min(high, params.maximum_interval))
    return low, high


def apply_fuzz(
    interval: float,
    elapsed_days: int,
    seed: float,
    params: SchedulerParameters
) -> int:
    """
    Round and fuzz an interval (days).

    Intervals under FUZZ_MIN_INTERVAL days, and all intervals when fuzz is
    disabled, are only rounded and clamped.
    """
    if not params.enable_fuzz or params.fuzz_scale == 0 or interval < FUZZ_MIN_INTERVAL:
        return clamp_interval(int(round(interval)), params)

    low, high = fuzz_range(interval, elapsed_days, params)
    fuzzed = int(seed * (high - low + 1)) + low
    return clamp_interval(min(fuzzed, high), params)


def clamp_interval(days: int, params: SchedulerParameters) -> int:
    return max(params.minimum_interval, min(days, params.maximum_interval))
