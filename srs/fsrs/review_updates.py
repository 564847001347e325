"""
Stability and Difficulty Updates

Implements the per-review update rules of the memory model.

Key principles:
- Spaced, effortful success produces the largest stability gains
- Failures shrink stability toward a floor, never to zero
- Difficulty reflects intrinsic hardness and stays within [1, 10]
"""

from __future__ import annotations

import math
from typing import Sequence

from srs.fsrs.constants import (
    D_MAX,
    D_MIN,
    S_MIN,
    SHORT_TERM_GAIN,
    SHORT_TERM_OFFSET,
    FeedbackGrade,
)


def clamp_difficulty(difficulty: float) -> float:
    return max(D_MIN, min(D_MAX, difficulty))


def initial_stability(grade: FeedbackGrade, weights: Sequence[float]) -> float:
    """
    Prior stability after the very first review: w[grade - 1].

    AGAIN starts lowest, EASY highest.
    """
    return max(S_MIN, weights[int(grade) - 1])


def initial_difficulty(grade: FeedbackGrade, weights: Sequence[float]) -> float:
    """
    Prior difficulty after the very first review.

    Formula:
        D0(G) = w4 - (G - 3) * w5

    A poor first impression starts harder than an easy one.
    """
    return clamp_difficulty(weights[4] - (int(grade) - 3) * weights[5])


def next_difficulty(
    difficulty: float,
    grade: FeedbackGrade,
    weights: Sequence[float]
) -> float:
    """
    Update difficulty after a review.

    Formula:
        delta  = -w6 * (G - 3)
        D'     = D + delta * (distance to the bound being approached) / 9
        D''    = w7 * D0(EASY) + (1 - w7) * D'
        result = clip(D'', 1, 10)

    - AGAIN/HARD raise difficulty, EASY lowers it, GOOD leaves it
      (apart from mean reversion)
    - The step shrinks linearly as D approaches the bound it moves toward
    - Mean reversion keeps D from drifting to an extreme

    Args:
        difficulty: Current difficulty (1-10)
        grade: Feedback grade
        weights: Model weights

    Returns:
        New difficulty value (clipped to [1, 10])
    """
    delta = -weights[6] * (int(grade) - 3)
    span = D_MAX - D_MIN
    if delta > 0:
        damped = difficulty + delta * (D_MAX - difficulty) / span
    else:
        damped = difficulty + delta * (difficulty - D_MIN) / span

    easy_prior = initial_difficulty(FeedbackGrade.EASY, weights)
    reverted = weights[7] * easy_prior + (1.0 - weights[7]) * damped
    return clamp_difficulty(reverted)


def recall_stability(
    difficulty: float,
    stability: float,
    retrievability: float,
    grade: FeedbackGrade,
    weights: Sequence[float]
) -> float:
    """
    Update stability after a successful review (HARD/GOOD/EASY).

    Formula:
        growth = e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1)
                 * hard_penalty * easy_bonus
        S'     = S * (1 + growth)

    Where:
        - (1 - R) rewards well-spaced success: recalling a card that had
          decayed gives a bigger boost than recalling a fresh one
        - (11 - D) slows learning for difficult cards
        - S^-w9 gives diminishing returns for already-stable cards
        - hard_penalty = w15 on HARD, easy_bonus = w16 on EASY

    growth is never negative, so S' >= S.
    """
    if grade == FeedbackGrade.AGAIN:
        raise ValueError("Use forget_stability for AGAIN feedback")

    hard_penalty = weights[15] if grade == FeedbackGrade.HARD else 1.0
    easy_bonus = weights[16] if grade == FeedbackGrade.EASY else 1.0

    growth = (
        math.exp(weights[8])
        * (11.0 - difficulty)
        * math.pow(stability, -weights[9])
        * (math.exp(weights[10] * (1.0 - retrievability)) - 1.0)
        * hard_penalty
        * easy_bonus
    )
    return max(S_MIN, stability * (1.0 + growth))


def forget_stability(
    difficulty: float,
    stability: float,
    retrievability: float,
    weights: Sequence[float]
) -> float:
    """
    Update stability after a lapse (AGAIN while in Review).

    Formula:
        S_f = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^(w14 * (1 - R))
        S'  = clip(S_f, S_MIN, S)

    A lapse never increases stability and never drives it to zero.
    """
    forgotten = (
        weights[11]
        * math.pow(difficulty, -weights[12])
        * (math.pow(stability + 1.0, weights[13]) - 1.0)
        * math.exp(weights[14] * (1.0 - retrievability))
    )
    return max(S_MIN, min(forgotten, stability))


def short_term_stability(stability: float, grade: FeedbackGrade) -> float:
    """
    Stability growth from a successful same-day learning step.

    Formula:
        S' = S * exp(SHORT_TERM_GAIN * (G - 3 + SHORT_TERM_OFFSET))

    Only GOOD and EASY grow stability here. AGAIN and HARD leave it
    untouched: the step sequence restarts or repeats instead.
    """
    if grade < FeedbackGrade.GOOD:
        return stability
    return stability * math.exp(SHORT_TERM_GAIN * (int(grade) - 3 + SHORT_TERM_OFFSET))
