"""
Memory State - FSRS Card State and Retrievability

Defines the per-card memory state and the derived quantities.

Key concepts:
- Stability (S): days until recall probability decays to 90%
- Difficulty (D): how hard the card is to learn (1-10 scale)
- Retrievability (R): probability of successful recall at time t
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from srs.fsrs.constants import DECAY, FACTOR, CardStatus
from srs.fsrs.errors import InvalidReviewError


SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class MemoryState:
    """
    Memory state for a single review card.

    Instances are immutable; the scheduler returns a new one per review.
    """
    card_id: str

    # Long-term memory parameters
    stability: float  # S, in days (0 while NEW)
    difficulty: float  # D, range 1-10 (0 while NEW)

    # Lifecycle
    state: CardStatus
    learning_step: int  # Index into the active (re)learning step sequence

    # Review tracking
    reps: int
    lapses: int
    scheduled_days: int
    elapsed_days: int
    last_review_at: Optional[datetime]
    due_at: datetime

    @property
    def is_new(self) -> bool:
        return self.state == CardStatus.NEW


def new_memory_state(card_id: str, now: datetime) -> MemoryState:
    """
    Default state for a card that has never been reviewed.

    Nothing is persisted here; the state only becomes durable after its
    first review is recorded.
    """
    return MemoryState(
        card_id=card_id,
        stability=0.0,
        difficulty=0.0,
        state=CardStatus.NEW,
        learning_step=0,
        reps=0,
        lapses=0,
        scheduled_days=0,
        elapsed_days=0,
        last_review_at=None,
        due_at=now,
    )


def forgetting_curve(stability: float, elapsed_days: float) -> float:
    """
    Probability of recall after elapsed_days.

    Formula: R = (1 + FACTOR * t / S) ^ DECAY

    Interpretation:
    - t = 0: R = 1.0 exactly
    - t = S: R = 0.9
    - R decreases strictly as t grows, more slowly for larger S

    Args:
        stability: Current stability in days (must be > 0)
        elapsed_days: Time since the last review in days

    Returns:
        Retrievability in (0, 1]
    """
    if stability <= 0:
        raise InvalidReviewError(f"Stability must be positive, got {stability}")
    if elapsed_days <= 0:
        return 1.0
    return math.pow(1.0 + FACTOR * elapsed_days / stability, DECAY)


def interval_for_retention(stability: float, retention: float) -> float:
    """
    Days until retrievability falls to `retention`. Inverse of forgetting_curve.

    t = S / FACTOR * (retention ^ (1 / DECAY) - 1)
    """
    if stability <= 0:
        raise InvalidReviewError(f"Stability must be positive, got {stability}")
    if not 0.0 < retention < 1.0:
        raise InvalidReviewError(f"Retention must be in (0, 1), got {retention}")
    return stability / FACTOR * (math.pow(retention, 1.0 / DECAY) - 1.0)


def elapsed_days_between(earlier: Optional[datetime], later: datetime) -> int:
    """Whole days elapsed between two timestamps (0 if earlier is None)."""
    if earlier is None:
        return 0
    seconds = (later - earlier).total_seconds()
    return max(0, int(seconds // SECONDS_PER_DAY))


def get_retrievability(state: MemoryState, now: datetime) -> float:
    """
    Current recall probability for a card.

    Cards that have never been reviewed return 0.
    """
    if state.is_new or state.last_review_at is None or state.stability <= 0:
        return 0.0
    days = (now - state.last_review_at).total_seconds() / SECONDS_PER_DAY
    return forgetting_curve(state.stability, days)
