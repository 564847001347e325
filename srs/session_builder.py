"""
Review Session - Queue Creation and Session Tracking

Creates review sessions from two pools:
1. Due pool: cards whose due date has passed, most urgent first
2. New pool: cards never reviewed

Session Logic:
- New cards take at most NEW_CARD_RATIO of the session (and MAX_NEW_CARDS)
- Due cards fill the rest, in priority order
- New cards are spread evenly among the due cards
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from srs.fsrs.constants import CardStatus, FeedbackGrade
from srs.fsrs.grades import GradeInput
from srs.fsrs.memory_state import MemoryState
from srs.fsrs.scheduling import ReviewOrchestrator, ReviewOutcome

# ---- Session Configuration ----
MAX_CARDS = 20          # Cards per session
MAX_NEW_CARDS = 10      # New cards per session
NEW_CARD_RATIO = 0.3    # Fraction of the session reserved for new cards

# Lower = reviewed sooner
STATUS_PRIORITY = {
    CardStatus.RELEARNING: 0,  # Forgotten cards need immediate attention
    CardStatus.LEARNING: 1,
    CardStatus.REVIEW: 2,
    CardStatus.NEW: 3,
}


@dataclass(frozen=True)
class SessionCard:
    """A card queued for review within a session."""
    card_id: str
    lesson_id: str
    state: MemoryState
    is_new: bool


@dataclass(frozen=True)
class RatingResult:
    """Outcome of rating a single card within a session."""
    card_id: str
    grade: FeedbackGrade
    is_new: bool
    outcome: ReviewOutcome
    duration_ms: int


@dataclass(frozen=True)
class SessionStatistics:
    total_reviewed: int
    remaining: int
    again_count: int
    hard_count: int
    good_count: int
    easy_count: int
    new_cards_studied: int
    review_cards_studied: int
    total_time_ms: int
    average_time_ms: float
    # Fraction of non-new cards rated GOOD or EASY (0 when none studied)
    retention_rate: float
    started_at: datetime


def sort_by_priority(states: Iterable[MemoryState]) -> list[MemoryState]:
    """Relearning, then Learning, then Review, then New; earliest due first within each."""
    return sorted(states, key=lambda s: (STATUS_PRIORITY[s.state], s.due_at))


def filter_due(states: Iterable[MemoryState], now: datetime) -> list[MemoryState]:
    """Cards due at or before `now`."""
    return [s for s in states if s.due_at <= now]


def interleave(review_cards: list[SessionCard], new_cards: list[SessionCard]) -> list[SessionCard]:
    """
    Spread new cards among review cards at roughly even intervals.

    With 14 review cards and 6 new cards a new card lands about every
    3-4 positions, starting partway in.
    """
    if not new_cards:
        return list(review_cards)
    if not review_cards:
        return list(new_cards)

    total = len(review_cards) + len(new_cards)
    spacing = total / len(new_cards)
    result: list[SessionCard] = []
    new_index = 0
    review_index = 0
    next_new_at = math.floor(spacing / 2)

    for position in range(total):
        if new_index < len(new_cards) and position >= next_new_at:
            result.append(new_cards[new_index])
            new_index += 1
            next_new_at = math.floor(spacing / 2 + spacing * new_index)
        elif review_index < len(review_cards):
            result.append(review_cards[review_index])
            review_index += 1
        else:
            result.append(new_cards[new_index])
            new_index += 1

    return result


def build_review_queue(
    due_cards: list[SessionCard],
    new_cards: list[SessionCard],
    max_cards: int = MAX_CARDS,
    max_new_cards: int = MAX_NEW_CARDS,
    new_card_ratio: float = NEW_CARD_RATIO
) -> list[SessionCard]:
    """
    Build the session queue from due and new cards.

    Args:
        due_cards: Cards currently due (any order)
        new_cards: Never-reviewed cards, in presentation order
        max_cards: Session size cap
        max_new_cards: Cap on new cards
        new_card_ratio: Share of the session reserved for new cards

    Returns:
        Ordered list of SessionCard
    """
    by_id = {card.state.card_id: card for card in due_cards}
    ordered_due = [by_id[s.card_id] for s in sort_by_priority(c.state for c in due_cards)]

    target_new = min(len(new_cards), max_new_cards, math.floor(max_cards * new_card_ratio))
    target_review = min(len(ordered_due), max_cards - target_new)
    actual_new = min(target_new, max_cards - target_review)

    return interleave(ordered_due[:target_review], list(new_cards[:actual_new]))


class ReviewSession:
    """
    One sitting of reviews.

    Hands out cards in queue order and records each grade through the
    orchestrator, so every rating is persisted as it happens.
    """

    def __init__(
        self,
        orchestrator: ReviewOrchestrator,
        due_cards: list[SessionCard],
        new_cards: list[SessionCard],
        max_cards: int = MAX_CARDS,
        max_new_cards: int = MAX_NEW_CARDS,
        new_card_ratio: float = NEW_CARD_RATIO,
        context: str = "review_session",
        started_at: Optional[datetime] = None
    ):
        self.orchestrator = orchestrator
        self.context = context
        self.started_at = started_at or orchestrator.clock()
        self._queue = build_review_queue(
            due_cards, new_cards, max_cards, max_new_cards, new_card_ratio
        )
        self._index = 0
        self._results: list[RatingResult] = []

    def current(self) -> Optional[SessionCard]:
        """The card to present now, or None when the session is complete."""
        if self._index >= len(self._queue):
            return None
        return self._queue[self._index]

    def has_next(self) -> bool:
        return self._index < len(self._queue)

    def remaining(self) -> int:
        return max(0, len(self._queue) - self._index)

    def total_cards(self) -> int:
        return len(self._queue)

    def rate_current(
        self,
        grade: GradeInput,
        now: Optional[datetime] = None,
        duration_ms: int = 0
    ) -> Optional[RatingResult]:
        """
        Record a grade for the current card and advance.

        If persisting fails the error propagates and the session stays on
        the same card, so the rating can be retried.
        """
        card = self.current()
        if card is None:
            return None

        outcome = self.orchestrator.record_review(
            card.card_id,
            card.lesson_id,
            grade,
            context=self.context,
            now=now,
            duration_ms=duration_ms,
        )
        result = RatingResult(
            card_id=card.card_id,
            grade=outcome.result.grade,
            is_new=card.is_new,
            outcome=outcome,
            duration_ms=duration_ms,
        )
        self._results.append(result)
        self._index += 1
        return result

    def add_cards(self, cards: list[SessionCard]):
        """Insert cards right after the current one (e.g. for re-learning after a quiz)."""
        position = self._index + 1 if self._index < len(self._queue) else len(self._queue)
        self._queue[position:position] = cards

    @property
    def results(self) -> tuple[RatingResult, ...]:
        return tuple(self._results)

    def get_stats(self) -> SessionStatistics:
        """Current session statistics."""
        counts = Counter(r.grade for r in self._results)
        new_studied = sum(1 for r in self._results if r.is_new)
        review_results = [r for r in self._results if not r.is_new]
        correct = sum(
            1 for r in review_results if r.grade in (FeedbackGrade.GOOD, FeedbackGrade.EASY)
        )
        total_time = sum(r.duration_ms for r in self._results)

        return SessionStatistics(
            total_reviewed=len(self._results),
            remaining=self.remaining(),
            again_count=counts[FeedbackGrade.AGAIN],
            hard_count=counts[FeedbackGrade.HARD],
            good_count=counts[FeedbackGrade.GOOD],
            easy_count=counts[FeedbackGrade.EASY],
            new_cards_studied=new_studied,
            review_cards_studied=len(review_results),
            total_time_ms=total_time,
            average_time_ms=total_time / len(self._results) if self._results else 0.0,
            retention_rate=correct / len(review_results) if review_results else 0.0,
            started_at=self.started_at,
        )
