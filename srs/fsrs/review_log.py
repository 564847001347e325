"""
Review events: the append-only audit trail of completed reviews.

Events are written once and never read back by the scheduler.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from srs.fsrs.constants import CardStatus, FeedbackGrade
from srs.fsrs.scheduler import ScheduleResult


# Known review contexts. Any other string is stored as-is.
CONTEXT_INLINE = "inline"
CONTEXT_REVIEW_SESSION = "review_session"
CONTEXT_QUIZ = "quiz"


@dataclass(frozen=True)
class ReviewEvent:
    """One completed review, snapshotting the state right after the update."""
    card_id: str
    lesson_id: str
    grade: FeedbackGrade
    timestamp: datetime

    # State after review
    scheduled_days: int
    elapsed_days: int
    state: CardStatus
    stability_after: float
    difficulty_after: float

    # State before review (None on a card's first review)
    stability_before: Optional[float] = None
    difficulty_before: Optional[float] = None
    retrievability_before: Optional[float] = None

    # Session context (optional, for analytics)
    context: Optional[str] = None
    duration_ms: Optional[int] = None


def build_review_event(
    result: ScheduleResult,
    lesson_id: str,
    context: Optional[str] = None,
    duration_ms: Optional[int] = None
) -> ReviewEvent:
    """Build the log entry for a scheduling result."""
    before = result.previous
    after = result.state
    first_review = before.is_new

    return ReviewEvent(
        card_id=after.card_id,
        lesson_id=lesson_id,
        grade=result.grade,
        timestamp=result.reviewed_at,
        scheduled_days=after.scheduled_days,
        elapsed_days=after.elapsed_days,
        state=after.state,
        stability_after=after.stability,
        difficulty_after=after.difficulty,
        stability_before=None if first_review else before.stability,
        difficulty_before=None if first_review else before.difficulty,
        retrievability_before=result.retrievability,
        context=context,
        duration_ms=duration_ms,
    )
