"""
Scheduling - Main API for Review Management

Ties the pure scheduler to the card-state store.

Main workflow:
1. Learner grades a card
2. Load the card's state (or a default NEW state)
3. Run the scheduler
4. Save state and log event in one transaction
5. On a concurrent-write conflict, re-read and re-schedule
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from srs.fsrs.config import DEFAULT_PARAMETERS, SchedulerParameters
from srs.fsrs.database import CardStateRepository
from srs.fsrs.errors import ConcurrentUpdateError, PersistenceError
from srs.fsrs.grades import GradeInput
from srs.fsrs.memory_state import MemoryState, new_memory_state
from srs.fsrs.review_log import ReviewEvent, build_review_event
from srs.fsrs.scheduler import ScheduleResult, preview, schedule

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ReviewOutcome:
    """What record_review persisted."""
    result: ScheduleResult
    event: ReviewEvent
    version: int
    attempts: int

    @property
    def state(self) -> MemoryState:
        return self.result.state


class ReviewOrchestrator:
    """
    Records reviews for one learner's cards.

    Updates to a single card are serialized twice over: an in-process lock
    per card_id around the read-modify-write, and an optimistic version
    check in the database for writers in other processes.
    """

    def __init__(
        self,
        repository: CardStateRepository,
        params: Optional[SchedulerParameters] = None,
        clock: Optional[Callable[[], datetime]] = None,
        max_retries: int = 3
    ):
        self.repository = repository
        self.params = params or DEFAULT_PARAMETERS
        self.clock = clock or utc_now
        self.max_retries = max_retries
        # card_id -> [lock, number of callers holding or waiting on it]
        self._locks: dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _card_lock(self, card_id: str) -> Iterator[None]:
        """Serialize work on one card; the entry is dropped once nobody uses it."""
        with self._locks_guard:
            entry = self._locks.setdefault(card_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[card_id]

    def get_or_create_state(self, card_id: str) -> MemoryState:
        """
        Stored state for a card, or a default NEW state.

        Read-only: a default state is not written until its first review
        is recorded.
        """
        state = self.repository.get(card_id)
        if state is None:
            return new_memory_state(card_id, self.clock())
        return state

    def preview_review(self, card_id: str, now: Optional[datetime] = None) -> dict:
        """Outcomes for every grade at `now`, nothing persisted."""
        now = now or self.clock()
        return preview(self.get_or_create_state(card_id), now, self.params)

    def record_review(
        self,
        card_id: str,
        lesson_id: str,
        grade: GradeInput,
        context: Optional[str] = None,
        now: Optional[datetime] = None,
        duration_ms: Optional[int] = None
    ) -> ReviewOutcome:
        """
        Schedule a review and persist the new state with its review event.

        Args:
            card_id: Review card identifier
            lesson_id: Lesson the card belongs to
            grade: FeedbackGrade, BinaryGrade or equivalent
            context: Optional review context tag ("inline", "quiz", ...)
            now: Review time (defaults to the orchestrator's clock)
            duration_ms: Optional time the learner spent on the card

        Returns:
            ReviewOutcome

        Raises:
            InvalidReviewError: malformed input; nothing is written
            ConcurrentUpdateError: still conflicting after max_retries
            PersistenceError: the store failed; nothing is written
        """
        now = now or self.clock()

        with self._card_lock(card_id):
            attempt = 0
            while True:
                attempt += 1
                stored = self.repository.get_versioned(card_id)
                if stored is None:
                    current, version = new_memory_state(card_id, now), None
                else:
                    current, version = stored.state, stored.version
                    # A writer that won the race may have stamped a later review time
                    if attempt > 1 and current.last_review_at and current.last_review_at > now:
                        now = current.last_review_at

                result = schedule(current, grade, now, self.params)
                event = build_review_event(result, lesson_id, context, duration_ms)

                try:
                    new_version = self.repository.save_review(result.state, event, version)
                except ConcurrentUpdateError:
                    if attempt > self.max_retries:
                        logger.error(
                            "Giving up on card %s after %d conflicting attempts", card_id, attempt
                        )
                        raise
                    logger.warning(
                        "Concurrent update on card %s (attempt %d), re-reading", card_id, attempt
                    )
                    continue
                except PersistenceError:
                    logger.exception("Failed to persist review of card %s", card_id)
                    raise

                return ReviewOutcome(result=result, event=event, version=new_version, attempts=attempt)
