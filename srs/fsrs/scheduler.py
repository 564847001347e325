"""
Scheduler - FSRS Algorithm Logic

Pure scheduling and state updates (no database calls, no clock reads).

Main workflow:
1. Validate the incoming state and review time
2. Branch on the card's lifecycle phase (New, Learning/Relearning, Review)
3. Update difficulty and stability
4. Pick the next interval (learning step, or forgetting-curve inversion + fuzz)
5. Return a new MemoryState; the input is never modified

Database I/O is handled by the database module, orchestration by the
scheduling module.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from srs.fsrs import review_updates
from srs.fsrs.config import DEFAULT_PARAMETERS, SchedulerParameters
from srs.fsrs.constants import D_MAX, D_MIN, CardStatus, FeedbackGrade
from srs.fsrs.errors import InvalidReviewError
from srs.fsrs.fuzz import apply_fuzz, fuzz_seed
from srs.fsrs.grades import GradeInput, to_feedback_grade
from srs.fsrs.learning_steps import StepDecision, first_step_decision, next_step
from srs.fsrs.memory_state import (
    MemoryState,
    elapsed_days_between,
    forgetting_curve,
    interval_for_retention,
)


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of scheduling one review."""
    state: MemoryState  # State after the review
    previous: MemoryState  # State before the review
    grade: FeedbackGrade  # Internal grade actually applied
    retrievability: Optional[float]  # R at review time (None on first review)
    reviewed_at: datetime

    @property
    def interval_days(self) -> int:
        return self.state.scheduled_days


def schedule(
    state: MemoryState,
    grade: GradeInput,
    now: datetime,
    params: Optional[SchedulerParameters] = None
) -> ScheduleResult:
    """
    Apply one graded review to a card.

    This is the core algorithm. Deterministic for fixed inputs: the only
    randomness is the fuzz factor, seeded from (card_id, reps).

    Args:
        state: Current memory state (a fresh NEW state for a first review)
        grade: FeedbackGrade, BinaryGrade or an equivalent int/str
        now: Review timestamp (timezone-aware, not before last_review_at)
        params: Scheduler parameters (defaults when omitted)

    Returns:
        ScheduleResult with the new state and the interval in days

    Raises:
        InvalidReviewError: malformed state, grade or timestamp
    """
    params = params or DEFAULT_PARAMETERS
    feedback = to_feedback_grade(grade)
    validate_state(state, now)

    if state.state == CardStatus.NEW:
        return _schedule_new(state, feedback, now, params)
    if state.state in (CardStatus.LEARNING, CardStatus.RELEARNING):
        return _schedule_steps(state, feedback, now, params)
    return _schedule_review(state, feedback, now, params)


def preview(
    state: MemoryState,
    now: datetime,
    params: Optional[SchedulerParameters] = None
) -> dict[FeedbackGrade, ScheduleResult]:
    """All four possible outcomes for a review at `now`, without committing any."""
    return {grade: schedule(state, grade, now, params) for grade in FeedbackGrade}


def validate_state(state: MemoryState, now: datetime):
    """
    Fail fast on input that can only come from a caller bug.

    Raises:
        InvalidReviewError
    """
    if not isinstance(now, datetime) or now.tzinfo is None or now.utcoffset() is None:
        raise InvalidReviewError(f"Review time must be a timezone-aware datetime, got {now!r}")
    if not isinstance(state.state, CardStatus):
        raise InvalidReviewError(f"Unknown card state: {state.state!r}")
    if state.stability < 0 or state.difficulty < 0:
        raise InvalidReviewError(
            f"Negative stability/difficulty for card {state.card_id!r}: "
            f"S={state.stability}, D={state.difficulty}"
        )
    for name in ("reps", "lapses", "scheduled_days", "elapsed_days", "learning_step"):
        if getattr(state, name) < 0:
            raise InvalidReviewError(f"{name} must be non-negative for card {state.card_id!r}")

    if state.state != CardStatus.NEW:
        if state.stability <= 0:
            raise InvalidReviewError(f"Reviewed card {state.card_id!r} has non-positive stability")
        if not D_MIN <= state.difficulty <= D_MAX:
            raise InvalidReviewError(
                f"Difficulty {state.difficulty} of card {state.card_id!r} outside [{D_MIN}, {D_MAX}]"
            )
        if state.last_review_at is None:
            raise InvalidReviewError(f"Reviewed card {state.card_id!r} has no last_review_at")

    if state.last_review_at is not None and state.last_review_at.utcoffset() is None:
        raise InvalidReviewError(
            f"last_review_at of card {state.card_id!r} must be timezone-aware, "
            f"got {state.last_review_at!r}"
        )
    if state.last_review_at is not None and now < state.last_review_at:
        raise InvalidReviewError(
            f"Review time {now.isoformat()} is before last review "
            f"{state.last_review_at.isoformat()} of card {state.card_id!r}"
        )


# ---- Lifecycle branches ----

def _schedule_new(
    state: MemoryState,
    grade: FeedbackGrade,
    now: datetime,
    params: SchedulerParameters
) -> ScheduleResult:
    """First review: priors by grade, then the first learning step."""
    stability = review_updates.initial_stability(grade, params.weights)
    difficulty = review_updates.initial_difficulty(grade, params.weights)
    decision = first_step_decision(params.learning_steps, grade)

    updated = replace(
        state,
        stability=stability,
        difficulty=difficulty,
        reps=1,
        elapsed_days=0,
        last_review_at=now,
    )
    updated = _place(updated, decision, CardStatus.LEARNING, now, 0, params)
    return ScheduleResult(updated, state, grade, None, now)


def _schedule_steps(
    state: MemoryState,
    grade: FeedbackGrade,
    now: datetime,
    params: SchedulerParameters
) -> ScheduleResult:
    """Learning/Relearning: walk the step sequence, no stability penalty on failure."""
    elapsed = elapsed_days_between(state.last_review_at, now)
    retrievability = forgetting_curve(state.stability, elapsed)

    relearning = state.state == CardStatus.RELEARNING
    steps = params.relearning_steps if relearning else params.learning_steps
    decision = next_step(steps, state.learning_step, grade)

    lapses = state.lapses + 1 if relearning and grade == FeedbackGrade.AGAIN else state.lapses
    # Relearning keeps the post-lapse stability until the card is back in Review
    stability = (
        state.stability if relearning
        else review_updates.short_term_stability(state.stability, grade)
    )

    updated = replace(
        state,
        stability=stability,
        difficulty=review_updates.next_difficulty(state.difficulty, grade, params.weights),
        reps=state.reps + 1,
        lapses=lapses,
        elapsed_days=elapsed,
        last_review_at=now,
    )
    updated = _place(updated, decision, state.state, now, elapsed, params)
    return ScheduleResult(updated, state, grade, retrievability, now)


def _schedule_review(
    state: MemoryState,
    grade: FeedbackGrade,
    now: datetime,
    params: SchedulerParameters
) -> ScheduleResult:
    """Steady state: forgetting-curve driven updates."""
    elapsed = elapsed_days_between(state.last_review_at, now)
    retrievability = forgetting_curve(state.stability, elapsed)
    difficulty = review_updates.next_difficulty(state.difficulty, grade, params.weights)

    if grade == FeedbackGrade.AGAIN:
        stability = review_updates.forget_stability(
            difficulty, state.stability, retrievability, params.weights
        )
        updated = replace(
            state,
            stability=stability,
            difficulty=difficulty,
            reps=state.reps + 1,
            lapses=state.lapses + 1,
            elapsed_days=elapsed,
            last_review_at=now,
        )
        decision = next_step(params.relearning_steps, 0, grade)
        updated = _place(updated, decision, CardStatus.RELEARNING, now, elapsed, params)
        return ScheduleResult(updated, state, grade, retrievability, now)

    stability = review_updates.recall_stability(
        difficulty, state.stability, retrievability, grade, params.weights
    )
    updated = replace(
        state,
        stability=stability,
        difficulty=difficulty,
        reps=state.reps + 1,
        elapsed_days=elapsed,
        last_review_at=now,
    )
    updated = _graduate(updated, now, elapsed, params)
    return ScheduleResult(updated, state, grade, retrievability, now)


# ---- Placement helpers ----

def _place(
    state: MemoryState,
    decision: StepDecision,
    step_status: CardStatus,
    now: datetime,
    elapsed: int,
    params: SchedulerParameters
) -> MemoryState:
    """Put a card on its next step, or graduate it to Review."""
    if decision.graduated:
        return _graduate(state, now, elapsed, params)
    return replace(
        state,
        state=step_status,
        learning_step=decision.step,
        scheduled_days=decision.delay.days,
        due_at=now + decision.delay,
    )


def _graduate(
    state: MemoryState,
    now: datetime,
    elapsed: int,
    params: SchedulerParameters
) -> MemoryState:
    """Review-state interval: invert the forgetting curve at target retention, fuzz, clamp."""
    raw = interval_for_retention(state.stability, params.target_retention)
    interval = apply_fuzz(raw, elapsed, fuzz_seed(state.card_id, state.reps), params)
    return replace(
        state,
        state=CardStatus.REVIEW,
        learning_step=0,
        scheduled_days=interval,
        due_at=now + timedelta(days=interval),
    )
