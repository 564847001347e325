"""
Learning and Relearning Steps

Short fixed delays a card moves through before it is promoted to Review.

Key principle:
Steps establish a baseline. A failure inside the step sequence restarts
the sequence; it does not shrink stability.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Sequence

from srs.fsrs.constants import FeedbackGrade


@dataclass(frozen=True)
class StepDecision:
    """Outcome of one graded step: either another step or graduation."""
    graduated: bool
    step: int  # Step index the card sits on next (0 after graduation)
    delay: Optional[timedelta]  # Time until the next step (None when graduated)


def next_step(
    steps: Sequence[timedelta],
    current_step: int,
    grade: FeedbackGrade
) -> StepDecision:
    """
    Decide where a card goes after being graded on a learning step.

    Rules:
    - AGAIN: restart at step 0
    - HARD: repeat the current step
    - GOOD: advance one step; graduate when no steps remain
    - EASY: graduate immediately

    An empty step sequence graduates on any passing grade. AGAIN with no
    steps also graduates (the interval then comes from stability).

    Args:
        steps: Step durations (learning or relearning sequence)
        current_step: Index of the step just completed
        grade: Feedback grade for this step

    Returns:
        StepDecision
    """
    if not steps:
        return StepDecision(graduated=True, step=0, delay=None)

    current_step = min(max(current_step, 0), len(steps) - 1)

    if grade == FeedbackGrade.AGAIN:
        return StepDecision(graduated=False, step=0, delay=steps[0])

    if grade == FeedbackGrade.HARD:
        return StepDecision(graduated=False, step=current_step, delay=steps[current_step])

    if grade == FeedbackGrade.GOOD:
        following = current_step + 1
        if following >= len(steps):
            return StepDecision(graduated=True, step=0, delay=None)
        return StepDecision(graduated=False, step=following, delay=steps[following])

    return StepDecision(graduated=True, step=0, delay=None)


def first_step_decision(
    steps: Sequence[timedelta],
    grade: FeedbackGrade
) -> StepDecision:
    """
    Placement of a brand-new card after its first review.

    The first review counts as sitting step 0: AGAIN and HARD wait one
    step-0 delay, GOOD moves to step 1 (or graduates), EASY graduates.
    """
    return next_step(steps, 0, grade)
