"""
Grade mapping layer.

Review UIs may expose only two buttons (fail/pass). The scheduler always
works on the four-level FeedbackGrade scale; this module is the single
place where coarser or looser inputs are translated.
"""

from __future__ import annotations

from typing import Union

from srs.fsrs.constants import BinaryGrade, FeedbackGrade
from srs.fsrs.errors import InvalidReviewError


GradeInput = Union[FeedbackGrade, BinaryGrade, int, str]

BINARY_TO_FEEDBACK = {
    BinaryGrade.FAIL: FeedbackGrade.AGAIN,
    BinaryGrade.PASS: FeedbackGrade.GOOD,
}


def to_feedback_grade(grade: GradeInput) -> FeedbackGrade:
    """
    Translate any accepted grade representation to a FeedbackGrade.

    Accepted:
        - FeedbackGrade (returned unchanged)
        - BinaryGrade (FAIL -> AGAIN, PASS -> GOOD)
        - int 1..4
        - str: "again", "hard", "good", "easy", "fail", "pass" (any case)

    Raises:
        InvalidReviewError: for anything else
    """
    if isinstance(grade, FeedbackGrade):
        return grade
    if isinstance(grade, BinaryGrade):
        return BINARY_TO_FEEDBACK[grade]
    if isinstance(grade, bool):
        raise InvalidReviewError(f"Grade must not be a bool: {grade!r}")
    if isinstance(grade, int):
        try:
            return FeedbackGrade(grade)
        except ValueError:
            raise InvalidReviewError(f"Grade out of range 1-4: {grade}") from None
    if isinstance(grade, str):
        name = grade.strip().lower()
        if name in (g.value for g in BinaryGrade):
            return BINARY_TO_FEEDBACK[BinaryGrade(name)]
        try:
            return FeedbackGrade[name.upper()]
        except KeyError:
            raise InvalidReviewError(f"Unknown grade: {grade!r}") from None
    raise InvalidReviewError(f"Unsupported grade type: {type(grade).__name__}")


def is_failure(grade: FeedbackGrade) -> bool:
    return grade == FeedbackGrade.AGAIN
