"""
Mastery levels for cards, lessons, modules and overall progress.

Mastery levels (from lowest to highest):
    new        -- no cards reviewed
    learning   -- <50% of cards in Review state
    familiar   -- 50-80% of cards in Review state
    proficient -- 80%+ cards in Review state (and quiz score >= 80 when known)
    mastered   -- 90%+ cards in Review state with average stability >= 30 days

Modules aggregate lessons and the overall level aggregates modules, by the
share of children at each level:
    mastered   -- 90%+ children mastered
    proficient -- 80%+ children proficient or better (and average quiz >= 80 when known)
    familiar   -- 50%+ children familiar or better
    learning   -- anything else with at least one child past new
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Sequence

from srs.fsrs.constants import CardStatus
from srs.fsrs.memory_state import MemoryState, get_retrievability


class MasteryLevel(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    FAMILIAR = "familiar"
    PROFICIENT = "proficient"
    MASTERED = "mastered"


MASTERY_SCORES = {
    MasteryLevel.NEW: 0,
    MasteryLevel.LEARNING: 25,
    MasteryLevel.FAMILIAR: 50,
    MasteryLevel.PROFICIENT: 75,
    MasteryLevel.MASTERED: 100,
}

# ---- Thresholds ----
FAMILIAR_REVIEW_FRACTION = 0.5
PROFICIENT_REVIEW_FRACTION = 0.8
PROFICIENT_QUIZ_SCORE = 80.0
MASTERED_REVIEW_FRACTION = 0.9
MASTERED_STABILITY_DAYS = 30.0
PROFICIENT_STABILITY_DAYS = 7.0  # Card level only


@dataclass(frozen=True)
class CardMastery:
    card_id: str
    level: MasteryLevel
    state: CardStatus
    retrievability: float
    stability_days: float
    is_due: bool


@dataclass(frozen=True)
class LessonMastery:
    lesson_id: str
    level: MasteryLevel
    total_cards: int
    review_state_cards: int
    # Fraction of the lesson's cards in each lifecycle phase
    state_distribution: dict[CardStatus, float]
    average_stability_days: float
    average_retrievability: float
    quiz_score: Optional[float] = None
    cards: list[CardMastery] = field(default_factory=list)


def mastery_to_score(level: MasteryLevel) -> int:
    """0-100 score for progress bars and sorting."""
    return MASTERY_SCORES[level]


def calculate_card_mastery(
    card_id: str,
    state: Optional[MemoryState],
    now: datetime
) -> CardMastery:
    """Mastery of a single card. A missing state means the card was never reviewed."""
    if state is None or state.is_new:
        return CardMastery(
            card_id=card_id,
            level=MasteryLevel.NEW,
            state=CardStatus.NEW,
            retrievability=0.0,
            stability_days=0.0,
            is_due=False,
        )

    if state.state in (CardStatus.LEARNING, CardStatus.RELEARNING):
        level = MasteryLevel.LEARNING
    elif state.stability >= MASTERED_STABILITY_DAYS:
        level = MasteryLevel.MASTERED
    elif state.stability >= PROFICIENT_STABILITY_DAYS:
        level = MasteryLevel.PROFICIENT
    else:
        level = MasteryLevel.FAMILIAR

    return CardMastery(
        card_id=card_id,
        level=level,
        state=state.state,
        retrievability=get_retrievability(state, now),
        stability_days=state.stability,
        is_due=state.due_at <= now,
    )


def calculate_lesson_mastery(
    lesson_id: str,
    states: Sequence[MemoryState],
    total_cards: int,
    now: datetime,
    quiz_score: Optional[float] = None
) -> LessonMastery:
    """
    Mastery of a lesson from the states of its reviewed cards.

    Args:
        lesson_id: Lesson identifier
        states: Stored states of the lesson's cards (unreviewed cards omitted)
        total_cards: Number of review cards the lesson has
        now: Evaluation time
        quiz_score: Best quiz score (0-100) when the caller tracks one

    Returns:
        LessonMastery
    """
    cards = [calculate_card_mastery(s.card_id, s, now) for s in states]
    reviewed = [s for s in states if not s.is_new]
    effective_total = max(total_cards, len(states), 1)

    counts = Counter(c.state for c in cards)
    counts[CardStatus.NEW] += max(total_cards - len(states), 0)
    distribution = {status: counts[status] / effective_total for status in CardStatus}

    review_count = counts[CardStatus.REVIEW]
    review_fraction = review_count / effective_total
    average_stability = (
        sum(s.stability for s in reviewed) / len(reviewed) if reviewed else 0.0
    )
    average_retrievability = (
        sum(c.retrievability for c in cards) / len(cards) if cards else 0.0
    )

    return LessonMastery(
        lesson_id=lesson_id,
        level=_lesson_level(review_fraction, average_stability, quiz_score, len(reviewed)),
        total_cards=total_cards,
        review_state_cards=review_count,
        state_distribution=distribution,
        average_stability_days=average_stability,
        average_retrievability=average_retrievability,
        quiz_score=quiz_score,
        cards=cards,
    )


def _lesson_level(
    review_fraction: float,
    average_stability: float,
    quiz_score: Optional[float],
    reviewed_count: int
) -> MasteryLevel:
    if reviewed_count == 0:
        return MasteryLevel.NEW
    if (
        review_fraction >= MASTERED_REVIEW_FRACTION
        and average_stability >= MASTERED_STABILITY_DAYS
    ):
        return MasteryLevel.MASTERED
    if review_fraction >= PROFICIENT_REVIEW_FRACTION and (
        quiz_score is None or quiz_score >= PROFICIENT_QUIZ_SCORE
    ):
        return MasteryLevel.PROFICIENT
    if review_fraction >= FAMILIAR_REVIEW_FRACTION:
        return MasteryLevel.FAMILIAR
    return MasteryLevel.LEARNING


@dataclass(frozen=True)
class ModuleMastery:
    module_id: str
    level: MasteryLevel
    lesson_distribution: dict[MasteryLevel, int]
    total_lessons: int
    completed_lessons: int
    average_quiz_score: Optional[float]  # None when no lesson has a quiz score
    overall_review_fraction: float
    lessons: list[LessonMastery] = field(default_factory=list)


@dataclass(frozen=True)
class OverallMastery:
    level: MasteryLevel
    module_distribution: dict[MasteryLevel, int]
    total_modules: int
    total_lessons: int
    total_cards: int
    overall_review_fraction: float
    average_quiz_score: Optional[float]
    average_stability_days: float
    modules: list[ModuleMastery] = field(default_factory=list)


def calculate_module_mastery(
    module_id: str,
    lessons: Sequence[LessonMastery],
    completed_lessons: int
) -> ModuleMastery:
    """
    Mastery of a module from the mastery of its lessons.

    Args:
        module_id: Module identifier
        lessons: LessonMastery of every lesson in the module
        completed_lessons: Lessons the learner has finished reading

    Returns:
        ModuleMastery
    """
    average_quiz = _average_quiz_score(lessons)
    return ModuleMastery(
        module_id=module_id,
        level=_aggregate_level([lesson.level for lesson in lessons], average_quiz),
        lesson_distribution=_level_distribution(lesson.level for lesson in lessons),
        total_lessons=len(lessons),
        completed_lessons=completed_lessons,
        average_quiz_score=average_quiz,
        overall_review_fraction=_review_fraction(lessons),
        lessons=list(lessons),
    )


def calculate_overall_mastery(modules: Sequence[ModuleMastery]) -> OverallMastery:
    """Mastery across every module."""
    lessons = [lesson for module in modules for lesson in module.lessons]
    cards = [card for lesson in lessons for card in lesson.cards]
    average_quiz = _average_quiz_score(lessons)

    return OverallMastery(
        level=_aggregate_level([m.level for m in modules], average_quiz),
        module_distribution=_level_distribution(m.level for m in modules),
        total_modules=len(modules),
        total_lessons=sum(m.total_lessons for m in modules),
        total_cards=sum(lesson.total_cards for lesson in lessons),
        overall_review_fraction=_review_fraction(lessons),
        average_quiz_score=average_quiz,
        average_stability_days=(
            sum(c.stability_days for c in cards) / len(cards) if cards else 0.0
        ),
        modules=list(modules),
    )


# ---- Aggregation helpers ----

def _level_distribution(levels: Iterable[MasteryLevel]) -> dict[MasteryLevel, int]:
    counts = Counter(levels)
    return {level: counts[level] for level in MasteryLevel}


def _average_quiz_score(lessons: Sequence[LessonMastery]) -> Optional[float]:
    scores = [lesson.quiz_score for lesson in lessons if lesson.quiz_score is not None]
    return sum(scores) / len(scores) if scores else None


def _review_fraction(lessons: Sequence[LessonMastery]) -> float:
    total = sum(lesson.total_cards for lesson in lessons)
    return sum(lesson.review_state_cards for lesson in lessons) / total if total else 0.0


def _aggregate_level(
    levels: Sequence[MasteryLevel],
    average_quiz_score: Optional[float]
) -> MasteryLevel:
    if not levels or all(level == MasteryLevel.NEW for level in levels):
        return MasteryLevel.NEW

    total = len(levels)
    scores = [mastery_to_score(level) for level in levels]
    mastered = sum(1 for s in scores if s >= MASTERY_SCORES[MasteryLevel.MASTERED])
    proficient = sum(1 for s in scores if s >= MASTERY_SCORES[MasteryLevel.PROFICIENT])
    familiar = sum(1 for s in scores if s >= MASTERY_SCORES[MasteryLevel.FAMILIAR])

    if mastered / total >= MASTERED_REVIEW_FRACTION:
        return MasteryLevel.MASTERED
    if proficient / total >= PROFICIENT_REVIEW_FRACTION and (
        average_quiz_score is None or average_quiz_score >= PROFICIENT_QUIZ_SCORE
    ):
        return MasteryLevel.PROFICIENT
    if familiar / total >= FAMILIAR_REVIEW_FRACTION:
        return MasteryLevel.FAMILIAR
    return MasteryLevel.LEARNING
