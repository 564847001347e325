from dataclasses import replace

import pytest

from srs.fsrs.constants import CardStatus
from srs.fsrs.memory_state import new_memory_state
from srs.mastery import (
    LessonMastery,
    MasteryLevel,
    calculate_card_mastery,
    calculate_lesson_mastery,
    calculate_module_mastery,
    calculate_overall_mastery,
    mastery_to_score,
)
from tests.conftest import NOW, make_review_state


def test_unreviewed_card_is_new():
    assert calculate_card_mastery("card-1", None, NOW).level == MasteryLevel.NEW
    assert calculate_card_mastery("card-1", new_memory_state("card-1", NOW), NOW).level == MasteryLevel.NEW


def test_card_in_steps_is_learning():
    state = replace(make_review_state(), state=CardStatus.RELEARNING)
    assert calculate_card_mastery("card-1", state, NOW).level == MasteryLevel.LEARNING


@pytest.mark.parametrize(
    "stability, level",
    [(3.0, MasteryLevel.FAMILIAR), (10.0, MasteryLevel.PROFICIENT), (45.0, MasteryLevel.MASTERED)],
)
def test_review_card_level_by_stability(stability, level):
    mastery = calculate_card_mastery("card-1", make_review_state(stability=stability), NOW)
    assert mastery.level == level
    assert mastery.is_due
    assert 0.0 < mastery.retrievability < 1.0


def test_lesson_without_reviews_is_new():
    mastery = calculate_lesson_mastery("lesson-1", [], 10, NOW)
    assert mastery.level == MasteryLevel.NEW
    assert mastery.state_distribution[CardStatus.NEW] == 1.0


def test_lesson_mastered():
    states = [make_review_state(f"c{i}", stability=40.0) for i in range(9)]
    mastery = calculate_lesson_mastery("lesson-1", states, 10, NOW)
    assert mastery.level == MasteryLevel.MASTERED
    assert mastery.review_state_cards == 9
    assert mastery.average_stability_days == pytest.approx(40.0)
    assert sum(mastery.state_distribution.values()) == pytest.approx(1.0)


def test_lesson_proficiency_gated_by_quiz():
    states = [make_review_state(f"c{i}", stability=10.0) for i in range(8)]
    assert calculate_lesson_mastery("lesson-1", states, 10, NOW).level == MasteryLevel.PROFICIENT
    assert (
        calculate_lesson_mastery("lesson-1", states, 10, NOW, quiz_score=50.0).level
        == MasteryLevel.FAMILIAR
    )


def test_lesson_mostly_in_steps_is_learning():
    states = [replace(make_review_state(f"c{i}"), state=CardStatus.LEARNING) for i in range(5)]
    states.append(make_review_state("c9"))
    assert calculate_lesson_mastery("lesson-1", states, 10, NOW).level == MasteryLevel.LEARNING


def test_scores_increase_with_level():
    scores = [mastery_to_score(level) for level in MasteryLevel]
    assert scores == sorted(scores)
    assert scores[0] == 0 and scores[-1] == 100


def lesson(level, quiz_score=None, total_cards=10, review_cards=5):
    return LessonMastery(
        lesson_id=f"lesson-{level.value}",
        level=level,
        total_cards=total_cards,
        review_state_cards=review_cards,
        state_distribution={},
        average_stability_days=0.0,
        average_retrievability=0.0,
        quiz_score=quiz_score,
    )


@pytest.mark.parametrize(
    "levels, expected",
    [
        ([], MasteryLevel.NEW),
        ([MasteryLevel.NEW] * 3, MasteryLevel.NEW),
        ([MasteryLevel.MASTERED] * 9 + [MasteryLevel.NEW], MasteryLevel.MASTERED),
        ([MasteryLevel.MASTERED] * 8 + [MasteryLevel.NEW] * 2, MasteryLevel.PROFICIENT),
        ([MasteryLevel.PROFICIENT] * 4 + [MasteryLevel.FAMILIAR], MasteryLevel.PROFICIENT),
        ([MasteryLevel.FAMILIAR, MasteryLevel.LEARNING], MasteryLevel.FAMILIAR),
        ([MasteryLevel.FAMILIAR, MasteryLevel.LEARNING, MasteryLevel.NEW], MasteryLevel.LEARNING),
    ],
)
def test_module_level_from_lesson_levels(levels, expected):
    module = calculate_module_mastery("module-1", [lesson(level) for level in levels], 0)
    assert module.level == expected


def test_module_proficiency_gated_by_average_quiz():
    lessons = [lesson(MasteryLevel.PROFICIENT, quiz_score=70.0) for _ in range(4)]
    lessons.append(lesson(MasteryLevel.FAMILIAR))
    module = calculate_module_mastery("module-1", lessons, 5)

    assert module.average_quiz_score == 70.0
    assert module.level == MasteryLevel.FAMILIAR


def test_module_summary():
    lessons = [
        lesson(MasteryLevel.MASTERED, quiz_score=90.0, review_cards=10),
        lesson(MasteryLevel.FAMILIAR, review_cards=4),
        lesson(MasteryLevel.LEARNING, quiz_score=70.0, review_cards=1),
    ]
    module = calculate_module_mastery("module-1", lessons, 2)

    assert module.total_lessons == 3
    assert module.completed_lessons == 2
    assert module.average_quiz_score == pytest.approx(80.0)
    assert module.overall_review_fraction == pytest.approx(15 / 30)
    assert module.lesson_distribution[MasteryLevel.MASTERED] == 1
    assert module.lesson_distribution[MasteryLevel.PROFICIENT] == 0
    assert sum(module.lesson_distribution.values()) == 3


def test_module_without_quizzes_has_no_average():
    module = calculate_module_mastery("module-1", [lesson(MasteryLevel.LEARNING)], 0)
    assert module.average_quiz_score is None


def test_overall_mastery():
    mastered_lesson = calculate_lesson_mastery(
        "lesson-1", [make_review_state(f"a{i}", stability=40.0) for i in range(10)], 10, NOW
    )
    fresh_lesson = calculate_lesson_mastery("lesson-2", [], 10, NOW)
    modules = [
        calculate_module_mastery("module-1", [mastered_lesson], 1),
        calculate_module_mastery("module-2", [fresh_lesson], 0),
    ]

    overall = calculate_overall_mastery(modules)

    assert [m.level for m in modules] == [MasteryLevel.MASTERED, MasteryLevel.NEW]
    assert overall.level == MasteryLevel.FAMILIAR
    assert overall.total_modules == 2
    assert overall.total_lessons == 2
    assert overall.total_cards == 20
    assert overall.overall_review_fraction == pytest.approx(0.5)
    assert overall.average_stability_days == pytest.approx(40.0)
    assert overall.average_quiz_score is None
    assert overall.module_distribution[MasteryLevel.MASTERED] == 1


def test_overall_mastery_of_nothing_is_new():
    overall = calculate_overall_mastery([])
    assert overall.level == MasteryLevel.NEW
    assert overall.total_cards == 0
    assert overall.average_stability_days == 0.0
