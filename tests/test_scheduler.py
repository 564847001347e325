from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from srs.fsrs.config import SchedulerParameters
from srs.fsrs.constants import D_MAX, D_MIN, DEFAULT_WEIGHTS, BinaryGrade, CardStatus, FeedbackGrade
from srs.fsrs.errors import InvalidReviewError
from srs.fsrs.memory_state import new_memory_state
from srs.fsrs.scheduler import preview, schedule
from tests.conftest import NOW, make_review_state

TEN_MINUTES = timedelta(minutes=10)


# ---- Worked example: S=10, D=5, reviewed 12 days ago, due 2 days ago ----

def test_pass_on_overdue_card():
    state = make_review_state()
    result = schedule(state, BinaryGrade.PASS, NOW)

    assert result.retrievability < 0.9
    assert result.state.stability > 10.0
    assert result.state.scheduled_days > 10
    assert result.state.state == CardStatus.REVIEW
    assert result.state.reps == state.reps + 1
    assert result.state.lapses == 0
    assert result.state.elapsed_days == 12
    assert result.state.last_review_at == NOW
    assert result.state.due_at == NOW + timedelta(days=result.state.scheduled_days)


def test_fail_on_overdue_card():
    state = make_review_state()
    result = schedule(state, BinaryGrade.FAIL, NOW)

    assert result.state.lapses == 1
    assert result.state.state == CardStatus.RELEARNING
    assert result.state.stability < 10.0
    assert result.state.difficulty > 5.0
    assert result.state.learning_step == 0
    assert result.state.scheduled_days == 0
    assert result.state.due_at == NOW + TEN_MINUTES


def test_fail_interval_shorter_than_pass():
    state = make_review_state()
    failed = schedule(state, FeedbackGrade.AGAIN, NOW)
    passed = schedule(state, FeedbackGrade.GOOD, NOW)
    assert failed.state.due_at < passed.state.due_at
    assert failed.state.scheduled_days < passed.state.scheduled_days


def test_binary_grades_map_to_again_and_good():
    state = make_review_state()
    assert schedule(state, BinaryGrade.PASS, NOW) == schedule(state, FeedbackGrade.GOOD, NOW)
    assert schedule(state, BinaryGrade.FAIL, NOW) == schedule(state, FeedbackGrade.AGAIN, NOW)


# ---- Determinism and purity ----

def test_schedule_is_deterministic():
    state = make_review_state()
    for grade in FeedbackGrade:
        assert schedule(state, grade, NOW) == schedule(state, grade, NOW)


def test_input_state_untouched():
    state = make_review_state()
    snapshot = replace(state)
    result = schedule(state, FeedbackGrade.EASY, NOW)
    assert state == snapshot
    assert result.previous == snapshot


def test_preview_covers_all_grades():
    outcomes = preview(make_review_state(), NOW)
    assert set(outcomes) == set(FeedbackGrade)
    days = [outcomes[g].state.scheduled_days for g in FeedbackGrade]
    assert days[0] < days[1] < days[2] < days[3]


# ---- First review and learning steps ----

def test_first_review_good():
    result = schedule(new_memory_state("card-1", NOW), FeedbackGrade.GOOD, NOW)
    state = result.state

    assert result.retrievability is None
    assert state.state == CardStatus.LEARNING
    assert state.learning_step == 1
    assert state.stability == pytest.approx(DEFAULT_WEIGHTS[2])
    assert state.difficulty == pytest.approx(DEFAULT_WEIGHTS[4])
    assert state.reps == 1
    assert state.scheduled_days == 1
    assert state.due_at == NOW + timedelta(days=1)
    assert state.last_review_at == NOW


def test_first_review_again():
    state = schedule(new_memory_state("card-1", NOW), FeedbackGrade.AGAIN, NOW).state
    assert state.state == CardStatus.LEARNING
    assert state.learning_step == 0
    assert state.stability == pytest.approx(DEFAULT_WEIGHTS[0])
    assert state.difficulty == pytest.approx(DEFAULT_WEIGHTS[4] + 2 * DEFAULT_WEIGHTS[5])
    assert state.due_at == NOW + TEN_MINUTES
    assert state.lapses == 0


def test_first_review_easy_graduates():
    state = schedule(new_memory_state("card-1", NOW), FeedbackGrade.EASY, NOW).state
    assert state.state == CardStatus.REVIEW
    assert state.scheduled_days >= 1
    assert state.due_at == NOW + timedelta(days=state.scheduled_days)


def test_learning_again_restarts_without_penalty():
    learning = schedule(new_memory_state("card-1", NOW), FeedbackGrade.GOOD, NOW).state
    later = NOW + timedelta(hours=3)
    state = schedule(learning, FeedbackGrade.AGAIN, later).state

    assert state.state == CardStatus.LEARNING
    assert state.learning_step == 0
    assert state.stability == learning.stability
    assert state.lapses == 0
    assert state.due_at == later + TEN_MINUTES


def test_learning_hard_repeats_step():
    learning = schedule(new_memory_state("card-1", NOW), FeedbackGrade.GOOD, NOW).state
    state = schedule(learning, FeedbackGrade.HARD, NOW + timedelta(hours=1)).state
    assert state.learning_step == 1
    assert state.due_at == NOW + timedelta(hours=1, days=1)


def test_relearning_again_counts_lapse():
    relearning = schedule(make_review_state(), FeedbackGrade.AGAIN, NOW).state
    later = NOW + TEN_MINUTES
    state = schedule(relearning, FeedbackGrade.AGAIN, later).state

    assert state.state == CardStatus.RELEARNING
    assert state.lapses == relearning.lapses + 1
    assert state.stability == relearning.stability
    assert state.due_at == later + TEN_MINUTES


def test_relearning_returns_with_lapse_stability():
    failed = schedule(make_review_state(), FeedbackGrade.AGAIN, NOW).state
    assert failed.state == CardStatus.RELEARNING

    back = schedule(failed, FeedbackGrade.GOOD, failed.due_at).state
    assert back.state == CardStatus.REVIEW
    assert back.stability == failed.stability
    assert back.lapses == failed.lapses


def test_relearning_hard_keeps_stability():
    failed = schedule(make_review_state(), FeedbackGrade.AGAIN, NOW).state
    state = schedule(failed, FeedbackGrade.HARD, failed.due_at).state
    assert state.state == CardStatus.RELEARNING
    assert state.stability == failed.stability


def test_learning_graduation_grows_stability():
    learning = schedule(new_memory_state("card-1", NOW), FeedbackGrade.GOOD, NOW).state
    graduated = schedule(learning, FeedbackGrade.GOOD, learning.due_at).state
    assert graduated.state == CardStatus.REVIEW
    assert graduated.stability > learning.stability


def test_full_lifecycle():
    state = new_memory_state("card-1", NOW)
    seen = [state.state]

    now = NOW
    for grade in (FeedbackGrade.GOOD, FeedbackGrade.GOOD, FeedbackGrade.AGAIN, FeedbackGrade.GOOD):
        state = schedule(state, grade, now).state
        seen.append(state.state)
        now = state.due_at

    assert seen == [
        CardStatus.NEW,
        CardStatus.LEARNING,
        CardStatus.REVIEW,
        CardStatus.RELEARNING,
        CardStatus.REVIEW,
    ]
    assert state.reps == 4
    assert state.lapses == 1


def test_empty_relearning_steps_stay_in_review():
    params = SchedulerParameters(relearning_steps=())
    state = schedule(make_review_state(), FeedbackGrade.AGAIN, NOW, params).state
    assert state.state == CardStatus.REVIEW
    assert state.lapses == 1
    assert state.scheduled_days >= 1


# ---- Bounds ----

def test_stability_stays_positive_under_repeated_failure():
    state = make_review_state()
    now = NOW
    for _ in range(30):
        state = schedule(state, FeedbackGrade.AGAIN, now).state
        assert state.stability > 0
        assert D_MIN <= state.difficulty <= D_MAX
        now = state.due_at
        state = schedule(state, FeedbackGrade.GOOD, now).state
        assert state.state == CardStatus.REVIEW
        assert state.scheduled_days >= 1
        now = state.due_at

    assert state.lapses == 30
    assert state.difficulty > 5.0


@pytest.mark.parametrize("stability", [0.5, 1.0, 5.0, 20.0, 100.0, 500.0])
@pytest.mark.parametrize("grade", [FeedbackGrade.HARD, FeedbackGrade.GOOD, FeedbackGrade.EASY])
def test_interval_within_configured_bounds(stability, grade):
    params = SchedulerParameters(minimum_interval=2, maximum_interval=30)
    state = make_review_state(stability=stability)
    result = schedule(state, grade, NOW, params)
    assert 2 <= result.state.scheduled_days <= 30


def test_fuzz_disabled_uses_rounded_interval():
    params = SchedulerParameters(enable_fuzz=False)
    result = schedule(make_review_state(), FeedbackGrade.GOOD, NOW, params)
    assert result.state.scheduled_days == round(result.state.stability)


def test_lower_target_retention_lengthens_interval():
    strict = SchedulerParameters(enable_fuzz=False, target_retention=0.95)
    relaxed = SchedulerParameters(enable_fuzz=False, target_retention=0.8)
    state = make_review_state()
    assert (
        schedule(state, FeedbackGrade.GOOD, NOW, strict).state.scheduled_days
        < schedule(state, FeedbackGrade.GOOD, NOW, relaxed).state.scheduled_days
    )


# ---- Invalid input ----

def test_invalid_grade_rejected():
    with pytest.raises(InvalidReviewError):
        schedule(make_review_state(), 7, NOW)
    with pytest.raises(InvalidReviewError):
        schedule(make_review_state(), "maybe", NOW)


def test_review_before_last_review_rejected():
    state = make_review_state()
    with pytest.raises(InvalidReviewError):
        schedule(state, FeedbackGrade.GOOD, state.last_review_at - timedelta(seconds=1))


def test_naive_timestamp_rejected():
    with pytest.raises(InvalidReviewError):
        schedule(make_review_state(), FeedbackGrade.GOOD, datetime(2026, 3, 1, 9, 0))


def test_naive_last_review_rejected():
    state = replace(make_review_state(), last_review_at=datetime(2026, 2, 17, 9, 0))
    with pytest.raises(InvalidReviewError):
        schedule(state, FeedbackGrade.GOOD, NOW)


@pytest.mark.parametrize(
    "changes",
    [
        {"stability": -1.0},
        {"stability": 0.0},
        {"difficulty": 11.0},
        {"difficulty": 0.5},
        {"reps": -1},
        {"last_review_at": None},
    ],
)
def test_malformed_state_rejected(changes):
    with pytest.raises(InvalidReviewError):
        schedule(replace(make_review_state(), **changes), FeedbackGrade.GOOD, NOW)
