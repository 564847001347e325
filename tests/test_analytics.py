import math
from datetime import timedelta

import pandas as pd

from srs.analytics import build_review_dashboard
from srs.analytics.metrics import compute_daily_retention
from srs.fsrs.constants import FeedbackGrade
from tests.conftest import NOW


def test_empty_dashboard(repository):
    data = build_review_dashboard(repository, NOW)
    assert data.total_reviews == 0
    assert data.studied_unique == 0
    assert data.learned_current == 0
    assert data.due_now == 0
    assert data.daily_review_counts.empty
    assert len(data.due_forecast) == 14
    assert data.due_forecast.sum() == 0


def test_dashboard_metrics(orchestrator, repository):
    two_days_ago = NOW - timedelta(days=2)
    yesterday = NOW - timedelta(days=1)
    orchestrator.record_review("a", "lesson-1", FeedbackGrade.GOOD, now=two_days_ago)
    orchestrator.record_review("b", "lesson-1", FeedbackGrade.AGAIN, now=two_days_ago)
    orchestrator.record_review("a", "lesson-1", FeedbackGrade.GOOD, now=yesterday)

    data = build_review_dashboard(repository, NOW)

    assert data.total_reviews == 3
    assert data.studied_unique == 2
    assert list(data.daily_review_counts) == [2, 1]
    assert list(data.studied_cumulative_daily) == [2, 2]

    retention = list(data.daily_retention)
    assert math.isnan(retention[0])
    assert retention[1] == 1.0

    # "b" is stuck on a 10 minute learning step; "a" graduated yesterday
    assert data.due_now == 1
    assert data.learned_current == 1
    assert data.due_forecast.iloc[0] == 1
    assert data.due_forecast.sum() == 2


def test_daily_retention_counts_only_spaced_reviews():
    day = pd.Timestamp(NOW).floor("D")
    events = pd.DataFrame(
        {
            "day_utc": [day, day, day, day],
            "elapsed_days": [0, 0, 3, 1],
            "grade": [
                int(FeedbackGrade.AGAIN),
                int(FeedbackGrade.AGAIN),
                int(FeedbackGrade.GOOD),
                int(FeedbackGrade.AGAIN),
            ],
        }
    )
    day_index = pd.date_range(start=day, periods=2, freq="D")

    retention = compute_daily_retention(events, day_index)

    assert retention.iloc[0] == 0.5
    assert math.isnan(retention.iloc[1])
