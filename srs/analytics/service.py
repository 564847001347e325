"""
Service layer to assemble the review analytics dashboard.
"""

from __future__ import annotations

from datetime import datetime

from srs.analytics.metrics import (
    build_day_index,
    compute_daily_retention,
    compute_daily_review_counts,
    compute_due_forecast,
    compute_learned_count,
    compute_studied_cumulative,
    compute_studied_unique,
)
from srs.analytics.queries import load_card_snapshots_df, load_review_events_df
from srs.analytics.types import ReviewDashboardData
from srs.fsrs.constants import R_TARGET
from srs.fsrs.database import CardStateRepository

FORECAST_DAYS = 14


def build_review_dashboard(
    repository: CardStateRepository,
    now: datetime,
    forecast_days: int = FORECAST_DAYS,
    r_target: float = R_TARGET
) -> ReviewDashboardData:
    """
    Build all KPI values and series needed by the progress page.
    """
    events_df = load_review_events_df(repository)
    snapshots_df = load_card_snapshots_df(repository, now)
    day_index = build_day_index(events_df)

    due_now = 0
    if not snapshots_df.empty:
        due_now = int((snapshots_df["due_at"] <= now).sum())

    return ReviewDashboardData(
        total_reviews=len(events_df),
        studied_unique=compute_studied_unique(events_df),
        learned_current=compute_learned_count(snapshots_df, r_target),
        due_now=due_now,
        daily_review_counts=compute_daily_review_counts(events_df, day_index),
        studied_cumulative_daily=compute_studied_cumulative(events_df, day_index),
        daily_retention=compute_daily_retention(events_df, day_index),
        due_forecast=compute_due_forecast(snapshots_df, now, forecast_days),
    )
