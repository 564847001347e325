"""
Metric computations for analytics dashboards.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from srs.fsrs.constants import FeedbackGrade


def build_day_index(events_df: pd.DataFrame) -> pd.DatetimeIndex:
    """
    Build a dense UTC day index spanning the event range.
    """
    if events_df.empty:
        return pd.DatetimeIndex([], tz="UTC")
    start = events_df["day_utc"].min()
    end = events_df["day_utc"].max()
    return pd.date_range(start=start, end=end, freq="D", tz="UTC")


def compute_studied_unique(events_df: pd.DataFrame) -> int:
    """
    Count unique reviewed card_ids.
    """
    if events_df.empty:
        return 0
    return int(events_df["card_id"].nunique())


def compute_daily_review_counts(
    events_df: pd.DataFrame,
    day_index: pd.DatetimeIndex
) -> pd.Series:
    """
    Number of reviews per day, zero-filled.
    """
    if events_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")
    daily = events_df.groupby("day_utc").size()
    return daily.reindex(day_index, fill_value=0).astype("int64")


def compute_studied_cumulative(
    events_df: pd.DataFrame,
    day_index: pd.DatetimeIndex
) -> pd.Series:
    """
    Cumulative unique studied cards by first-seen day.
    """
    if events_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")

    first_seen = events_df.groupby("card_id")["timestamp"].min().dt.floor("D")
    counts = first_seen.value_counts().sort_index()
    return counts.reindex(day_index, fill_value=0).cumsum().astype("int64")


def compute_daily_retention(
    events_df: pd.DataFrame,
    day_index: pd.DatetimeIndex
) -> pd.Series:
    """
    Daily fraction of spaced reviews (elapsed_days >= 1) that were recalled.

    Same-day reviews (learning and relearning steps) are left out; a step
    graded a day or more after the previous review counts. Days without
    spaced reviews are NaN.
    """
    if events_df.empty or len(day_index) == 0:
        return pd.Series(dtype="float64")

    spaced = events_df[events_df["elapsed_days"] >= 1]
    if spaced.empty:
        return pd.Series(float("nan"), index=day_index, dtype="float64")

    recalled = spaced["grade"] > int(FeedbackGrade.AGAIN)
    daily = recalled.groupby(spaced["day_utc"]).mean()
    return daily.reindex(day_index).astype("float64")


def compute_learned_count(snapshots_df: pd.DataFrame, r_target: float) -> int:
    """
    Learned count: cards whose current retrievability is at or above the target.
    """
    if snapshots_df.empty:
        return 0
    return int((snapshots_df["retrievability"] >= r_target).sum())


def compute_due_forecast(
    snapshots_df: pd.DataFrame,
    now: datetime,
    days: int
) -> pd.Series:
    """
    Cards coming due on each of the next `days` days (day 0 includes overdue cards).
    """
    today = pd.Timestamp(now).tz_convert("UTC").floor("D")
    day_index = pd.date_range(start=today, periods=days, freq="D", tz="UTC")
    if snapshots_df.empty or days <= 0:
        return pd.Series(0, index=day_index, dtype="int64")

    due_days = snapshots_df["due_at"].dt.floor("D")
    due_days = due_days.where(due_days >= today, today)
    counts = due_days.value_counts()
    return counts.reindex(day_index, fill_value=0).astype("int64")
