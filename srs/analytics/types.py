"""
Types for analytics dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class ReviewDashboardData:
    """
    Precomputed metrics and series for a learner's progress page.
    """
    total_reviews: int
    studied_unique: int
    learned_current: int
    due_now: int
    daily_review_counts: pd.Series
    studied_cumulative_daily: pd.Series
    daily_retention: pd.Series
    due_forecast: pd.Series
