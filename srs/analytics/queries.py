"""
Data-loading helpers for analytics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import pandas as pd

from srs.fsrs.database import CardStateRepository
from srs.fsrs.memory_state import get_retrievability

EVENT_COLUMNS = ["card_id", "lesson_id", "grade", "timestamp", "elapsed_days", "state", "context", "day_utc"]
SNAPSHOT_COLUMNS = ["card_id", "state", "stability", "retrievability", "due_at"]


def load_review_events_df(
    repository: CardStateRepository,
    since: Optional[datetime] = None
) -> pd.DataFrame:
    """
    Load a learner's review events into a dataframe, oldest first.
    """
    events = repository.get_review_events(since=since)
    if not events:
        return pd.DataFrame(columns=EVENT_COLUMNS)

    df = pd.DataFrame(
        [
            {
                "card_id": e.card_id,
                "lesson_id": e.lesson_id,
                "grade": int(e.grade),
                "timestamp": e.timestamp,
                "elapsed_days": e.elapsed_days,
                "state": int(e.state),
                "context": e.context,
            }
            for e in events
        ]
    )
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce").dt.as_unit("ns")
    df = df.dropna(subset=["card_id", "timestamp"])
    df["day_utc"] = df["timestamp"].dt.floor("D")
    df = df.sort_values("timestamp").reset_index(drop=True)
    return df


def load_card_snapshots_df(repository: CardStateRepository, now: datetime) -> pd.DataFrame:
    """
    Load current card states with retrievability computed at `now`.
    """
    states = repository.get_all_states()
    if not states:
        return pd.DataFrame(columns=SNAPSHOT_COLUMNS)

    df = pd.DataFrame(
        [
            {
                "card_id": s.card_id,
                "state": int(s.state),
                "stability": s.stability,
                "retrievability": get_retrievability(s, now),
                "due_at": s.due_at,
            }
            for s in states
        ]
    )
    df["due_at"] = pd.to_datetime(df["due_at"], utc=True).dt.as_unit("ns")
    return df
