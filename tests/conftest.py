from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from srs.fsrs.constants import CardStatus
from srs.fsrs.database import CardStateRepository, init_db
from srs.fsrs.memory_state import MemoryState
from srs.fsrs.scheduling import ReviewOrchestrator

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_review_state(
    card_id="card-1",
    stability=10.0,
    difficulty=5.0,
    elapsed=12,
    scheduled_days=10,
    reps=5,
    lapses=0,
    now=NOW,
):
    """A card in steady-state Review, last reviewed `elapsed` days before `now`."""
    last = now - timedelta(days=elapsed)
    return MemoryState(
        card_id=card_id,
        stability=stability,
        difficulty=difficulty,
        state=CardStatus.REVIEW,
        learning_step=0,
        reps=reps,
        lapses=lapses,
        scheduled_days=scheduled_days,
        elapsed_days=8,
        last_review_at=last,
        due_at=last + timedelta(days=scheduled_days),
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    return CardStateRepository(engine, user_id="learner-1")


@pytest.fixture
def orchestrator(repository):
    return ReviewOrchestrator(repository, clock=lambda: NOW)
