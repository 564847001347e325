"""
FSRS - Free Spaced Repetition Scheduler

Scheduling engine for lesson review cards.

This package implements:
- Power forgetting curve: R = (1 + 19/81 * t/S) ^ -0.5
- Four-phase card lifecycle (New, Learning, Review, Relearning)
- Stability/difficulty updates driven by the learner's grade
- Deterministic interval fuzz
- Persistence of card state and an append-only review log

Quick start:
    from srs import fsrs

    engine = fsrs.get_engine("sqlite:///learning.db")
    fsrs.init_db(engine)
    orchestrator = fsrs.ReviewOrchestrator(fsrs.CardStateRepository(engine))
    orchestrator.record_review("card-1", "1.1", fsrs.BinaryGrade.PASS)

    # Algorithm only, no DB calls
    result = fsrs.schedule(state, fsrs.FeedbackGrade.GOOD, now)
"""

# Core scheduler API (algorithm logic)
from srs.fsrs.scheduler import ScheduleResult, preview, schedule, validate_state

# Orchestration
from srs.fsrs.scheduling import ReviewOrchestrator, ReviewOutcome

# Database API
from srs.fsrs.database import (
    CardStateRepository,
    StoredCardState,
    get_database_url,
    get_default_user_id,
    get_engine,
    init_db,
    is_test_mode,
    reset_db,
)

# Constants, grades and parameters
from srs.fsrs.constants import (
    BinaryGrade,
    CardStatus,
    FeedbackGrade,
    D_MAX,
    D_MIN,
    R_TARGET,
    S_MIN,
)
from srs.fsrs.config import DEFAULT_PARAMETERS, SchedulerParameters, load_parameters
from srs.fsrs.grades import to_feedback_grade
from srs.fsrs.errors import ConcurrentUpdateError, InvalidReviewError, PersistenceError

# Memory state
from srs.fsrs.memory_state import (
    MemoryState,
    forgetting_curve,
    get_retrievability,
    interval_for_retention,
    new_memory_state,
)
from srs.fsrs.review_log import ReviewEvent


__all__ = [
    # Core algorithm
    "schedule",
    "preview",
    "validate_state",
    "ScheduleResult",

    # Orchestration
    "ReviewOrchestrator",
    "ReviewOutcome",

    # Database operations
    "CardStateRepository",
    "StoredCardState",
    "get_database_url",
    "get_default_user_id",
    "get_engine",
    "init_db",
    "is_test_mode",
    "reset_db",

    # Enums
    "FeedbackGrade",
    "BinaryGrade",
    "CardStatus",
    "to_feedback_grade",

    # Errors
    "InvalidReviewError",
    "PersistenceError",
    "ConcurrentUpdateError",

    # Memory state
    "MemoryState",
    "ReviewEvent",
    "new_memory_state",
    "forgetting_curve",
    "interval_for_retention",
    "get_retrievability",

    # Parameters
    "SchedulerParameters",
    "DEFAULT_PARAMETERS",
    "load_parameters",
    "R_TARGET",
    "S_MIN",
    "D_MIN",
    "D_MAX",
]
