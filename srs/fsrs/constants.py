"""
FSRS Constants and Parameters

All default parameters for the scheduler in one place.
Runtime overrides live in the config module (SchedulerParameters).
"""

from datetime import timedelta
from enum import Enum, IntEnum


# ---- Grades ----

class FeedbackGrade(IntEnum):
    """Learner's self-reported recall outcome (internal four-level scale)."""
    AGAIN = 1   # Retrieval failed
    HARD = 2    # Retrieved with high effort
    GOOD = 3    # Retrieved normally
    EASY = 4    # Retrieved fluently


class BinaryGrade(str, Enum):
    """Two-button grade exposed by simplified review UIs."""
    FAIL = "fail"
    PASS = "pass"


# ---- Lifecycle ----

class CardStatus(IntEnum):
    """Lifecycle phase of a card. Values match the persisted column."""
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


# ---- Forgetting curve ----
# R(t) = (1 + FACTOR * t / S) ^ DECAY, chosen so that R(S) = 0.9

DECAY = -0.5
FACTOR = 19.0 / 81.0


# ---- Global Constants ----

R_TARGET = 0.90     # Target retention at the due date
S_MIN = 0.01        # Minimum stability (days)
D_MIN = 1.0         # Minimum difficulty
D_MAX = 10.0        # Maximum difficulty

MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 365  # Cap at 1 year between reviews


# ---- Steps ----

LEARNING_STEPS = (timedelta(minutes=10), timedelta(days=1))
RELEARNING_STEPS = (timedelta(minutes=10),)


# ---- Model weights (FSRS-4.5 defaults) ----
#  w0-w3   initial stability for AGAIN/HARD/GOOD/EASY
#  w4-w5   initial difficulty
#  w6      difficulty step per grade
#  w7      mean reversion toward the EASY prior
#  w8-w10  stability growth on recall
#  w11-w14 stability after a lapse
#  w15     HARD penalty
#  w16     EASY bonus

DEFAULT_WEIGHTS = (
    0.4872, 1.4003, 3.7145, 13.8206,
    5.1618, 1.2298,
    0.8975,
    0.031,
    1.6474, 0.1367, 1.0461,
    2.1072, 0.0793, 0.3246, 1.587,
    0.2272,
    2.8755,
)


# ---- Short-term (learning step) stability growth ----
# S' = S * exp(SHORT_TERM_GAIN * (grade - 3 + SHORT_TERM_OFFSET)), GOOD/EASY only

SHORT_TERM_GAIN = 0.5
SHORT_TERM_OFFSET = 0.25


# ---- Fuzz ----
# (lower bound days, upper bound days, fraction of interval)

FUZZ_RANGES = (
    (2.5, 7.0, 0.15),
    (7.0, 20.0, 0.10),
    (20.0, float("inf"), 0.05),
)
FUZZ_MIN_INTERVAL = 2.5  # Intervals shorter than this are never fuzzed
