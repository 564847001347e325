"""
SQLAlchemy ORM Models for FSRS Database

Defines the card_state and review_events tables.
"""

from sqlalchemy import Column, DateTime, Float, Index, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CardStateRecord(Base):
    """
    Persistent memory state for a single review card of a single learner.

    `version` is bumped on every update; SQLAlchemy adds it to the UPDATE's
    WHERE clause so a concurrent writer is detected instead of overwritten.
    """
    __tablename__ = 'card_state'

    # Primary key: composite of user_id and card_id
    user_id = Column(String(255), primary_key=True, nullable=False)
    card_id = Column(String(255), primary_key=True, nullable=False)

    # Long-term memory parameters
    stability = Column(Float, nullable=False)
    difficulty = Column(Float, nullable=False)

    # Lifecycle (0=New, 1=Learning, 2=Review, 3=Relearning)
    state = Column(Integer, nullable=False)
    learning_step = Column(Integer, nullable=False, default=0)

    # Review tracking
    reps = Column(Integer, nullable=False)
    lapses = Column(Integer, nullable=False)
    scheduled_days = Column(Integer, nullable=False)
    elapsed_days = Column(Integer, nullable=False)
    last_review_at = Column(DateTime(timezone=True), nullable=True)
    due_at = Column(DateTime(timezone=True), nullable=False)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        Index("ix_card_state_user_due", "user_id", "due_at"),
    )

    def __repr__(self):
        return f"<CardStateRecord({self.user_id}, {self.card_id}, v{self.version})>"


class ReviewEventRecord(Base):
    """
    Log entry for a single completed review.

    Captures the state before/after the review plus grade and timing.
    """
    __tablename__ = 'review_events'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # User scope and card identifiers
    user_id = Column(String(255), nullable=False)
    card_id = Column(String(255), nullable=False)
    lesson_id = Column(String(255), nullable=False)

    # Timing and feedback
    timestamp = Column(DateTime(timezone=True), nullable=False)
    feedback_grade = Column(Integer, nullable=False)  # 1=AGAIN, 2=HARD, 3=GOOD, 4=EASY
    duration_ms = Column(Integer, nullable=True)

    # State after review
    scheduled_days = Column(Integer, nullable=False)
    elapsed_days = Column(Integer, nullable=False)
    state = Column(Integer, nullable=False)
    stability_after = Column(Float, nullable=False)
    difficulty_after = Column(Float, nullable=False)

    # State before review
    stability_before = Column(Float, nullable=True)
    difficulty_before = Column(Float, nullable=True)
    retrievability_before = Column(Float, nullable=True)

    # Review context (optional, e.g. "inline", "review_session", "quiz")
    context = Column(String(50), nullable=True)

    __table_args__ = (
        Index("ix_review_events_user_card", "user_id", "card_id"),
        Index("ix_review_events_user_time", "user_id", "timestamp"),
    )

    def __repr__(self):
        return f"<ReviewEventRecord(id={self.id}, {self.card_id}, grade={self.feedback_grade})>"
