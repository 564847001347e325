"""
Pydantic models for exporting a learner's progress.

The export is a plain JSON document: every card state and the full review
log, validated on the way out so a corrupt row fails loudly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from srs.fsrs.constants import D_MAX, CardStatus, FeedbackGrade


class CardStateExport(BaseModel):
    """One persisted memory state."""
    card_id: str
    stability: float = Field(..., ge=0.0)
    difficulty: float = Field(..., ge=0.0, le=D_MAX)
    state: CardStatus
    learning_step: int = Field(0, ge=0)
    reps: int = Field(..., ge=0)
    lapses: int = Field(..., ge=0)
    scheduled_days: int = Field(..., ge=0)
    elapsed_days: int = Field(..., ge=0)
    last_review_at: Optional[datetime] = None
    due_at: datetime


class ReviewEventExport(BaseModel):
    """One review log entry."""
    card_id: str
    lesson_id: str
    grade: FeedbackGrade
    timestamp: datetime
    scheduled_days: int = Field(..., ge=0)
    elapsed_days: int = Field(..., ge=0)
    state: CardStatus
    stability_after: float
    difficulty_after: float
    stability_before: Optional[float] = None
    difficulty_before: Optional[float] = None
    retrievability_before: Optional[float] = None
    context: Optional[str] = None
    duration_ms: Optional[int] = None


class UserDataExport(BaseModel):
    """Everything stored for one learner."""
    user_id: str
    exported_at: datetime
    card_states: list[CardStateExport] = Field(default_factory=list)
    review_events: list[ReviewEventExport] = Field(default_factory=list)
